"""
API Routers - FastAPI endpoint definitions.
"""

from marketplace_chat.presentation.api.threads import router as threads_router
from marketplace_chat.presentation.api.inbox import router as inbox_router
from marketplace_chat.presentation.api.events import router as events_router

__all__ = [
    "threads_router",
    "inbox_router",
    "events_router",
]

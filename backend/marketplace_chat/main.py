"""
ASGI entry point: uvicorn marketplace_chat.main:app

Builds the production container (Prisma + Redis + JWT) at import time,
because dishka adds middleware, which must happen before the app starts.
"""

from marketplace_chat.config.logging_config import setup_logging
from marketplace_chat.config.settings import get_config
from marketplace_chat.fastapi_app import create_fastapi_app
from marketplace_chat.setup.ioc.container import create_container

settings = get_config()
setup_logging(settings.LOG_LEVEL, settings.LOG_PATH)

container = create_container()
app = create_fastapi_app(container)

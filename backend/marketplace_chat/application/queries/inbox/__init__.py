from marketplace_chat.application.queries.inbox.list_lister_inbox import (
    ListListerInboxHandler,
    ListListerInboxQuery,
)
from marketplace_chat.application.queries.inbox.list_client_inbox import (
    ListClientInboxHandler,
    ListClientInboxQuery,
)

__all__ = [
    "ListListerInboxQuery",
    "ListListerInboxHandler",
    "ListClientInboxQuery",
    "ListClientInboxHandler",
]

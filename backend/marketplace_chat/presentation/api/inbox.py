"""
Chat Inbox API Router.

Query parameters are forwarded as raw filters; the use case validates them,
so a malformed property_id comes back as INVALID_FILTERS like any other
caller of ListListerInbox / ListClientInbox.

    GET /chat/inbox/lister?property_id=&contact_id=&unread_only=&search=&page_size=
    GET /chat/inbox/client?contact_id=&search=
"""

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, Request

from marketplace_chat.application.dto import ClientInboxDTO, ListerInboxDTO
from marketplace_chat.application.queries.inbox import (
    ListClientInboxHandler,
    ListClientInboxQuery,
    ListListerInboxHandler,
    ListListerInboxQuery,
)
from marketplace_chat.presentation.dependencies.auth import security
from marketplace_chat.presentation.errors import unwrap

router = APIRouter(prefix="/chat/inbox", tags=["inbox"], dependencies=[Depends(security)])


@router.get("/lister", response_model=ListerInboxDTO)
@inject
async def lister_inbox(
    request: Request,
    handler: FromDishka[ListListerInboxHandler],
) -> ListerInboxDTO:
    """Threads visible to the signed-in lister, grouped by listing."""
    result = await handler.execute(ListListerInboxQuery(filters=dict(request.query_params)))
    return unwrap(result)


@router.get("/client", response_model=ClientInboxDTO)
@inject
async def client_inbox(
    request: Request,
    handler: FromDishka[ListClientInboxHandler],
) -> ClientInboxDTO:
    """Flat list of the caller's threads, most recent first."""
    result = await handler.execute(ListClientInboxQuery(filters=dict(request.query_params)))
    return unwrap(result)

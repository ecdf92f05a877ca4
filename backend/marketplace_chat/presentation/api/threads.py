"""
Chat Threads API Router - threads and their messages.

Guidelines:
- Receives handlers via Dependency Injection (Dishka)
- Thin layer: builds the Command/Query, executes it, unwraps the Result
- A failed Result re-raises its ChatError; the app-level handler turns it
  into {"error": {"code", "message"}} with the mapped status

Flow:
  HTTP Request → Router → Command/Query → Handler → Repository → Database
                                     ↓
  HTTP Response ← Router ← unwrap(Result) ←
"""

from logging import getLogger
from typing import Any, Optional

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from marketplace_chat.application.commands.messages import (
    MarkThreadAsReadCommand,
    MarkThreadAsReadHandler,
    SendMessageCommand,
    SendMessageHandler,
)
from marketplace_chat.application.commands.threads import (
    FindOrCreateThreadCommand,
    FindOrCreateThreadHandler,
)
from marketplace_chat.application.dto import ChatMessageDTO, ChatThreadDTO, Page
from marketplace_chat.application.queries.messages import (
    ListMessagesHandler,
    ListMessagesQuery,
)
from marketplace_chat.presentation.dependencies.auth import security
from marketplace_chat.presentation.errors import unwrap

logger = getLogger(__name__)

router = APIRouter(prefix="/chat/threads", tags=["chat"], dependencies=[Depends(security)])


# ==================== REQUEST/RESPONSE MODELS ====================


class FindOrCreateThreadRequest(BaseModel):
    """Request body for opening the conversation about a listing."""

    property_id: str
    org_id: Optional[str] = None
    lister_user_id: Optional[str] = None


class SendMessageRequest(BaseModel):
    """
    Request body for sending a message.

    payload stays untyped here so a non-object payload is reported as
    PAYLOAD_INVALID by the use case rather than as a schema error.
    """

    body: str
    payload: Optional[Any] = None


class MarkThreadAsReadResponse(BaseModel):
    success: bool


# ==================== ENDPOINTS ====================


@router.post("", response_model=ChatThreadDTO)
@inject
async def find_or_create_thread(
    request: FindOrCreateThreadRequest,
    handler: FromDishka[FindOrCreateThreadHandler],
) -> ChatThreadDTO:
    """Return the caller's thread for a listing, creating it on first contact."""
    result = await handler.execute(
        FindOrCreateThreadCommand(
            property_id=request.property_id,
            org_id=request.org_id,
            lister_user_id=request.lister_user_id,
        )
    )
    return unwrap(result)


@router.get("/{thread_id}/messages", response_model=Page[ChatMessageDTO])
@inject
async def list_messages(
    thread_id: str,
    handler: FromDishka[ListMessagesHandler],
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
) -> Page[ChatMessageDTO]:
    """One page of the thread, oldest first. page_size is clamped to CHAT_MAX_PAGE_SIZE."""
    result = await handler.execute(
        ListMessagesQuery(thread_id=thread_id, page=page, page_size=page_size)
    )
    return unwrap(result)


@router.post(
    "/{thread_id}/messages",
    response_model=ChatMessageDTO,
    status_code=status.HTTP_201_CREATED,
)
@inject
async def send_message(
    thread_id: str,
    request: SendMessageRequest,
    handler: FromDishka[SendMessageHandler],
) -> ChatMessageDTO:
    result = await handler.execute(
        SendMessageCommand(thread_id=thread_id, body=request.body, payload=request.payload)
    )
    return unwrap(result)


@router.post("/{thread_id}/read", response_model=MarkThreadAsReadResponse)
@inject
async def mark_thread_as_read(
    thread_id: str,
    handler: FromDishka[MarkThreadAsReadHandler],
) -> MarkThreadAsReadResponse:
    unwrap(await handler.execute(MarkThreadAsReadCommand(thread_id=thread_id)))
    logger.debug(f"[Threads] Thread {thread_id} marked as read")
    return MarkThreadAsReadResponse(success=True)

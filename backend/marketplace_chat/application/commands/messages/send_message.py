"""
Send Message Command.

Flow:
1. Validate thread id, body (trimmed, 1..2000 chars) and payload
2. Authorize: the caller must be a user or contact participant of the thread
3. Refuse archived threads
4. Create the message through the repository (no retry)
5. Record it on the thread and push last_message_at forward

A failed last_message_at update after a successful insert is logged, not
returned: the message exists, and failing would invite a duplicate resend.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.common.result import Result, capture
from marketplace_chat.application.dto import ChatMessageDTO
from marketplace_chat.application.mappers import from_domain_message, to_domain_message
from marketplace_chat.application.ports import (
    AuthService,
    ChatMessageRepository,
    ChatThreadRepository,
)
from marketplace_chat.application.services.thread_access import ThreadAccess
from marketplace_chat.application.services.validation import parse_payload, require_uuid
from marketplace_chat.domain.clock import format_timestamp
from marketplace_chat.domain.enums import SenderType
from marketplace_chat.domain.exceptions import (
    AccessDeniedError,
    ChatError,
    ChatErrorCode,
)
from marketplace_chat.domain.value_objects import MessageBody

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendMessageCommand(Command[ChatMessageDTO]):
    thread_id: str
    body: str
    payload: Optional[dict[str, Any]] = None


class SendMessageHandler(CommandHandler[ChatMessageDTO]):
    def __init__(
        self,
        message_repository: ChatMessageRepository,
        thread_repository: ChatThreadRepository,
        auth_service: AuthService,
    ):
        self._message_repository = message_repository
        self._thread_repository = thread_repository
        self._access = ThreadAccess(thread_repository, auth_service)

    async def execute(self, command: SendMessageCommand) -> Result[ChatMessageDTO]:
        return await capture(self._send(command))

    async def _send(self, command: SendMessageCommand) -> ChatMessageDTO:
        require_uuid(command.thread_id, ChatErrorCode.INVALID_THREAD_ID, "thread id")
        body = MessageBody.create(command.body)
        payload = parse_payload(command.payload)

        access = await self._access.authorize(command.thread_id, ChatErrorCode.SENDER_MISSING)
        thread = access.thread
        if thread.is_archived:
            raise AccessDeniedError(
                "This conversation is archived", ChatErrorCode.THREAD_ARCHIVED
            )

        created = await self._message_repository.create(
            thread_id=command.thread_id,
            sender_type=SenderType(access.identity.kind),
            sender_id=access.identity.id,
            body=body.value,
            payload=payload,
        )
        message = to_domain_message(created)
        thread.record_message(message)

        try:
            await self._thread_repository.touch_last_message_at(
                str(thread.id), format_timestamp(thread.last_message_at or message.created_at)
            )
        except ChatError as e:
            logger.warning(
                f"[SendMessage] Message {message.id} stored but thread {thread.id} "
                f"last_message_at not updated: {e.message}"
            )

        logger.info(
            f"[SendMessage] {message.sender_type.value} {message.sender_id} "
            f"sent message {message.id} in thread {thread.id}"
        )
        return from_domain_message(message)

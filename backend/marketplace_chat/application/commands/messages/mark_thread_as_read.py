"""
Mark Thread As Read Command.

Marks every message that is unread for the caller as read and delivered, in
one batch with one timestamp. Messages arriving after the call stay unread.
"""

import logging
from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.common.result import Result, capture
from marketplace_chat.application.ports import (
    AuthService,
    ChatMessageRepository,
    ChatThreadRepository,
)
from marketplace_chat.application.services.thread_access import ThreadAccess
from marketplace_chat.domain.exceptions import ChatErrorCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkThreadAsReadCommand(Command[None]):
    thread_id: str


class MarkThreadAsReadHandler(CommandHandler[None]):
    def __init__(
        self,
        message_repository: ChatMessageRepository,
        thread_repository: ChatThreadRepository,
        auth_service: AuthService,
    ):
        self._message_repository = message_repository
        self._access = ThreadAccess(thread_repository, auth_service)

    async def execute(self, command: MarkThreadAsReadCommand) -> Result[None]:
        return await capture(self._mark_read(command))

    async def _mark_read(self, command: MarkThreadAsReadCommand) -> None:
        access = await self._access.authorize(command.thread_id, ChatErrorCode.READER_MISSING)
        identity = access.identity
        await self._message_repository.mark_thread_as_read(
            thread_id=command.thread_id,
            reader_type=identity.participant_type,
            reader_id=identity.id,
        )
        logger.info(f"[MarkThreadAsRead] Thread {command.thread_id} read by {identity.kind} {identity.id}")

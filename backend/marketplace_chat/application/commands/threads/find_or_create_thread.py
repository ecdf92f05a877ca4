"""
Find Or Create Thread Command.

One thread per (listing, initiating user). An existing thread is returned
unchanged; otherwise a thread is created with participants [caller, lister].

The thread belongs to the caller's org. Buyers usually have none, in which
case the org_id from the request is used (and may itself be None).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.application.common.result import Result, capture
from marketplace_chat.application.dto import ChatThreadDTO
from marketplace_chat.application.ports import AuthService, ChatThreadRepository
from marketplace_chat.application.services.validation import require_uuid
from marketplace_chat.domain.exceptions import ChatErrorCode, IdentityMissingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FindOrCreateThreadCommand(Command[ChatThreadDTO]):
    property_id: str
    org_id: Optional[str] = None
    lister_user_id: Optional[str] = None


class FindOrCreateThreadHandler(CommandHandler[ChatThreadDTO]):
    def __init__(self, thread_repository: ChatThreadRepository, auth_service: AuthService):
        self._thread_repository = thread_repository
        self._auth_service = auth_service

    async def execute(self, command: FindOrCreateThreadCommand) -> Result[ChatThreadDTO]:
        return await capture(self._find_or_create(command))

    async def _find_or_create(self, command: FindOrCreateThreadCommand) -> ChatThreadDTO:
        require_uuid(command.property_id, ChatErrorCode.INVALID_PROPERTY_ID, "property id")
        if command.lister_user_id is not None:
            require_uuid(command.lister_user_id, ChatErrorCode.INVALID_LISTER_ID, "lister id")

        profile = await self._auth_service.get_current()
        if not profile.user_id:
            raise IdentityMissingError(
                "You must be signed in to start a conversation", ChatErrorCode.USER_REQUIRED
            )

        existing = await self._thread_repository.find_by_property_and_user(
            command.property_id, profile.user_id
        )
        if existing is not None:
            return existing

        participant_user_ids = [profile.user_id]
        if command.lister_user_id and command.lister_user_id != profile.user_id:
            participant_user_ids.append(command.lister_user_id)

        thread = await self._thread_repository.create(
            org_id=profile.org_id or command.org_id,
            property_id=command.property_id,
            created_by=profile.user_id,
            participant_user_ids=participant_user_ids,
        )
        logger.info(
            f"[FindOrCreateThread] Created thread {thread.id} for property "
            f"{command.property_id} with {len(participant_user_ids)} participants"
        )
        return thread

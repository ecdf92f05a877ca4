"""
Thread access - identity resolution and the authorization check shared by
every thread-scoped use case.

Resolving who the caller is inside a thread is the authorization decision:
the resolved kind becomes the caller's sender/reader type.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from marketplace_chat.application.mappers import to_domain_thread
from marketplace_chat.application.ports import AuthProfile, AuthService, ChatThreadRepository
from marketplace_chat.application.services.validation import require_uuid
from marketplace_chat.domain.entities import ChatThread
from marketplace_chat.domain.enums import ParticipantType
from marketplace_chat.domain.exceptions import (
    AccessDeniedError,
    ChatErrorCode,
    EntityNotFoundError,
    IdentityMissingError,
)

IdentityKind = Literal["user", "contact", "none"]


@dataclass(frozen=True)
class CallerIdentity:
    kind: IdentityKind
    id: Optional[str] = None

    @classmethod
    def none(cls) -> "CallerIdentity":
        return cls("none")

    @property
    def participant_type(self) -> ParticipantType:
        if self.kind == "none":
            raise ValueError("Caller is not a participant")
        return ParticipantType(self.kind)


def resolve_identity(thread: ChatThread, profile: AuthProfile) -> CallerIdentity:
    if profile.user_id and thread.find_participant(ParticipantType.USER, profile.user_id):
        return CallerIdentity("user", profile.user_id)
    if profile.contact_id and thread.find_participant(
        ParticipantType.CONTACT, profile.contact_id
    ):
        return CallerIdentity("contact", profile.contact_id)
    return CallerIdentity.none()


@dataclass(frozen=True)
class AuthorizedThread:
    thread: ChatThread
    identity: CallerIdentity
    profile: AuthProfile


class ThreadAccess:
    def __init__(self, thread_repository: ChatThreadRepository, auth_service: AuthService):
        self._thread_repository = thread_repository
        self._auth_service = auth_service

    async def authorize(self, thread_id: str, missing_code: ChatErrorCode) -> AuthorizedThread:
        """
        Load the thread and decide who the caller is in it.

        Raises:
            DomainValidationError: thread_id is not UUID-shaped
            IdentityMissingError: the session has no usable user or contact id
            EntityNotFoundError: no such thread
            AccessDeniedError: the caller is not a participant
        """
        require_uuid(thread_id, ChatErrorCode.INVALID_THREAD_ID, "thread id")
        profile = await self._auth_service.get_current()
        if not profile.user_id and not profile.contact_id:
            raise IdentityMissingError("No sender or reader identity in session", missing_code)

        dto = await self._thread_repository.get_by_id(thread_id)
        if dto is None:
            raise EntityNotFoundError(f"Thread {thread_id} not found")

        thread = to_domain_thread(dto)
        identity = resolve_identity(thread, profile)
        if identity.kind == "none":
            raise AccessDeniedError("You are not a participant of this thread")
        if not identity.id:
            raise IdentityMissingError("Caller identity has no usable id", missing_code)
        return AuthorizedThread(thread=thread, identity=identity, profile=profile)

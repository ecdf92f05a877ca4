"""Thread, participant and filter DTOs."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from marketplace_chat.application.dto.common import Timestamp
from marketplace_chat.application.dto.message import ChatMessageDTO
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.enums import ParticipantType, ThreadAudience, ThreadStatus
from marketplace_chat.domain.value_objects import UniqueEntityID


class ChatParticipantDTO(BaseModel):
    id: str
    type: ParticipantType
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    last_seen_at: Optional[Timestamp] = None


class PropertySummaryDTO(BaseModel):
    """Denormalized listing summary shown next to a thread."""

    id: str
    title: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    cover_image_url: Optional[str] = None
    operation_type: Optional[str] = None
    status: Optional[str] = None


class ChatThreadDTO(BaseModel):
    id: str
    org_id: Optional[str] = None
    property: Optional[PropertySummaryDTO] = None
    contact_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Timestamp
    last_message_at: Optional[Timestamp] = None
    unread_count: int = Field(default=0, ge=0)
    status: ThreadStatus = ThreadStatus.OPEN
    participants: list[ChatParticipantDTO] = Field(default_factory=list)
    last_message: Optional[ChatMessageDTO] = None


class ThreadFiltersDTO(BaseModel):
    """
    Listing filters. page_size is bounded by THREAD_MAX_PAGE_SIZE.

    perspective is validated and otherwise ignored: the endpoint called
    (lister or client inbox) decides the audience.
    """

    property_id: Optional[str] = None
    contact_id: Optional[str] = None
    unread_only: bool = False
    search: Optional[str] = None
    perspective: Optional[ThreadAudience] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=Config.THREAD_MAX_PAGE_SIZE)

    @field_validator("property_id", "contact_id")
    @classmethod
    def _uuid_shaped(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not UniqueEntityID.is_valid(value):
            raise ValueError("must be a UUID")
        return value

    @field_validator("search")
    @classmethod
    def _trimmed(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

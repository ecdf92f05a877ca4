"""Input validation shared by the use cases. Failures raise DomainValidationError."""

from typing import Any, Optional, Union

from pydantic import ValidationError

from marketplace_chat.application.dto import ThreadFiltersDTO
from marketplace_chat.domain.exceptions import ChatErrorCode, DomainValidationError
from marketplace_chat.domain.value_objects import UniqueEntityID


def require_uuid(value: Any, code: ChatErrorCode, label: str) -> str:
    if not UniqueEntityID.is_valid(value):
        raise DomainValidationError(f"Invalid {label}: {value!r}", code)
    return value


def parse_payload(payload: Any) -> Optional[dict[str, Any]]:
    if payload is None or isinstance(payload, dict):
        return payload
    raise DomainValidationError(
        "Message payload must be an object", ChatErrorCode.PAYLOAD_INVALID
    )


def parse_thread_filters(
    raw: Union[ThreadFiltersDTO, dict[str, Any], None],
) -> ThreadFiltersDTO:
    if isinstance(raw, ThreadFiltersDTO):
        return raw
    try:
        return ThreadFiltersDTO.model_validate(raw or {})
    except ValidationError as e:
        raise DomainValidationError(
            "Invalid thread filters",
            ChatErrorCode.INVALID_FILTERS,
            {"errors": e.errors(include_url=False, include_context=False)},
        ) from e

"""
DOMAIN EXCEPTIONS - Business rule violations

Expected failures derive from ChatError and carry a machine-readable code.
Use cases turn them into failed Results; the presentation layer maps codes to
HTTP status codes.

InvariantViolationError is a programming error and is never turned into a
Result.
"""

from marketplace_chat.domain.exceptions.chat_error import ChatError, ChatErrorCode
from marketplace_chat.domain.exceptions.entity_not_found import EntityNotFoundError
from marketplace_chat.domain.exceptions.access_denied import AccessDeniedError
from marketplace_chat.domain.exceptions.validation_error import DomainValidationError
from marketplace_chat.domain.exceptions.identity_missing import IdentityMissingError
from marketplace_chat.domain.exceptions.infrastructure_error import InfrastructureError
from marketplace_chat.domain.exceptions.invariant_violation import (
    InvariantViolationError,
)

__all__ = [
    "ChatError",
    "ChatErrorCode",
    "EntityNotFoundError",
    "AccessDeniedError",
    "DomainValidationError",
    "IdentityMissingError",
    "InfrastructureError",
    "InvariantViolationError",
]

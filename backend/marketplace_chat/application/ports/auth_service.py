"""
Auth Service Port - Session lookup for the current caller.
Implementations:
    marketplace_chat/infrastructure/auth/jwt_auth_service.py
    marketplace_chat/infrastructure/memory/static_auth_service.py
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthProfile:
    user_id: Optional[str] = None
    org_id: Optional[str] = None
    contact_id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None


class AuthService(ABC):
    @abstractmethod
    async def get_current(self) -> AuthProfile:
        """Raise IdentityMissingError(UNAUTHENTICATED) when there is no session."""
        ...

"""AuthService returning a fixed profile. Reassign `profile` to switch caller."""

from typing import Optional

from marketplace_chat.application.ports import AuthProfile, AuthService
from marketplace_chat.domain.exceptions import ChatErrorCode, IdentityMissingError


class StaticAuthService(AuthService):
    def __init__(self, profile: Optional[AuthProfile] = None):
        self.profile = profile

    async def get_current(self) -> AuthProfile:
        if self.profile is None:
            raise IdentityMissingError("Authentication required", ChatErrorCode.UNAUTHENTICATED)
        return self.profile

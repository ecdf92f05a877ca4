"""
JWT AuthService.

Decodes the caller's bearer token with the service secret, issuer and
audience into an AuthProfile. Expected claims:
    user_id (or sub)   platform user id; sub is ignored when contact_id is set
    org_id, contact_id, full_name (or name), email, phone, role
"""

import logging
from typing import Optional

import jwt

from marketplace_chat.application.ports import AuthProfile, AuthService
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.exceptions import ChatErrorCode, IdentityMissingError

logger = logging.getLogger(__name__)


class JwtAuthService(AuthService):
    def __init__(
        self,
        token: Optional[str],
        secret: Optional[str] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
    ):
        self._token = token
        self._secret = secret if secret is not None else Config.SERVICE_AUTH_SECRET
        self._issuer = issuer if issuer is not None else Config.SERVICE_AUTH_ISSUER
        self._audience = audience if audience is not None else Config.SERVICE_AUTH_AUDIENCE
        self._profile: Optional[AuthProfile] = None

    @classmethod
    def from_authorization_header(cls, header: Optional[str], **kwargs) -> "JwtAuthService":
        token = None
        if header:
            scheme, _, value = header.partition(" ")
            if scheme.lower() == "bearer" and value.strip():
                token = value.strip()
        return cls(token, **kwargs)

    async def get_current(self) -> AuthProfile:
        if self._profile is None:
            self._profile = self._decode()
        return self._profile

    def _decode(self) -> AuthProfile:
        if not self._token:
            raise IdentityMissingError("Authentication required", ChatErrorCode.UNAUTHENTICATED)
        try:
            claims = jwt.decode(
                self._token,
                self._secret,
                algorithms=["HS256"],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "iat", "aud", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            raise IdentityMissingError("Token has expired", ChatErrorCode.UNAUTHENTICATED)
        except jwt.InvalidTokenError as e:
            logger.info(f"[Auth] Rejected token: {e}")
            raise IdentityMissingError(f"Invalid token: {e}", ChatErrorCode.UNAUTHENTICATED)

        contact_id = claims.get("contact_id")
        # contact sessions use sub for the contact itself
        user_id = claims.get("user_id") or (None if contact_id else claims.get("sub"))
        if not user_id and not contact_id:
            raise IdentityMissingError(
                "Token carries neither a user nor a contact id", ChatErrorCode.UNAUTHENTICATED
            )

        return AuthProfile(
            user_id=user_id,
            org_id=claims.get("org_id"),
            contact_id=contact_id,
            full_name=claims.get("full_name") or claims.get("name"),
            email=claims.get("email"),
            phone=claims.get("phone"),
            role=claims.get("role"),
        )

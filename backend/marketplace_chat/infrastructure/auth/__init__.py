from marketplace_chat.infrastructure.auth.jwt_auth_service import JwtAuthService

__all__ = ["JwtAuthService"]

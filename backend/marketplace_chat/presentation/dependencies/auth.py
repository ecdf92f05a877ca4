"""
Authentication for FastAPI.

Guidelines:
- HTTP routes read the bearer token from the Authorization header
- WebSocket clients cannot set headers from a browser, so the token travels
  as the ?token= query parameter
- Decoding and claim mapping live in JwtAuthService; an invalid or missing
  token surfaces as IdentityMissingError (401) when a use case asks for the
  current profile

`security` only documents the scheme in OpenAPI (auto_error is off).
"""

from fastapi import Request, WebSocket
from fastapi.security import HTTPBearer

from marketplace_chat.application.ports import AuthService
from marketplace_chat.infrastructure.auth import JwtAuthService

security = HTTPBearer(auto_error=False)


def auth_service_from_request(request: Request) -> AuthService:
    return JwtAuthService.from_authorization_header(request.headers.get("Authorization"))


def auth_service_from_websocket(websocket: WebSocket) -> AuthService:
    token = websocket.query_params.get("token")
    if token:
        return JwtAuthService(token)
    return JwtAuthService.from_authorization_header(websocket.headers.get("Authorization"))

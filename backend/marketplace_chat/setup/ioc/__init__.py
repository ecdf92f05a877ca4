"""
Dependency injection (dishka).

- handlers.py   request-scoped AuthService and use-case handlers
- container.py  Prisma/Redis adapters and the production container

handlers.py imports no storage driver, so tests can combine HandlerProvider
with their own provider for the ports.
"""

from marketplace_chat.setup.ioc.handlers import HandlerProvider

__all__ = ["HandlerProvider"]

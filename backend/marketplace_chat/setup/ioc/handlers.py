"""
Use-case wiring.

Handlers are request-scoped and receive the ports by their ABSTRACT type;
whichever provider is combined with this one decides the implementation
(Prisma/Redis in production, in-memory in tests).

Flow:
  Request → AuthService (JWT from the Authorization header)
                  ↓
  ChatThreadRepository + ChatMessageRepository + AuthService → Handler
"""

from dishka import Provider, Scope, provide
from fastapi import Request

from marketplace_chat.application.commands.messages import (
    MarkThreadAsReadHandler,
    SendMessageHandler,
)
from marketplace_chat.application.commands.threads import FindOrCreateThreadHandler
from marketplace_chat.application.ports import (
    AuthService,
    ChatMessageRepository,
    ChatThreadRepository,
)
from marketplace_chat.application.queries.inbox import (
    ListClientInboxHandler,
    ListListerInboxHandler,
)
from marketplace_chat.application.queries.messages import ListMessagesHandler
from marketplace_chat.presentation.dependencies.auth import auth_service_from_request


class HandlerProvider(Provider):
    """Registers the AuthService and the six chat use cases."""

    # ==================== AUTH ====================

    @provide(scope=Scope.REQUEST)
    def get_auth_service(self, request: Request) -> AuthService:
        """
        Provide the caller's AuthService.

        - Scope.REQUEST = one per HTTP request, so the decoded profile is
          cached for exactly one request
        """
        return auth_service_from_request(request)

    # ==================== COMMAND HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_send_message_handler(
        self,
        message_repository: ChatMessageRepository,
        thread_repository: ChatThreadRepository,
        auth_service: AuthService,
    ) -> SendMessageHandler:
        return SendMessageHandler(message_repository, thread_repository, auth_service)

    @provide(scope=Scope.REQUEST)
    def get_mark_thread_as_read_handler(
        self,
        message_repository: ChatMessageRepository,
        thread_repository: ChatThreadRepository,
        auth_service: AuthService,
    ) -> MarkThreadAsReadHandler:
        return MarkThreadAsReadHandler(message_repository, thread_repository, auth_service)

    @provide(scope=Scope.REQUEST)
    def get_find_or_create_thread_handler(
        self, thread_repository: ChatThreadRepository, auth_service: AuthService
    ) -> FindOrCreateThreadHandler:
        return FindOrCreateThreadHandler(thread_repository, auth_service)

    # ==================== QUERY HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_list_messages_handler(
        self,
        message_repository: ChatMessageRepository,
        thread_repository: ChatThreadRepository,
        auth_service: AuthService,
    ) -> ListMessagesHandler:
        return ListMessagesHandler(message_repository, thread_repository, auth_service)

    @provide(scope=Scope.REQUEST)
    def get_list_lister_inbox_handler(
        self, thread_repository: ChatThreadRepository, auth_service: AuthService
    ) -> ListListerInboxHandler:
        return ListListerInboxHandler(thread_repository, auth_service)

    @provide(scope=Scope.REQUEST)
    def get_list_client_inbox_handler(
        self, thread_repository: ChatThreadRepository, auth_service: AuthService
    ) -> ListClientInboxHandler:
        return ListClientInboxHandler(thread_repository, auth_service)

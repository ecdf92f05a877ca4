"""
Base interfaces for CQRS pattern.

Handlers never raise for expected failures: execute() returns a Result.

Usage:
    @dataclass(frozen=True)
    class ListMessagesQuery(Query[Page[ChatMessageDTO]]):
        thread_id: str

    class ListMessagesHandler(QueryHandler[Page[ChatMessageDTO]]):
        def __init__(self, message_repository: ChatMessageRepository):
            self._message_repository = message_repository

        async def execute(self, query: ListMessagesQuery) -> Result[Page[ChatMessageDTO]]:
            return await capture(self._list(query))
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from marketplace_chat.application.common.result import Result

T = TypeVar("T")


class Command(ABC, Generic[T]):
    """Base class for write operations"""

    pass


class CommandHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, command: Command[T]) -> Result[T]:
        """Execute the command and return a Result wrapping T"""
        ...


class Query(ABC, Generic[T]):
    """Base class for read operations"""

    pass


class QueryHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, query: Query[T]) -> Result[T]:
        """Execute the query and return a Result wrapping T"""
        ...

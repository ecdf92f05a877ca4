"""
Result - explicit success/failure value returned by every use case.

Expected failures (ChatError) become Result.fail; anything else is a bug and
propagates to the caller.
"""

from __future__ import annotations

from typing import Awaitable, Generic, Optional, TypeVar

from marketplace_chat.domain.exceptions import ChatError

T = TypeVar("T")


class Result(Generic[T]):
    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[ChatError] = None):
        self._value = value
        self._error = error

    @classmethod
    def ok(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, error: ChatError) -> Result[T]:
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is a failure: {self._error!r}")
        return self._value  # type: ignore[return-value]

    @property
    def error(self) -> ChatError:
        if self._error is None:
            raise ValueError("Result is a success and carries no error")
        return self._error

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Result.ok({self._value!r})"
        return f"Result.fail({self._error!r})"


async def capture(operation: Awaitable[T]) -> Result[T]:
    try:
        return Result.ok(await operation)
    except ChatError as error:
        return Result.fail(error)

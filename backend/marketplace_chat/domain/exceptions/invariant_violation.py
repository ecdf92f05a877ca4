"""
InvariantViolationError - A domain invariant was broken (e.g. out-of-order timestamps).

This is a programming error, not an expected failure: it is deliberately not a
ChatError, so use cases let it propagate.
"""


class InvariantViolationError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

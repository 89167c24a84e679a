from __future__ import annotations


class QuoteError(Exception):
    """Base class for errors raised while pricing or storing proposals."""


class InvalidInput(QuoteError, ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class MissingConfiguration(QuoteError, LookupError):
    """A tier or loan product needed for a quote has no record."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"No {kind} configured for {key!r}")
        self.kind = kind
        self.key = key


class NotFound(QuoteError, LookupError):
    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


__all__ = ["QuoteError", "InvalidInput", "MissingConfiguration", "NotFound"]

"""Exceptions raised by the query engine."""

from __future__ import annotations


class WikiQueryError(Exception):
    """Base exception for wikiquery errors."""


class UnsetParameterError(WikiQueryError):
    """Raised when a query is sent with a placeholder parameter still unset."""

    def __init__(self, missing: list[str], parameters: dict[str, str | None]) -> None:
        self.missing = missing
        super().__init__(f"Fill in *all* the unset parameters {missing} -> {parameters}")


class TransportError(WikiQueryError):
    """Raised by the transport when a request fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)

"""Custom exception hierarchy for fbtransport."""

from __future__ import annotations


class TransportError(Exception):
    """Base exception for all fbtransport errors."""


class TransportConfigError(TransportError):
    """Invalid or missing configuration."""


class InvalidArgumentError(TransportError, ValueError):
    """A required ``id`` or ``band`` was missing.

    Always raised before the store is touched.
    """


class StoreError(TransportError):
    """The database SDK failed a read, write, delete or subscription."""

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        operation: str = "",
    ) -> None:
        self.path = path
        self.operation = operation
        super().__init__(message)

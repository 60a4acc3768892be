"""Exceptions raised by the memory store."""


class MemoryStoreError(RuntimeError):
    """Base class for errors raised by fitmemory itself.

    Driver errors (network, permission) are not wrapped; they reach the
    caller as raised by the database client.
    """


class InvalidMemoryError(MemoryStoreError, ValueError):
    """Raised when a caller passes a fact that cannot be stored."""

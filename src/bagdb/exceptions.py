"""Exceptions raised by the bagdb document-store layer."""

from __future__ import annotations


class BagDbError(Exception):
    """Root exception for the entire bagdb package."""


class ConfigurationError(BagDbError):
    """Raised when a required option is missing or invalid.

    Never retried; fix the configuration and resolve again.
    """


class StoreConnectionError(BagDbError):
    """Raised when an endpoint is malformed or cannot be reached.

    Failed attempts are never cached, so resolving the same endpoint again
    starts over from scratch.
    """

    def __init__(self, endpoint: str, reason: str | None = None) -> None:
        self.endpoint = endpoint
        self.reason = reason
        msg = f"Failed to connect to '{endpoint}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class TranslationError(BagDbError):
    """Raised when criteria or document text cannot be turned into a document."""


class BackendOperationError(BagDbError):
    """Raised when the backend fails an insert, find, delete, drop or count.

    The driver exception is always available as ``__cause__``.
    """

    def __init__(self, operation: str, collection: str, detail: str = "") -> None:
        self.operation = operation
        self.collection = collection
        msg = f"Backend error during '{operation}' on '{collection}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)

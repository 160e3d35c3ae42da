# ABOUTME: Error vocabulary of the reconciler layer
# ABOUTME: Every failure reported to the orchestration engine is a ReconcileError

"""
Errors raised by reconcilers and data lookups.

Each error carries a short summary (the diagnostic's title) and a detail
line (its body), which is how the orchestration engine shows failures:

    Client Error
        Unable to create gateway, got error: ContextForge API error (409): ...

Client-layer errors (utils.client.ContextForgeError) never escape a
reconciler unwrapped; they are translated into ReconcileError and chained
as __cause__.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base class for everything a reconciler or data lookup raises."""

    def __init__(self, summary: str, detail: str) -> None:
        self.summary = summary
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.summary}: {self.detail}"


class SchemaValidationError(ReconcileError):
    """
    Declared configuration is invalid.

    Raised before any network call, so nothing has been changed remotely.
    """

    def __init__(self, attribute: str, detail: str, summary: str = "Invalid Attribute Value") -> None:
        self.attribute = attribute
        super().__init__(summary, f"{attribute}: {detail}")


class SerializationError(ReconcileError):
    """A JSON document from the API could not be re-encoded for the declared shape."""


class UnsupportedOperationError(ReconcileError):
    """The operation does not exist for this kind (Root update)."""


class NotFoundError(ReconcileError):
    """A data lookup by ID found nothing."""

"""Exceptions raised by the shelf inventory engine."""
from __future__ import annotations


class InventoryError(Exception):
    """Base class for load-time failures.

    Per-scan anomalies are never raised; they are recorded as warnings on the
    resulting scan event.
    """


class MissingColumnError(InventoryError):
    """The uploaded catalog does not carry the identifier column."""

    def __init__(self, column: str):
        super().__init__(f"Catalog is missing the required '{column}' column")
        self.column = column


class SnapshotError(InventoryError):
    """A session snapshot could not be parsed."""


class SessionNotFoundError(InventoryError):
    """No stored session exists under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"No saved session named '{name}'")
        self.name = name

"""Error taxonomy for inventory operations.

Every error raised by kubeprune derives from InventoryError so callers can
catch the whole family in one place.  Backend failures are chained with
``raise ... from`` so the transport error stays reachable via ``__cause__``.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for all inventory errors."""


class InvalidArgumentError(InventoryError):
    """Raised when an identity field or entry id is empty or malformed."""


class DuplicateEntryError(InvalidArgumentError):
    """Raised when an entry id collides with one already in the inventory."""

    def __init__(self, entry_id: str) -> None:
        super().__init__(f"duplicate inventory entry: {entry_id}")
        self.entry_id = entry_id


class EncodingError(InventoryError):
    """Raised when inventory entries cannot be serialized."""


class DecodingError(InventoryError):
    """Raised when a stored blob is not valid serialized entry data."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"invalid inventory data in ConfigMap/{key}: {reason}")
        self.key = key


class NotFoundError(InventoryError):
    """Raised when no record exists for an inventory key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"ConfigMap/{key} not found")
        self.key = key


class MissingDataError(InventoryError):
    """Raised when a record exists but lacks the inventory blob."""

    def __init__(self, key: str) -> None:
        super().__init__(f"inventory data not found in ConfigMap/{key}")
        self.key = key


class StorageError(InventoryError):
    """Raised for any other backend failure, tagged with the record key."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"ConfigMap/{key}: {message}")
        self.key = key

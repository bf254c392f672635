"""Inventory persistence gateway.

InventoryStorage loads, saves and deletes an Inventory through a
RecordBackend and answers the "which objects are stale" query that drives
pruning.  It holds no state besides the backend reference, so one instance
is created per controller and injected wherever it is needed.

Concurrent ``apply`` calls for the same inventory key are not serialized
here: callers must keep at most one reconciliation in flight per key.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from kubeprune.errors import (
    DecodingError,
    EncodingError,
    InvalidArgumentError,
    MissingDataError,
    NotFoundError,
    StorageError,
)
from kubeprune.inventory.backend import InventoryRecord, RecordBackend
from kubeprune.inventory.models import Entry, Inventory, ObjectRef, entry_to_object_ref, new_inventory
from kubeprune.observability.metrics import inventory_operations_total, stale_objects_total

_log = structlog.get_logger(component="inventory.storage")

INVENTORY_DATA_KEY = "inventory"


@dataclass(frozen=True)
class Owner:
    """Identity the storage writes under.

    ``field`` is the server-side apply field manager; ``group`` prefixes the
    provenance annotation keys.
    """

    field: str
    group: str


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def encode_entries(entries: list[Entry]) -> str:
    try:
        return json.dumps([entry.to_dict() for entry in entries], separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"failed to encode inventory entries: {exc}") from exc


def decode_entries(blob: str, key: str) -> list[Entry]:
    """Parse a stored blob into entries, raising DecodingError on bad data."""
    try:
        raw: Any = json.loads(blob)
    except (ValueError, RecursionError) as exc:
        raise DecodingError(key, str(exc)) from exc

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DecodingError(key, f"expected a list of entries, got {type(raw).__name__}")

    entries: list[Entry] = []
    for item in raw:
        if not isinstance(item, dict):
            raise DecodingError(key, f"expected an entry object, got {type(item).__name__}")
        entry_id = item.get("id")
        version = item.get("ver", "")
        if not isinstance(entry_id, str) or not isinstance(version, str):
            raise DecodingError(key, f"malformed entry: {item!r}")
        entries.append(Entry(id=entry_id, version=version))
    return entries


class InventoryStorage:
    """Reads and writes inventories as records in a RecordBackend."""

    def __init__(
        self,
        backend: RecordBackend,
        owner: Owner,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._backend = backend
        self._owner = owner
        self._clock = clock

    @property
    def owner(self) -> Owner:
        return self._owner

    @property
    def source_annotation(self) -> str:
        return f"{self._owner.group}/source"

    @property
    def revision_annotation(self) -> str:
        return f"{self._owner.group}/revision"

    @property
    def last_applied_annotation(self) -> str:
        return f"{self._owner.group}/last-applied-time"

    async def apply(self, inventory: Inventory) -> None:
        """Create or update the record for *inventory*."""
        record = self._new_record(inventory.name, inventory.namespace)
        record.data[INVENTORY_DATA_KEY] = encode_entries(inventory.entries)
        record.annotations[self.last_applied_annotation] = self._clock().astimezone(UTC).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )
        if inventory.source:
            record.annotations[self.source_annotation] = inventory.source
        if inventory.revision:
            record.annotations[self.revision_annotation] = inventory.revision

        try:
            await self._backend.apply(record, field_manager=self._owner.field)
        except Exception:
            inventory_operations_total.labels(operation="apply", outcome="error").inc()
            raise
        inventory_operations_total.labels(operation="apply", outcome="success").inc()
        _log.info(
            "inventory_applied",
            inventory=inventory.key,
            entries=len(inventory),
            revision=inventory.revision,
        )

    async def get(self, inventory: Inventory) -> None:
        """Load the stored entries and provenance into *inventory*.

        *inventory* is only modified once the record has been read and
        decoded in full.  Provenance annotations missing from the record
        leave the corresponding fields as they were.

        Raises:
            NotFoundError:    no record exists for the inventory key.
            MissingDataError: the record has no inventory blob.
            DecodingError:    the blob is not valid entry data.
        """
        try:
            record = await self._backend.get(inventory.name, inventory.namespace)
        except NotFoundError:
            inventory_operations_total.labels(operation="get", outcome="not_found").inc()
            raise
        except Exception:
            inventory_operations_total.labels(operation="get", outcome="error").inc()
            raise

        blob = record.data.get(INVENTORY_DATA_KEY)
        if blob is None:
            inventory_operations_total.labels(operation="get", outcome="error").inc()
            raise MissingDataError(record.key)

        try:
            entries = decode_entries(blob, record.key)
            inventory.set_entries(entries)
        except InvalidArgumentError as exc:
            inventory_operations_total.labels(operation="get", outcome="error").inc()
            raise DecodingError(record.key, str(exc)) from exc
        except DecodingError:
            inventory_operations_total.labels(operation="get", outcome="error").inc()
            raise

        source = record.annotations.get(self.source_annotation)
        if source is not None:
            inventory.source = source
        revision = record.annotations.get(self.revision_annotation)
        if revision is not None:
            inventory.revision = revision

        inventory_operations_total.labels(operation="get", outcome="success").inc()
        _log.debug("inventory_loaded", inventory=inventory.key, entries=len(inventory))

    async def delete(self, inventory: Inventory) -> None:
        """Remove the record for *inventory*; an absent record is not an error."""
        try:
            await self._backend.delete(inventory.name, inventory.namespace)
        except NotFoundError:
            inventory_operations_total.labels(operation="delete", outcome="not_found").inc()
            _log.debug("inventory_already_absent", inventory=inventory.key)
            return
        except StorageError:
            inventory_operations_total.labels(operation="delete", outcome="error").inc()
            raise
        except Exception as exc:
            inventory_operations_total.labels(operation="delete", outcome="error").inc()
            raise StorageError(inventory.key, f"failed to delete: {exc}") from exc
        inventory_operations_total.labels(operation="delete", outcome="success").inc()
        _log.info("inventory_deleted", inventory=inventory.key)

    async def get_stale_objects(self, desired: Inventory) -> list[ObjectRef]:
        """Return references to objects in the stored inventory but not in *desired*.

        A missing record means nothing has been applied yet, so the result is
        empty rather than an error.
        """
        existing = new_inventory(desired.name, desired.namespace)
        try:
            await self.get(existing)
        except NotFoundError:
            _log.debug("no_previous_inventory", inventory=desired.key)
            return []

        stale = [entry_to_object_ref(entry) for entry in existing.diff(desired)]
        stale_objects_total.inc(len(stale))
        if stale:
            _log.info(
                "stale_objects_found",
                inventory=desired.key,
                count=len(stale),
                objects=[str(ref) for ref in stale],
            )
        return stale

    def _new_record(self, name: str, namespace: str) -> InventoryRecord:
        return InventoryRecord(
            name=name,
            namespace=namespace,
            labels={
                "app.kubernetes.io/name": name,
                "app.kubernetes.io/component": INVENTORY_DATA_KEY,
                "app.kubernetes.io/created-by": self._owner.field,
            },
        )

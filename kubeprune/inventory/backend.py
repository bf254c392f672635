"""Durable record backends for inventory storage.

RecordBackend    -- ABC every backend must implement.
InventoryRecord  -- Backend-neutral view of one stored record (a ConfigMap).
InMemoryBackend  -- Process-local backend with field-ownership merge
                    semantics, used by tests and dry runs.

Backends translate their native failures: an absent record raises
NotFoundError, anything else raises StorageError tagged with the record key.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import structlog

from kubeprune.errors import NotFoundError

_log = structlog.get_logger(component="inventory.backend")

_FieldPath = tuple[str, str]


@dataclass
class InventoryRecord:
    """A stored record addressed by ``(name, namespace)``."""

    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


def record_key(name: str, namespace: str) -> str:
    return f"{namespace}/{name}"


class RecordBackend(ABC):
    """Key/value store holding one record per inventory."""

    @abstractmethod
    async def apply(self, record: InventoryRecord, field_manager: str) -> None:
        """Upsert *record*, forcing ownership of its fields to *field_manager*.

        Fields the same manager set previously but omitted now are removed;
        fields owned only by other managers are left alone.
        """

    @abstractmethod
    async def get(self, name: str, namespace: str) -> InventoryRecord:
        """Return the record, raising NotFoundError if it does not exist."""

    @abstractmethod
    async def delete(self, name: str, namespace: str) -> None:
        """Remove the record, raising NotFoundError if it does not exist."""


@dataclass
class _StoredRecord:
    record: InventoryRecord
    # field manager -> paths it owns
    managed_fields: dict[str, set[_FieldPath]] = field(default_factory=dict)


def _field_paths(record: InventoryRecord) -> set[_FieldPath]:
    paths: set[_FieldPath] = set()
    paths.update(("labels", k) for k in record.labels)
    paths.update(("annotations", k) for k in record.annotations)
    paths.update(("data", k) for k in record.data)
    return paths


def _section(record: InventoryRecord, name: str) -> dict[str, str]:
    section: dict[str, str] = getattr(record, name)
    return section


class InMemoryBackend(RecordBackend):
    """Dict-backed RecordBackend.

    Records are deep-copied on the way in and out so callers can never
    mutate stored state through a returned object.
    """

    def __init__(self) -> None:
        self._records: dict[str, _StoredRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def apply(self, record: InventoryRecord, field_manager: str) -> None:
        key = record.key
        incoming = _field_paths(record)
        stored = self._records.get(key)

        if stored is None:
            self._records[key] = _StoredRecord(
                record=copy.deepcopy(record),
                managed_fields={field_manager: incoming},
            )
            _log.debug("record_created", key=key, field_manager=field_manager)
            return

        previously_owned = stored.managed_fields.get(field_manager, set())
        for section, name in previously_owned - incoming:
            _section(stored.record, section).pop(name, None)

        # Forced apply: conflicting fields move to this manager.
        for manager, paths in stored.managed_fields.items():
            if manager != field_manager:
                paths.difference_update(incoming)

        for section, name in incoming:
            _section(stored.record, section)[name] = _section(record, section)[name]

        stored.managed_fields[field_manager] = set(incoming)
        stored.managed_fields = {m: p for m, p in stored.managed_fields.items() if p}
        _log.debug("record_updated", key=key, field_manager=field_manager)

    async def get(self, name: str, namespace: str) -> InventoryRecord:
        key = record_key(name, namespace)
        stored = self._records.get(key)
        if stored is None:
            raise NotFoundError(key)
        return copy.deepcopy(stored.record)

    async def delete(self, name: str, namespace: str) -> None:
        key = record_key(name, namespace)
        if self._records.pop(key, None) is None:
            raise NotFoundError(key)
        _log.debug("record_deleted", key=key)

    def managers(self, name: str, namespace: str) -> dict[str, set[_FieldPath]]:
        """Return a copy of the field-ownership table for a record."""
        stored = self._records.get(record_key(name, namespace))
        if stored is None:
            return {}
        return {manager: set(paths) for manager, paths in stored.managed_fields.items()}

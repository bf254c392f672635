"""Inventory tracking for kubeprune.

Records which objects a deployment unit last applied and computes which of
them are no longer desired.

Submodules:
    models     -- Entry, ObjectRef, Inventory and the stale-entry diff.
    backend    -- RecordBackend ABC and the in-memory backend.
    configmap  -- ConfigMap backend using server-side apply.
    storage    -- InventoryStorage gateway and the stale-object query.
"""

from kubeprune.inventory.backend import InMemoryBackend, InventoryRecord, RecordBackend
from kubeprune.inventory.configmap import ConfigMapBackend
from kubeprune.inventory.models import (
    Entry,
    Inventory,
    ObjectRef,
    entry_from_object,
    entry_to_object_ref,
    format_entry_id,
    new_inventory,
    parse_entry_id,
)
from kubeprune.inventory.storage import INVENTORY_DATA_KEY, InventoryStorage, Owner

__all__ = [
    "INVENTORY_DATA_KEY",
    "ConfigMapBackend",
    "Entry",
    "InMemoryBackend",
    "Inventory",
    "InventoryRecord",
    "InventoryStorage",
    "ObjectRef",
    "Owner",
    "RecordBackend",
    "entry_from_object",
    "entry_to_object_ref",
    "format_entry_id",
    "new_inventory",
    "parse_entry_id",
]

"""Shared fixtures for kubeprune integration tests.

Provides an InventoryStorage wired to the in-memory backend with a fixed
clock, plus factories for entries and inventories, so storage behaviour can
be exercised end to end without a Kubernetes cluster.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from kubeprune.inventory import (
    Entry,
    InMemoryBackend,
    Inventory,
    InventoryStorage,
    Owner,
    format_entry_id,
    new_inventory,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FIXED_NOW = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)
OWNER = Owner(field="kubeprune-test", group="inventory.example.com")


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


def make_entry(name: str, kind: str = "ConfigMap", namespace: str = "ns", group: str = "") -> Entry:
    """Create an Entry for an object with sensible defaults."""
    return Entry(id=format_entry_id(namespace, name, group, kind), version="v1")


def make_inventory(
    names: list[str],
    name: str = "app",
    namespace: str = "ns",
    source: str = "",
    revision: str = "",
) -> Inventory:
    """Create an inventory holding one ConfigMap entry per name."""
    inventory = new_inventory(name, namespace)
    inventory.source = source
    inventory.revision = revision
    inventory.set_entries(make_entry(n) for n in names)
    return inventory


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def storage(backend: InMemoryBackend) -> InventoryStorage:
    return InventoryStorage(backend, OWNER, clock=lambda: FIXED_NOW)

"""Prometheus metrics for inventory operations."""

from __future__ import annotations

from prometheus_client import Counter

inventory_operations_total = Counter(
    "kubeprune_inventory_operations_total",
    "Inventory storage operations by outcome.",
    ["operation", "outcome"],
)

stale_objects_total = Counter(
    "kubeprune_stale_objects_total",
    "Stale objects reported for pruning.",
)

"""ConfigMap record backend over kubernetes-asyncio.

Writes use server-side apply with forced ownership so that a single field
manager only overwrites the fields it owns; other managers' labels,
annotations and data keys on the same ConfigMap survive.
"""

from __future__ import annotations

from typing import Any

import structlog
from kubernetes_asyncio.client import ApiException  # type: ignore[import-untyped]

from kubeprune.errors import NotFoundError, StorageError
from kubeprune.inventory.backend import InventoryRecord, RecordBackend, record_key

_log = structlog.get_logger(component="inventory.configmap")

_APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"


def _translate(exc: Exception, key: str, action: str) -> Exception:
    if isinstance(exc, ApiException) and exc.status == 404:
        return NotFoundError(key)
    if isinstance(exc, ApiException):
        return StorageError(key, f"failed to {action}: {exc.status} {exc.reason}")
    return StorageError(key, f"failed to {action}: {exc}")


class ConfigMapBackend(RecordBackend):
    """Stores each inventory in a ConfigMap named after it.

    Args:
        core_v1:         A ``kubernetes_asyncio.client.CoreV1Api`` instance.
        request_timeout: Per-request timeout in seconds.
    """

    def __init__(self, core_v1: Any, request_timeout: float = 30.0) -> None:
        self._core_v1 = core_v1
        self._request_timeout = request_timeout

    async def apply(self, record: InventoryRecord, field_manager: str) -> None:
        body = {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {
                "name": record.name,
                "namespace": record.namespace,
                "labels": dict(record.labels),
                "annotations": dict(record.annotations),
            },
            "data": dict(record.data),
        }
        try:
            await self._core_v1.patch_namespaced_config_map(
                name=record.name,
                namespace=record.namespace,
                body=body,
                field_manager=field_manager,
                force=True,
                _content_type=_APPLY_PATCH_CONTENT_TYPE,
                _request_timeout=self._request_timeout,
            )
        except Exception as exc:  # noqa: BLE001
            raise _translate(exc, record.key, "apply") from exc
        _log.debug("configmap_applied", key=record.key, field_manager=field_manager)

    async def get(self, name: str, namespace: str) -> InventoryRecord:
        key = record_key(name, namespace)
        try:
            cm = await self._core_v1.read_namespaced_config_map(
                name=name,
                namespace=namespace,
                _request_timeout=self._request_timeout,
            )
        except Exception as exc:  # noqa: BLE001
            raise _translate(exc, key, "get") from exc

        metadata = cm.metadata
        return InventoryRecord(
            name=name,
            namespace=namespace,
            labels=dict(metadata.labels or {}) if metadata else {},
            annotations=dict(metadata.annotations or {}) if metadata else {},
            data=dict(cm.data or {}),
        )

    async def delete(self, name: str, namespace: str) -> None:
        key = record_key(name, namespace)
        try:
            await self._core_v1.delete_namespaced_config_map(
                name=name,
                namespace=namespace,
                _request_timeout=self._request_timeout,
            )
        except Exception as exc:  # noqa: BLE001
            raise _translate(exc, key, "delete") from exc
        _log.debug("configmap_deleted", key=key)

"""Application wiring for kubeprune.

Builds the Kubernetes client and the InventoryStorage gateway from a
KubePruneConfig.  The gateway is created once and handed to callers; the
API client connection pool is closed when the context exits.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from kubeprune.inventory import ConfigMapBackend, InventoryStorage, Owner
from kubeprune.models.config import KubePruneConfig
from kubeprune.observability.logging import get_logger


class ComponentError(Exception):
    """Raised when the Kubernetes client cannot be configured."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


async def _load_kube_config(config: KubePruneConfig) -> None:
    """Configure kubernetes-asyncio from in-cluster config or kubeconfig."""
    log = get_logger("app")
    # Import lazily: kubernetes-asyncio attempts cluster auto-detection on
    # import in some versions.
    import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]

    try:
        try:
            # load_incluster_config() is synchronous in kubernetes-asyncio
            k8s_config.load_incluster_config()
            log.info("k8s client configured from in-cluster service account")
        except k8s_config.ConfigException:
            await k8s_config.load_kube_config(context=config.kube.context or None)
            log.info("k8s client configured from kubeconfig", context=config.kube.context or "<current>")
    except Exception as exc:
        raise ComponentError("k8s_client", exc) from exc


@asynccontextmanager
async def open_storage(config: KubePruneConfig) -> AsyncIterator[InventoryStorage]:
    """Yield an InventoryStorage backed by ConfigMaps in the configured cluster."""
    from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

    await _load_kube_config(config)
    api_client = k8s_client.ApiClient()
    try:
        backend = ConfigMapBackend(
            k8s_client.CoreV1Api(api_client),
            request_timeout=float(config.kube.request_timeout),
        )
        yield InventoryStorage(backend, Owner(field=config.owner.field, group=config.owner.group))
    finally:
        await api_client.close()

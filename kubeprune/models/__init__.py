"""Configuration data structures for kubeprune."""

from kubeprune.models.config import KubeConfig, KubePruneConfig, LogConfig, OwnerConfig

__all__ = [
    "KubeConfig",
    "KubePruneConfig",
    "LogConfig",
    "OwnerConfig",
]

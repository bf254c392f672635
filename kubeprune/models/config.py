"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class OwnerConfig:
    """Field manager and annotation group the inventory is written under."""

    field: str = "kubeprune"
    group: str = "inventory.kubeprune.io"


@dataclass
class KubeConfig:
    """Kubernetes client configuration."""

    context: str = ""
    request_timeout: int = 30


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubePruneConfig:
    """Top-level kubeprune configuration."""

    owner: OwnerConfig = field(default_factory=OwnerConfig)
    kube: KubeConfig = field(default_factory=KubeConfig)
    log: LogConfig = field(default_factory=LogConfig)

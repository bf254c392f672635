"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kubeprune.models.config import KubeConfig, KubePruneConfig, LogConfig, OwnerConfig

# Annotation key prefixes must be DNS subdomains.
_DNS_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEPRUNE_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_owner_field(value: str) -> str:
    if not value:
        raise ValueError("Owner field manager must not be empty")
    return value


def _validate_owner_group(value: str) -> str:
    if len(value) > 253 or not _DNS_SUBDOMAIN.match(value):
        raise ValueError(f"Invalid owner group: {value}. Must be a DNS subdomain")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KubePruneConfig:
    """Load configuration from KUBEPRUNE_* environment variables."""
    return KubePruneConfig(
        owner=OwnerConfig(
            field=_validate_owner_field(_env("OWNER_FIELD", "kubeprune")),
            group=_validate_owner_group(_env("OWNER_GROUP", "inventory.kubeprune.io")),
        ),
        kube=KubeConfig(
            context=_env("KUBECONFIG_CONTEXT", ""),
            request_timeout=_env_int("REQUEST_TIMEOUT", 30, min_val=1, max_val=120),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )

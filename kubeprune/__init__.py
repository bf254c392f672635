"""kubeprune: inventory tracking and stale-object detection for Kubernetes."""

__version__ = "0.1.0"

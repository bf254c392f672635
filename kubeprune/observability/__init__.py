"""Logging and metrics for kubeprune."""

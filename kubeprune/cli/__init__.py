"""kubeprune command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubeprune`` script).
"""

from kubeprune.cli.main import cli

__all__ = ["cli"]

"""Entry point for `python -m kubeprune`.

Usage:
    python -m kubeprune show my-app -n apps
"""

from __future__ import annotations

from kubeprune.cli import cli

cli()

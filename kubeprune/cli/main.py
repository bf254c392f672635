"""Click commands for inspecting stored inventories."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any, TypeVar

import click
import yaml

from kubeprune.app import ComponentError, open_storage
from kubeprune.config import load_config
from kubeprune.errors import InventoryError
from kubeprune.inventory import InventoryStorage, new_inventory
from kubeprune.inventory.models import Inventory
from kubeprune.models.config import KubePruneConfig
from kubeprune.observability.logging import setup_logging

StorageFactory = Callable[[KubePruneConfig], AbstractAsyncContextManager[InventoryStorage]]

_T = TypeVar("_T")


def load_manifests(path: Path) -> list[dict[str, Any]]:
    """Read every Kubernetes object from a multi-document YAML file.

    Empty documents are skipped; ``kind: List`` documents are flattened.
    """
    objects: list[dict[str, Any]] = []
    with path.open(encoding="utf-8") as fh:
        for doc in yaml.safe_load_all(fh):
            if not doc:
                continue
            if not isinstance(doc, dict):
                raise click.ClickException(f"{path}: expected a mapping, got {type(doc).__name__}")
            if doc.get("kind") == "List":
                objects.extend(item for item in doc.get("items") or [] if isinstance(item, dict))
            else:
                objects.append(doc)
    return objects


def _run(ctx: click.Context, action: Callable[[InventoryStorage], Awaitable[_T]]) -> _T:
    config: KubePruneConfig = ctx.obj["config"]
    factory: StorageFactory = ctx.obj["storage_factory"]

    async def _go() -> _T:
        async with factory(config) as storage:
            return await action(storage)

    try:
        return asyncio.run(_go())
    except (InventoryError, ComponentError) as exc:
        raise click.ClickException(str(exc)) from exc


def _inventory_arg(name: str, namespace: str) -> Inventory:
    try:
        return new_inventory(name, namespace)
    except InventoryError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Inspect and manage kubeprune inventories."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = load_config()
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
    if "storage_factory" not in ctx.obj:
        ctx.obj["storage_factory"] = open_storage
    setup_logging(ctx.obj["config"].log.level)


@cli.command("show")
@click.argument("name")
@click.option("-n", "--namespace", required=True, help="Namespace of the inventory.")
@click.pass_context
def show_cmd(ctx: click.Context, name: str, namespace: str) -> None:
    """Print the stored inventory NAME as JSON."""
    inventory = _inventory_arg(name, namespace)
    _run(ctx, lambda storage: storage.get(inventory))
    click.echo(
        json.dumps(
            {
                "name": inventory.name,
                "namespace": inventory.namespace,
                "source": inventory.source,
                "revision": inventory.revision,
                "entries": [entry.to_dict() for entry in inventory.entries],
            },
            indent=2,
        )
    )


@cli.command("stale")
@click.argument("name")
@click.option("-n", "--namespace", required=True, help="Namespace of the inventory.")
@click.option(
    "-f",
    "--filename",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Multi-document YAML file with the desired objects.",
)
@click.pass_context
def stale_cmd(ctx: click.Context, name: str, namespace: str, filename: Path) -> None:
    """List stored objects of NAME that are absent from the desired manifests."""
    desired = _inventory_arg(name, namespace)
    try:
        desired.add_objects(load_manifests(filename))
    except InventoryError as exc:
        raise click.ClickException(f"{filename}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise click.ClickException(f"{filename}: invalid YAML: {exc}") from exc

    stale = _run(ctx, lambda storage: storage.get_stale_objects(desired))
    for ref in stale:
        click.echo(str(ref))


@cli.command("delete")
@click.argument("name")
@click.option("-n", "--namespace", required=True, help="Namespace of the inventory.")
@click.pass_context
def delete_cmd(ctx: click.Context, name: str, namespace: str) -> None:
    """Remove the stored inventory record NAME (managed objects are kept)."""
    inventory = _inventory_arg(name, namespace)
    _run(ctx, lambda storage: storage.delete(inventory))
    click.echo(f"inventory {inventory.key} deleted")

"""Inventory data model and the stale-entry diff."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from kubeprune.errors import DuplicateEntryError, InvalidArgumentError

_FIELD_SEPARATOR = "_"
# RBAC object names may contain colons, which would be ambiguous in an id.
_COLON_TRANSLATION = "__"


@dataclass(frozen=True)
class Entry:
    """One managed resource tracked by an inventory.

    ``id`` has the form ``<namespace>_<name>_<group>_<kind>``; ``version`` is
    the API version the object was applied with and is ignored by diffs.
    """

    id: str
    version: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "ver": self.version}


@dataclass(frozen=True)
class ObjectRef:
    """Externally addressable reference to a cluster object."""

    api_version: str
    kind: str
    namespace: str
    name: str

    def to_manifest(self) -> dict[str, Any]:
        """Return a minimal object dict suitable for a delete call."""
        metadata: dict[str, str] = {"name": self.name}
        if self.namespace:
            metadata["namespace"] = self.namespace
        return {"apiVersion": self.api_version, "kind": self.kind, "metadata": metadata}

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"


def format_entry_id(namespace: str, name: str, group: str, kind: str) -> str:
    """Build the stable entry id for an object."""
    if not name or not kind:
        raise InvalidArgumentError("object name and kind must not be empty")
    encoded_name = name.replace(":", _COLON_TRANSLATION)
    return _FIELD_SEPARATOR.join((namespace, encoded_name, group, kind))


def parse_entry_id(entry_id: str) -> tuple[str, str, str, str]:
    """Split an entry id into ``(namespace, name, group, kind)``.

    Namespace and kind never contain the separator, so they are cut from the
    ends first; the group is the last remaining segment and the rest is the
    (possibly colon-encoded) name.
    """
    value = entry_id.strip()
    if value.count(_FIELD_SEPARATOR) < 3:
        raise InvalidArgumentError(f"malformed inventory entry id: {entry_id!r}")

    namespace, rest = value.split(_FIELD_SEPARATOR, 1)
    rest, kind = rest.rsplit(_FIELD_SEPARATOR, 1)
    name, group = rest.rsplit(_FIELD_SEPARATOR, 1)
    if not name or not kind:
        raise InvalidArgumentError(f"malformed inventory entry id: {entry_id!r}")
    return namespace, name.replace(_COLON_TRANSLATION, ":"), group, kind


def _split_api_version(api_version: str) -> tuple[str, str]:
    if "/" in api_version:
        group, version = api_version.split("/", 1)
        return group, version
    return "", api_version


def entry_from_object(obj: Mapping[str, Any]) -> Entry:
    """Build an Entry from a Kubernetes object dict."""
    metadata = obj.get("metadata") or {}
    api_version = str(obj.get("apiVersion", ""))
    if not api_version:
        raise InvalidArgumentError("object apiVersion must not be empty")
    group, version = _split_api_version(api_version)
    entry_id = format_entry_id(
        namespace=str(metadata.get("namespace", "") or ""),
        name=str(metadata.get("name", "") or ""),
        group=group,
        kind=str(obj.get("kind", "") or ""),
    )
    return Entry(id=entry_id, version=version)


def entry_to_object_ref(entry: Entry) -> ObjectRef:
    namespace, name, group, kind = parse_entry_id(entry.id)
    api_version = f"{group}/{entry.version}" if group else entry.version
    return ObjectRef(api_version=api_version, kind=kind, namespace=namespace, name=name)


@dataclass
class Inventory:
    """Set of entries owned by one deployment unit.

    ``name`` and ``namespace`` form the storage key.  Entries are keyed by id
    and keep insertion order, which is also their serialization order.
    ``source`` and ``revision`` are provenance metadata and never take part
    in diffs.
    """

    name: str
    namespace: str
    source: str = ""
    revision: str = ""
    _entries: dict[str, Entry] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgumentError("inventory name must not be empty")
        if not self.namespace:
            raise InvalidArgumentError("inventory namespace must not be empty")

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def add_entry(self, entry: Entry) -> None:
        """Add *entry*, raising DuplicateEntryError if its id is already present."""
        if not entry.id:
            raise InvalidArgumentError("inventory entry id must not be empty")
        if entry.id in self._entries:
            raise DuplicateEntryError(entry.id)
        self._entries[entry.id] = entry

    def set_entries(self, entries: Iterable[Entry]) -> None:
        """Replace all entries.

        The new set is validated in full before being swapped in, so a
        duplicate or empty id leaves the current entries unchanged.
        """
        staged: dict[str, Entry] = {}
        for entry in entries:
            if not entry.id:
                raise InvalidArgumentError("inventory entry id must not be empty")
            if entry.id in staged:
                raise DuplicateEntryError(entry.id)
            staged[entry.id] = entry
        self._entries = staged

    def add_objects(self, objects: Iterable[Mapping[str, Any]]) -> None:
        """Add an entry for every Kubernetes object dict in *objects*."""
        for obj in objects:
            self.add_entry(entry_from_object(obj))

    def diff(self, other: Inventory) -> list[Entry]:
        """Return the entries of this inventory whose id is absent from *other*.

        This inventory is the previously applied one and *other* the desired
        one.  The result follows this inventory's entry order and neither
        side is modified.
        """
        return [entry for entry_id, entry in self._entries.items() if entry_id not in other._entries]

    def object_refs(self) -> list[ObjectRef]:
        return [entry_to_object_ref(entry) for entry in self._entries.values()]


def new_inventory(name: str, namespace: str) -> Inventory:
    """Construct an empty inventory for ``(name, namespace)``."""
    return Inventory(name=name, namespace=namespace)

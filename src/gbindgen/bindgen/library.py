from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .errors import DuplicateItemError, GenerationError, NameDerivationError
from .gobject import (
    GObject,
    GTypeBoxed,
    GTypeEnum,
    GTypeError,
    GTypeInterface,
    GTypeObject,
    ResolvedGObject,
    derive_names,
)
from .ir_types import DECLARATION_TYPES, ItemContainer, Path
from .utils import Log, join_names


@dataclass
class OpaqueItem:
    """A type declared outside the object-system items, known by name only."""

    path: Path
    declaration_type: str = "struct"

    def __post_init__(self) -> None:
        if self.declaration_type not in DECLARATION_TYPES:
            raise GenerationError(f"{self.path}: unknown declaration type `{self.declaration_type}`")

    @property
    def export_name(self) -> str:
        return self.path.name

    @property
    def identity(self) -> str:
        return self.path.full

    def container(self) -> ItemContainer:
        return ItemContainer("opaque", self)

    def add_dependencies(self, library: "Library", out: "Dependencies") -> None:
        pass


Item = Union[GObject, OpaqueItem]


def item_key(item: Item) -> tuple[str, str]:
    return (item.container().kind, item.identity)


@dataclass
class Library:
    gobjects: list[GObject] = field(default_factory=list)
    opaque_items: list[OpaqueItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Items are unique by identity; references resolve by local name.
        seen: dict[tuple[str, str], Item] = {}
        self._by_name: dict[str, list[Item]] = {}
        for item in [*self.gobjects, *self.opaque_items]:
            key = item_key(item)
            other = seen.get(key)
            if other is not None:
                raise DuplicateItemError(item.identity, str(other.path), str(item.path))
            seen[key] = item
            self._by_name.setdefault(item.path.name, []).append(item)

    def get(self, path: Path) -> Optional[Item]:
        candidates = self._by_name.get(path.name, [])
        for item in candidates:
            if item.path.full == path.full:
                return item
        return candidates[0] if candidates else None

    def items(self) -> list[Item]:
        return [*self.gobjects, *self.opaque_items]

    def add_dependencies(self, log: Optional[Log] = None) -> "Dependencies":
        out = Dependencies()
        for node in sorted(self.gobjects, key=lambda n: (n.path.full, n.name)):
            out.visit(self, node)
            if log is not None:
                refs = [str(p) for t in node.referenced_types() for p in t.referenced_paths()]
                log(f"{node.path}: references {', '.join(refs) or 'nothing'}")
        return out


@dataclass
class Dependencies:
    order: list[ItemContainer] = field(default_factory=list)
    items: set[tuple[str, str]] = field(default_factory=set)

    def contains(self, item: Item) -> bool:
        return item_key(item) in self.items

    def visit(self, library: Library, item: Item) -> None:
        if self.contains(item):
            return
        self.items.add(item_key(item))
        item.add_dependencies(library, self)
        self.order.append(item.container())

    def resolve(self, resolver: "DeclarationTypeResolver", log: Optional[Log] = None) -> "ResolvedLibrary":
        resolved: list[ItemContainer] = []
        for container in self.order:
            if container.kind != "gobject":
                resolved.append(container)
                continue
            node = container.item
            assert isinstance(node, GObject)
            resolved_node = node.resolve_declaration_types(resolver)
            resolved.append(resolved_node.container())
            if log is not None:
                spelled = [t.to_c(tagged=True) for t in node.referenced_types()]
                log(f"{node.path}: {', '.join(spelled) or 'no referenced types'}")
        return ResolvedLibrary(resolved)


@dataclass
class DeclarationTypeResolver:
    types: dict[str, str] = field(default_factory=dict)
    by_name: dict[str, str] = field(default_factory=dict)

    def add(self, path: Path, declaration_type: str) -> None:
        self.types.setdefault(path.full, declaration_type)
        self.by_name.setdefault(path.name, declaration_type)

    @classmethod
    def from_library(cls, library: Library) -> "DeclarationTypeResolver":
        resolver = cls()
        for item in library.items():
            if isinstance(item, OpaqueItem):
                resolver.add(item.path, item.declaration_type)
                continue
            gtype = item.gtype
            if isinstance(gtype, (GTypeObject, GTypeInterface, GTypeBoxed)):
                resolver.add(item.path, "struct")
            elif isinstance(gtype, (GTypeEnum, GTypeError)):
                resolver.add(item.path, "enum")
        return resolver

    def type_for(self, path: Path) -> Optional[str]:
        if path.full in self.types:
            return self.types[path.full]
        return self.by_name.get(path.name)


@dataclass
class ResolvedLibrary:
    order: list[ItemContainer]

    def gobjects(self) -> list[ResolvedGObject]:
        return [c.item for c in self.order if c.kind == "gobject" and isinstance(c.item, ResolvedGObject)]

    def opaque_items(self) -> list[OpaqueItem]:
        return [c.item for c in self.order if c.kind == "opaque" and isinstance(c.item, OpaqueItem)]

    def check_names(self) -> list[NameDerivationError]:
        errors: list[NameDerivationError] = []
        for resolved in self.gobjects():
            node = resolved.node
            try:
                derive_names(node.gtype, node.path, node.name)
            except NameDerivationError as exc:
                errors.append(exc)
        return errors

    def inconsistent_prefixes(self) -> dict[str, set[str]]:
        prefixes: dict[str, set[str]] = {}
        for resolved in self.gobjects():
            node = resolved.node
            try:
                prefix, _ = derive_names(node.gtype, node.path, node.name)
            except NameDerivationError:
                continue
            prefixes.setdefault(node.path.module, set()).add(prefix)
        return {module: found for module, found in prefixes.items() if len(found) > 1}

    def describe_prefixes(self) -> list[str]:
        return [
            f"module `{module or '<root>'}` mixes prefixes {join_names(found)}"
            for module, found in sorted(self.inconsistent_prefixes().items())
        ]

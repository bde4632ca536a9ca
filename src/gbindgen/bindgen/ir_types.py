from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .errors import GenerationError
from .syntax import SynType, TypePath, TypePtr, TypeTuple

if TYPE_CHECKING:
    from .library import DeclarationTypeResolver, Dependencies, Library


# Declaration kinds a referenced type can resolve to.
DECLARATION_TYPES = ("struct", "enum", "union", "opaque")
TAGGED_DECLARATION_TYPES = {"struct", "enum", "union"}


@dataclass(frozen=True)
class Path:
    full: str

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(part for part in self.full.replace("::", ".").split(".") if part)

    @property
    def name(self) -> str:
        segments = self.segments
        return segments[-1] if segments else ""

    @property
    def module(self) -> str:
        return "::".join(self.segments[:-1])

    def __str__(self) -> str:
        return self.full


@dataclass
class GenericPath:
    path: Path
    generics: list["Type"] = field(default_factory=list)
    ctype: Optional[str] = None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class Type:
    kind: str
    generic_path: Optional[GenericPath] = None
    target: Optional["Type"] = None
    is_const: bool = False

    @classmethod
    def path(cls, name: str, generics: Optional[list["Type"]] = None) -> "Type":
        return cls(kind="path", generic_path=GenericPath(Path(name), list(generics or [])))

    @classmethod
    def pointer(cls, target: "Type", is_const: bool = False) -> "Type":
        return cls(kind="pointer", target=target, is_const=is_const)

    @classmethod
    def load(cls, ty: SynType) -> Optional["Type"]:
        if isinstance(ty, TypeTuple):
            if not ty.elems:
                return None
            raise GenerationError("tuple types are not supported")
        if isinstance(ty, TypePtr):
            target = cls.load(ty.elem)
            if target is None:
                raise GenerationError("pointers to the unit type are not supported")
            return cls.pointer(target, is_const=not ty.mutable)
        if isinstance(ty, TypePath):
            if not ty.segments:
                raise GenerationError("empty type path")
            generics: list[Type] = []
            for arg in ty.args:
                loaded = cls.load(arg)
                if loaded is None:
                    raise GenerationError(f"unit generic argument in {'::'.join(ty.segments)}")
                generics.append(loaded)
            return cls.path("::".join(ty.segments), generics)
        raise GenerationError(f"unsupported type syntax: {ty!r}")

    def referenced_paths(self) -> list[Path]:
        if self.kind == "pointer":
            return self.target.referenced_paths() if self.target is not None else []
        assert self.generic_path is not None
        paths = [self.generic_path.path]
        for arg in self.generic_path.generics:
            paths.extend(arg.referenced_paths())
        return paths

    def add_dependencies(self, library: "Library", out: "Dependencies") -> None:
        if self.kind == "pointer":
            if self.target is not None:
                self.target.add_dependencies(library, out)
            return
        assert self.generic_path is not None
        for arg in self.generic_path.generics:
            arg.add_dependencies(library, out)
        item = library.get(self.generic_path.path)
        if item is None:
            return
        out.visit(library, item)

    def resolve_declaration_types(self, resolver: "DeclarationTypeResolver") -> None:
        if self.kind == "pointer":
            if self.target is not None:
                self.target.resolve_declaration_types(resolver)
            return
        assert self.generic_path is not None
        self.generic_path.ctype = resolver.type_for(self.generic_path.path)
        for arg in self.generic_path.generics:
            arg.resolve_declaration_types(resolver)

    def to_c(self, tagged: bool = False) -> str:
        if self.kind == "pointer":
            base = self.target.to_c(tagged) if self.target is not None else "void"
            if self.is_const:
                return f"const {base} *"
            return f"{base} *"
        assert self.generic_path is not None
        name = self.generic_path.name
        if tagged and self.generic_path.ctype in TAGGED_DECLARATION_TYPES:
            return f"{self.generic_path.ctype} {name}"
        return name


@dataclass(frozen=True)
class ItemContainer:
    kind: str
    item: object

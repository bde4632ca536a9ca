from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Lit:
    value: Union[str, int, bool]

    @property
    def kind(self) -> str:
        if isinstance(self.value, bool):
            return "bool"
        if isinstance(self.value, int):
            return "int"
        return "str"


@dataclass(frozen=True)
class MetaPath:
    path: str

    def is_ident(self, name: str) -> bool:
        return self.path == name


@dataclass(frozen=True)
class MetaNameValue:
    path: str
    lit: Lit

    def is_ident(self, name: str) -> bool:
        return self.path == name


@dataclass(frozen=True)
class MetaList:
    path: str
    nested: tuple["NestedMeta", ...] = ()

    def is_ident(self, name: str) -> bool:
        return self.path == name


Meta = Union[MetaPath, MetaNameValue, MetaList]
NestedMeta = Union[MetaPath, MetaNameValue, MetaList, Lit]


@dataclass(frozen=True)
class Attribute:
    meta: Meta

    @classmethod
    def doc(cls, text: str) -> "Attribute":
        return cls(MetaNameValue("doc", Lit(text)))


@dataclass(frozen=True)
class TypePath:
    segments: tuple[str, ...]
    args: tuple["SynType", ...] = ()


@dataclass(frozen=True)
class TypePtr:
    elem: "SynType"
    mutable: bool = False


@dataclass(frozen=True)
class TypeTuple:
    elems: tuple["SynType", ...] = ()


SynType = Union[TypePath, TypePtr, TypeTuple]


@dataclass(frozen=True)
class ExprLit:
    lit: Lit


@dataclass(frozen=True)
class ExprPath:
    path: str


Expr = Union[ExprLit, ExprPath]


@dataclass(frozen=True)
class ImplItemType:
    ident: str
    ty: SynType


@dataclass(frozen=True)
class ImplItemConst:
    ident: str
    expr: Expr


@dataclass(frozen=True)
class ImplItemMethod:
    ident: str


ImplItem = Union[ImplItemType, ImplItemConst, ImplItemMethod]


@dataclass
class ItemEnum:
    ident: str
    attrs: list[Attribute] = field(default_factory=list)
    variants: list[str] = field(default_factory=list)


@dataclass
class ItemStruct:
    ident: str
    attrs: list[Attribute] = field(default_factory=list)


@dataclass
class ItemImpl:
    self_ty: SynType
    trait_path: Optional[str] = None
    items: list[ImplItem] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)


def meta_lists(attrs: list[Attribute]) -> list[MetaList]:
    return [attr.meta for attr in attrs if isinstance(attr.meta, MetaList)]


def doc_lines(attrs: list[Attribute]) -> list[str]:
    lines: list[str] = []
    for attr in attrs:
        meta = attr.meta
        if isinstance(meta, MetaNameValue) and meta.is_ident("doc") and meta.lit.kind == "str":
            lines.append(str(meta.lit.value))
    return lines

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .syntax import Attribute, Lit, MetaList, MetaNameValue, MetaPath, NestedMeta


@dataclass(frozen=True)
class CfgBoolean:
    key: str


@dataclass(frozen=True)
class CfgNamed:
    key: str
    value: str


@dataclass(frozen=True)
class CfgAny:
    items: tuple["Cfg", ...]


@dataclass(frozen=True)
class CfgAll:
    items: tuple["Cfg", ...]


@dataclass(frozen=True)
class CfgNot:
    item: "Cfg"


Cfg = Union[CfgBoolean, CfgNamed, CfgAny, CfgAll, CfgNot]


def _load_predicate(meta: NestedMeta) -> Optional[Cfg]:
    if isinstance(meta, MetaPath):
        return CfgBoolean(meta.path)
    if isinstance(meta, MetaNameValue):
        if meta.lit.kind != "str":
            return None
        return CfgNamed(meta.path, str(meta.lit.value))
    if isinstance(meta, MetaList):
        loaded = [_load_predicate(nested) for nested in meta.nested]
        if any(item is None for item in loaded):
            return None
        items = tuple(item for item in loaded if item is not None)
        if meta.is_ident("any"):
            return CfgAny(items)
        if meta.is_ident("all"):
            return CfgAll(items)
        if meta.is_ident("not") and len(items) == 1:
            return CfgNot(items[0])
        return None
    return None


def load_cfg(attrs: list[Attribute]) -> Optional[Cfg]:
    """Collect every ``cfg(...)`` attribute into one predicate."""

    configs: list[Cfg] = []
    for attr in attrs:
        meta = attr.meta
        if not isinstance(meta, MetaList) or not meta.is_ident("cfg"):
            continue
        if len(meta.nested) != 1 or isinstance(meta.nested[0], Lit):
            continue
        loaded = _load_predicate(meta.nested[0])
        if loaded is not None:
            configs.append(loaded)
    if not configs:
        return None
    if len(configs) == 1:
        return configs[0]
    return CfgAll(tuple(configs))


def append_cfg(outer: Optional[Cfg], inner: Optional[Cfg]) -> Optional[Cfg]:
    if outer is None:
        return inner
    if inner is None:
        return outer
    return CfgAll((outer, inner))


def cfg_define_key(cfg: Union[CfgBoolean, CfgNamed]) -> str:
    if isinstance(cfg, CfgNamed):
        return f"{cfg.key} = {cfg.value}"
    return cfg.key


def cfg_to_condition(cfg: Cfg, defines: dict[str, str]) -> Optional[str]:
    if isinstance(cfg, (CfgBoolean, CfgNamed)):
        define = defines.get(cfg_define_key(cfg))
        if define is None:
            return None
        return f"defined({define})"
    if isinstance(cfg, CfgNot):
        inner = cfg_to_condition(cfg.item, defines)
        if inner is None:
            return None
        return f"!{inner}"
    if isinstance(cfg, (CfgAny, CfgAll)):
        parts = [cfg_to_condition(item, defines) for item in cfg.items]
        if not parts or any(part is None for part in parts):
            return None
        if len(parts) == 1:
            return parts[0]
        joiner = " || " if isinstance(cfg, CfgAny) else " && "
        return "(" + joiner.join(part for part in parts if part is not None) + ")"
    raise TypeError(f"unknown cfg predicate: {cfg!r}")


def describe_cfg(cfg: Cfg) -> str:
    if isinstance(cfg, CfgBoolean):
        return cfg.key
    if isinstance(cfg, CfgNamed):
        return f'{cfg.key} = "{cfg.value}"'
    if isinstance(cfg, CfgNot):
        return f"not({describe_cfg(cfg.item)})"
    name = "any" if isinstance(cfg, CfgAny) else "all"
    return f"{name}(" + ", ".join(describe_cfg(item) for item in cfg.items) + ")"

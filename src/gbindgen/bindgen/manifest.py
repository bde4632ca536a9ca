from __future__ import annotations

import json
from pathlib import Path as FsPath
from typing import Any, Optional

from .bindings import Config
from .errors import DiscoveryError, GenerationError, MissingAttributeError
from .gobject import GObject
from .ir_cfg import Cfg, load_cfg
from .ir_types import Path
from .library import Library, OpaqueItem
from .syntax import (
    Attribute,
    ExprLit,
    ExprPath,
    ImplItem,
    ImplItemConst,
    ImplItemMethod,
    ImplItemType,
    ItemEnum,
    ItemImpl,
    ItemStruct,
    Lit,
    MetaList,
    MetaNameValue,
    MetaPath,
    NestedMeta,
    SynType,
    TypePath,
    TypePtr,
    TypeTuple,
    meta_lists,
)
from .utils import Log, make_log

MANIFEST_NAME = "gbindgen.json"

OBJECT_TRAIT = "ObjectSubclass"
INTERFACE_TRAIT = "ObjectInterface"


def _decode_lit(value: Any) -> Lit:
    if isinstance(value, (str, int, bool)):
        return Lit(value)
    raise GenerationError(f"unsupported literal: {value!r}")


def _decode_nested(raw: Any) -> NestedMeta:
    if isinstance(raw, dict) and "lit" in raw:
        return _decode_lit(raw["lit"])
    if isinstance(raw, dict):
        return _decode_meta(raw)
    return _decode_lit(raw)


def _decode_meta(raw: Any):
    if not isinstance(raw, dict):
        raise GenerationError(f"expected an attribute object, got {raw!r}")
    if "doc" in raw:
        return MetaNameValue("doc", _decode_lit(raw["doc"]))
    if "list" in raw:
        nested = tuple(_decode_nested(item) for item in raw.get("nested", []))
        return MetaList(str(raw["list"]), nested)
    if "name" in raw and "value" in raw:
        return MetaNameValue(str(raw["name"]), _decode_lit(raw["value"]))
    if "path" in raw:
        return MetaPath(str(raw["path"]))
    raise GenerationError(f"unrecognized attribute shape: {raw!r}")


def _decode_attrs(raw: Any) -> list[Attribute]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise GenerationError(f"expected a list of attributes, got {raw!r}")
    return [Attribute(_decode_meta(item)) for item in raw]


def _decode_type(raw: Any) -> SynType:
    if isinstance(raw, str):
        return TypePath(tuple(part for part in raw.split("::") if part))
    if isinstance(raw, list):
        return TypeTuple(tuple(_decode_type(item) for item in raw))
    if isinstance(raw, dict):
        if "ptr" in raw:
            return TypePtr(_decode_type(raw["ptr"]), mutable=bool(raw.get("mut", False)))
        if "path" in raw:
            segments = tuple(part for part in str(raw["path"]).split("::") if part)
            args = tuple(_decode_type(item) for item in raw.get("args", []))
            return TypePath(segments, args)
    raise GenerationError(f"unrecognized type shape: {raw!r}")


def _decode_impl_item(raw: Any) -> ImplItem:
    if not isinstance(raw, dict):
        raise GenerationError(f"expected an impl item object, got {raw!r}")
    if "type" in raw:
        return ImplItemType(str(raw["type"]), _decode_type(raw["ty"]))
    if "const" in raw:
        if "path" in raw:
            return ImplItemConst(str(raw["const"]), ExprPath(str(raw["path"])))
        return ImplItemConst(str(raw["const"]), ExprLit(_decode_lit(raw.get("value"))))
    if "fn" in raw:
        return ImplItemMethod(str(raw["fn"]))
    raise GenerationError(f"unrecognized impl item: {raw!r}")


def _load_enum(decl: dict, mod_cfg: Optional[Cfg]) -> list[GObject]:
    item = ItemEnum(
        ident=str(decl["ident"]),
        attrs=_decode_attrs(decl.get("attrs")),
        variants=[str(v) for v in decl.get("variants", [])],
    )
    nodes = []
    for meta in meta_lists(item.attrs):
        if meta.is_ident("gerror_domain"):
            nodes.append(GObject.load_error_domain(mod_cfg, item, meta))
        elif meta.is_ident("genum") or meta.is_ident("gflags"):
            nodes.append(GObject.load_enum(mod_cfg, item, meta))
    return nodes


def _load_struct(decl: dict, mod_cfg: Optional[Cfg]) -> list[GObject]:
    item = ItemStruct(ident=str(decl["ident"]), attrs=_decode_attrs(decl.get("attrs")))
    return [
        GObject.load_boxed(mod_cfg, item, meta)
        for meta in meta_lists(item.attrs)
        if meta.is_ident("gboxed")
    ]


def _load_impl(decl: dict, mod_cfg: Optional[Cfg]) -> list[GObject]:
    trait = decl.get("trait")
    if not trait:
        return []
    trait_name = str(trait).split("::")[-1]
    if trait_name not in {OBJECT_TRAIT, INTERFACE_TRAIT}:
        return []
    item = ItemImpl(
        self_ty=_decode_type(decl["self_ty"]),
        trait_path=str(trait),
        items=[_decode_impl_item(raw) for raw in decl.get("items", [])],
        attrs=_decode_attrs(decl.get("attrs")),
    )
    if not isinstance(item.self_ty, TypePath):
        raise GenerationError(f"impl {trait_name}: self type must be a path")
    path = Path("::".join(item.self_ty.segments))
    if trait_name == OBJECT_TRAIT:
        return [GObject.load_object(path, mod_cfg, item)]
    return [GObject.load_interface(path, mod_cfg, item)]


_LOADERS = {
    "enum": _load_enum,
    "struct": _load_struct,
    "impl": _load_impl,
}


def _describe(decl: Any, index: int) -> str:
    if isinstance(decl, dict):
        label = decl.get("ident") or decl.get("self_ty")
        if isinstance(label, str):
            return f"{decl.get('item', '?')} {label}"
    return f"declaration #{index}"


def discover(declarations: list, log: Optional[Log] = None) -> list[GObject]:
    nodes: list[GObject] = []
    errors: list[GenerationError] = []
    for index, decl in enumerate(declarations):
        where = _describe(decl, index)
        try:
            if not isinstance(decl, dict):
                raise GenerationError("expected a declaration object")
            loader = _LOADERS.get(str(decl.get("item")))
            if loader is None:
                if log is not None:
                    log(f"skip {where}: unsupported item kind")
                continue
            mod_cfg = load_cfg(_decode_attrs(decl.get("module_attrs")))
            loaded = loader(decl, mod_cfg)
        except KeyError as exc:
            errors.append(GenerationError(f"{where}: missing field {exc.args[0]!r}"))
            continue
        except MissingAttributeError as exc:
            errors.append(exc)
            continue
        except GenerationError as exc:
            errors.append(GenerationError(f"{where}: {exc}"))
            continue
        for node in loaded:
            if log is not None:
                log(f"{where}: {type(node.gtype).__name__.removeprefix('GType').lower()} `{node.name}`")
            nodes.append(node)
    if errors:
        raise DiscoveryError(errors)
    return nodes


def load_config(raw: Any, base: Optional[Config] = None) -> Config:
    config = base or Config()
    if raw is None:
        return config
    if not isinstance(raw, dict):
        raise GenerationError("`config` must be an object")
    for key in ("header", "trailer", "include_guard"):
        if raw.get(key) is not None:
            setattr(config, key, str(raw[key]))
    if "sys_includes" in raw:
        config.sys_includes = [str(v) for v in raw["sys_includes"]]
    if "includes" in raw:
        config.includes = [str(v) for v in raw["includes"]]
    if "defines" in raw:
        config.defines = {str(k): str(v) for k, v in dict(raw["defines"]).items()}
    return config


def load_manifest_data(data: Any, config: Optional[Config] = None) -> tuple[Library, Config]:
    if not isinstance(data, dict):
        raise GenerationError("manifest must be a JSON object")
    config = load_config(data.get("config"), config)
    opaque = [OpaqueItem(Path(str(name)), str(kind)) for name, kind in dict(data.get("types", {})).items()]
    nodes = discover(list(data.get("declarations", [])), make_log("discovery", config.verbose))
    return Library(nodes, opaque), config


def manifest_path(input_path: str) -> FsPath:
    path = FsPath(input_path)
    if path.is_dir():
        return path / MANIFEST_NAME
    return path


def load_manifest(input_path: str, config: Optional[Config] = None) -> tuple[Library, Config]:
    path = manifest_path(input_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise GenerationError(f"manifest not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise GenerationError(f"{path}: invalid JSON: {exc}") from exc
    return load_manifest_data(data, config)

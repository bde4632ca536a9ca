from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NoReturn, Optional, Union

from .errors import MissingAttributeError, NameDerivationError
from .ir_annotation import AnnotationSet, Documentation
from .ir_cfg import Cfg, append_cfg, load_cfg
from .ir_types import ItemContainer, Path, Type
from .naming import to_shouty_snake_case, to_snake_case
from .syntax import (
    ExprLit,
    ImplItemConst,
    ImplItemType,
    ItemEnum,
    ItemImpl,
    ItemStruct,
    Lit,
    MetaList,
    MetaNameValue,
)
from .writer import SourceWriter

if TYPE_CHECKING:
    from .bindings import Config
    from .library import DeclarationTypeResolver, Dependencies, Library


INTERFACE_SUFFIX = "Interface"


@dataclass
class GTypeObject:
    parent_type: Type
    instance: Optional[Type] = None
    klass: Optional[Type] = None


@dataclass
class GTypeInterface:
    type_: Type


@dataclass
class GTypeBoxed:
    pass


@dataclass
class GTypeEnum:
    type_: Type


@dataclass
class GTypeError:
    type_: Type


GType = Union[GTypeObject, GTypeInterface, GTypeBoxed, GTypeEnum, GTypeError]


def _unhandled(gtype: NoReturn) -> NoReturn:
    raise AssertionError(f"unhandled GType variant: {gtype!r}")


def _name_value_str(meta: object, key: str) -> Optional[str]:
    if isinstance(meta, MetaNameValue) and meta.is_ident(key) and meta.lit.kind == "str":
        return str(meta.lit.value)
    return None


def _const_str(item: ImplItemConst) -> Optional[str]:
    if isinstance(item.expr, ExprLit) and item.expr.lit.kind == "str":
        return str(item.expr.lit.value)
    return None


@dataclass
class GObject:
    path: Path
    name: str
    gtype: GType
    cfg: Optional[Cfg] = None
    annotations: AnnotationSet = field(default_factory=AnnotationSet)
    documentation: Documentation = field(default_factory=Documentation)

    @classmethod
    def load_error_domain(cls, mod_cfg: Optional[Cfg], input: ItemEnum, meta: MetaList) -> "GObject":
        name = None
        if meta.is_ident("gerror_domain"):
            for nested in meta.nested:
                value = _name_value_str(nested, "name")
                if value is not None:
                    name = value
        if name is None:
            raise MissingAttributeError(input.ident, "name")

        path = Path(input.ident)
        return cls(
            path,
            name,
            GTypeError(Type.path(path.full)),
            append_cfg(mod_cfg, load_cfg(input.attrs)),
            AnnotationSet.load(input.attrs),
            Documentation.load(input.attrs),
        )

    @classmethod
    def load_enum(cls, mod_cfg: Optional[Cfg], input: ItemEnum, meta: MetaList) -> "GObject":
        type_name = None
        if meta.is_ident("genum"):
            for nested in meta.nested:
                value = _name_value_str(nested, "type_name")
                if value is not None:
                    type_name = value
        if meta.is_ident("gflags"):
            for nested in meta.nested:
                if isinstance(nested, Lit) and nested.kind == "str":
                    type_name = str(nested.value)
        if type_name is None:
            raise MissingAttributeError(input.ident, "type_name")

        path = Path(input.ident)
        return cls(
            path,
            type_name,
            GTypeEnum(Type.path(path.full)),
            append_cfg(mod_cfg, load_cfg(input.attrs)),
            AnnotationSet.load(input.attrs),
            Documentation.load(input.attrs),
        )

    @classmethod
    def load_boxed(cls, mod_cfg: Optional[Cfg], input: ItemStruct, meta: MetaList) -> "GObject":
        type_name = None
        for nested in meta.nested:
            value = _name_value_str(nested, "name")
            if value is not None:
                type_name = value
        if type_name is None:
            raise MissingAttributeError(input.ident, "name")

        return cls(
            Path(input.ident),
            type_name,
            GTypeBoxed(),
            append_cfg(mod_cfg, load_cfg(input.attrs)),
            AnnotationSet.load(input.attrs),
            Documentation.load(input.attrs),
        )

    @classmethod
    def load_interface(cls, path: Path, mod_cfg: Optional[Cfg], input: ItemImpl) -> "GObject":
        name = None
        for item in input.items:
            if isinstance(item, ImplItemConst) and item.ident == "NAME":
                value = _const_str(item)
                if value is not None:
                    name = value
        if name is None:
            raise MissingAttributeError(path.name, "NAME")

        type_ = Type.load(input.self_ty)
        if type_ is None:
            raise MissingAttributeError(path.name, "Self")

        return cls(
            path,
            name,
            GTypeInterface(type_),
            append_cfg(mod_cfg, load_cfg(input.attrs)),
            AnnotationSet.load(input.attrs),
            Documentation.load(input.attrs),
        )

    @classmethod
    def load_object(cls, path: Path, mod_cfg: Optional[Cfg], input: ItemImpl) -> "GObject":
        name = None
        instance = None
        klass = None
        parent_type = None
        for item in input.items:
            if isinstance(item, ImplItemType):
                if item.ident == "Instance":
                    instance = Type.load(item.ty)
                elif item.ident == "Class":
                    klass = Type.load(item.ty)
                elif item.ident == "ParentType":
                    parent_type = Type.load(item.ty)
            elif isinstance(item, ImplItemConst) and item.ident == "NAME":
                value = _const_str(item)
                if value is not None:
                    name = value
        if parent_type is None:
            raise MissingAttributeError(path.name, "ParentType")
        if name is None:
            raise MissingAttributeError(path.name, "NAME")

        return cls(
            path,
            name,
            GTypeObject(parent_type=parent_type, instance=instance, klass=klass),
            append_cfg(mod_cfg, load_cfg(input.attrs)),
            AnnotationSet.load(input.attrs),
            Documentation.load(input.attrs),
        )

    @property
    def export_name(self) -> str:
        return self.name

    @property
    def identity(self) -> str:
        return self.name

    def container(self) -> ItemContainer:
        return ItemContainer("gobject", self)

    def rename_for_config(self, config: "Config") -> None:
        # Runtime names are fixed by GObject convention.
        pass

    def referenced_types(self) -> list[Type]:
        gtype = self.gtype
        if isinstance(gtype, GTypeObject):
            types = [gtype.parent_type]
            if gtype.instance is not None:
                types.append(gtype.instance)
            if gtype.klass is not None:
                types.append(gtype.klass)
            return types
        if isinstance(gtype, GTypeInterface):
            return [gtype.type_]
        if isinstance(gtype, GTypeBoxed):
            return []
        if isinstance(gtype, (GTypeEnum, GTypeError)):
            return [gtype.type_]
        _unhandled(gtype)

    def add_dependencies(self, library: "Library", out: "Dependencies") -> None:
        for type_ in self.referenced_types():
            type_.add_dependencies(library, out)

    def resolve_declaration_types(self, resolver: "DeclarationTypeResolver") -> "ResolvedGObject":
        gtype = self.gtype
        if isinstance(gtype, GTypeObject):
            gtype.parent_type.resolve_declaration_types(resolver)
            if gtype.instance is not None:
                gtype.instance.resolve_declaration_types(resolver)
            if gtype.klass is not None:
                gtype.klass.resolve_declaration_types(resolver)
        elif isinstance(gtype, GTypeInterface):
            gtype.type_.resolve_declaration_types(resolver)
        elif isinstance(gtype, (GTypeBoxed, GTypeEnum, GTypeError)):
            # Enum and error payloads are only rendered by raw name.
            pass
        else:
            _unhandled(gtype)
        return ResolvedGObject(self)


@dataclass(frozen=True)
class ResolvedGObject:
    node: GObject

    @property
    def path(self) -> Path:
        return self.node.path

    @property
    def cfg(self) -> Optional[Cfg]:
        return self.node.cfg

    def container(self) -> ItemContainer:
        return ItemContainer("gobject", self)


def derive_names(gtype: GType, path: Path, runtime_name: str) -> tuple[str, str]:
    """Split ``runtime_name`` into the module prefix and the local type name.

    ``GtkWidget`` declared as ``Widget`` gives ``("Gtk", "Widget")``. For
    interfaces the declaration is conventionally named ``<Name>Interface``
    and the suffix is dropped before matching.
    """

    if isinstance(gtype, GTypeInterface):
        if not path.name.endswith(INTERFACE_SUFFIX):
            raise NameDerivationError(
                str(path), runtime_name, f"interface `{path.name}` does not end with `{INTERFACE_SUFFIX}`"
            )
        local_name = path.name[: -len(INTERFACE_SUFFIX)]
    elif isinstance(gtype, (GTypeObject, GTypeBoxed, GTypeEnum, GTypeError)):
        local_name = path.name
    else:
        _unhandled(gtype)

    if not local_name:
        raise NameDerivationError(str(path), runtime_name, "empty local name")
    if not runtime_name.endswith(local_name):
        raise NameDerivationError(str(path), runtime_name, f"runtime name does not end with `{local_name}`")
    prefix = runtime_name[: -len(local_name)]
    if not prefix:
        raise NameDerivationError(str(path), runtime_name, "empty module prefix")
    return prefix, local_name


def write_gobject(resolved: ResolvedGObject, config: Optional["Config"], out: SourceWriter) -> None:
    node = resolved.node
    gtype = node.gtype
    prefix, local_name = derive_names(gtype, node.path, node.name)
    name_up = to_shouty_snake_case(local_name)
    prefix_up = to_shouty_snake_case(prefix)
    snake = to_snake_case(node.name)
    type_up = f"{prefix_up}_TYPE_{name_up}"

    if isinstance(gtype, GTypeError):
        out.write_line(f"#define {prefix_up}_{name_up}                    ({snake}_quark())")
    else:
        out.write_line(f"#define {type_up}                    ({snake}_get_type())")

    if isinstance(gtype, (GTypeObject, GTypeInterface)):
        out.write_line(
            f"#define {prefix_up}_{name_up}(obj)            "
            f"(G_TYPE_CHECK_INSTANCE_CAST((obj),{type_up},{node.name}))"
        )
        out.write_line(
            f"#define {prefix_up}_IS_{name_up}(obj)         "
            f"(G_TYPE_CHECK_INSTANCE_TYPE((obj),{type_up}))"
        )

    if isinstance(gtype, GTypeObject):
        out.write_line(
            f"#define {prefix_up}_{name_up}_CLASS(klass)    "
            f"(G_TYPE_CHECK_CLASS_CAST((klass),{type_up},{node.name}Class))"
        )
        out.write_line(
            f"#define {prefix_up}_IS_{name_up}_CLASS(klass) "
            f"(G_TYPE_CHECK_CLASS_TYPE((klass),{type_up}))"
        )
        out.write_line(
            f"#define {prefix_up}_{name_up}_GET_CLASS(obj)  "
            f"(G_TYPE_INSTANCE_GET_CLASS((obj),{type_up},{node.name}Class))"
        )
        out.write_line(f"G_DEFINE_AUTOPTR_CLEANUP_FUNC({node.name}, g_object_unref)")
    elif isinstance(gtype, GTypeInterface):
        out.write_line(
            f"#define {prefix_up}_{name_up}_GET_INTERFACE(obj)  "
            f"(G_TYPE_INSTANCE_GET_CLASS((obj),{type_up},{node.name}Interface))"
        )
    elif isinstance(gtype, GTypeBoxed):
        # No cleanup declaration: the boxed free function name is not known here.
        pass
    elif isinstance(gtype, (GTypeEnum, GTypeError)):
        pass
    else:
        _unhandled(gtype)
    out.new_line()

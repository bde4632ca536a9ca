from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TextIO

from .errors import RenderError
from .gobject import ResolvedGObject, write_gobject
from .ir_cfg import cfg_to_condition, describe_cfg
from .library import DeclarationTypeResolver, Library, ResolvedLibrary
from .utils import make_log, warn
from .writer import SourceWriter

DEFAULT_HEADER = "/* Generated by gbindgen */"


@dataclass
class Config:
    header: Optional[str] = None
    trailer: Optional[str] = None
    include_guard: Optional[str] = None
    sys_includes: list[str] = field(default_factory=lambda: ["glib-object.h"])
    includes: list[str] = field(default_factory=list)
    defines: dict[str, str] = field(default_factory=dict)
    verbose: set[str] = field(default_factory=set)
    quiet: bool = False


@dataclass
class Bindings:
    config: Config
    library: ResolvedLibrary

    def write(self, stream: TextIO) -> None:
        config = self.config
        out = SourceWriter(stream)
        out.write_line(config.header or DEFAULT_HEADER)
        out.new_line()
        if config.include_guard:
            out.write_line(f"#ifndef {config.include_guard}")
            out.write_line(f"#define {config.include_guard}")
            out.new_line()

        for include in config.sys_includes:
            out.write_line(f"#include <{include}>")
        for include in config.includes:
            out.write_line(f'#include "{include}"')
        if config.sys_includes or config.includes:
            out.new_line()

        forward = [
            item
            for item in self.library.opaque_items()
            if item.declaration_type in {"struct", "union"}
        ]
        for item in forward:
            name = item.export_name
            out.write_line(f"typedef {item.declaration_type} {name} {name};")
        if forward:
            out.new_line()

        for container in self.library.order:
            if container.kind == "gobject":
                assert isinstance(container.item, ResolvedGObject)
                self._write_gobject(container.item, out)

        if config.trailer:
            out.write_line(config.trailer)
            out.new_line()
        if config.include_guard:
            out.write_line(f"#endif /* {config.include_guard} */")

    def _write_gobject(self, resolved: ResolvedGObject, out: SourceWriter) -> None:
        condition = None
        if resolved.cfg is not None:
            condition = cfg_to_condition(resolved.cfg, self.config.defines)
            if condition is None:
                warn(
                    f"{resolved.path}: no define mapping for cfg `{describe_cfg(resolved.cfg)}`, emitting unguarded",
                    self.config.quiet,
                )
        if condition is None:
            write_gobject(resolved, self.config, out)
            return
        out.write_line(f"#if {condition}")
        write_gobject(resolved, self.config, out)
        out.write_line("#endif")
        out.new_line()

    def to_string(self) -> str:
        buffer = io.StringIO()
        self.write(buffer)
        return buffer.getvalue()

    def write_to_file(self, path: str) -> bool:
        """Write the bindings to ``path``; return whether the file changed."""

        target = Path(path)
        text = self.to_string()
        if target.exists() and target.read_text(encoding="utf-8") == text:
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        return True


def generate(library: Library, config: Optional[Config] = None) -> Bindings:
    config = config or Config()
    for node in library.gobjects:
        node.rename_for_config(config)

    dependencies = library.add_dependencies(make_log("dependencies", config.verbose))
    resolver = DeclarationTypeResolver.from_library(library)
    resolved = dependencies.resolve(resolver, make_log("resolve", config.verbose))

    errors = resolved.check_names()
    if errors:
        raise RenderError(list(errors))
    for message in resolved.describe_prefixes():
        warn(message, config.quiet)

    log = make_log("render", config.verbose)
    if log is not None:
        log(f"{len(resolved.gobjects())} object items, {len(resolved.opaque_items())} forward candidates")
    return Bindings(config, resolved)

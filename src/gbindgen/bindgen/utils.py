from __future__ import annotations

import sys
from typing import Callable, Iterable, Optional

Log = Callable[[str], None]


def make_log(name: str, verbose: Optional[set[str]]) -> Optional[Log]:
    if not verbose or (name not in verbose and "all" not in verbose):
        return None

    def _log(msg: str, *, _name: str = name) -> None:
        print(f"[gbindgen:{_name}] {msg}", file=sys.stderr)

    return _log


def warn(msg: str, quiet: bool = False) -> None:
    if not quiet:
        print(f"[gbindgen] warning: {msg}", file=sys.stderr)


def error(msg: str) -> None:
    print(f"[gbindgen] error: {msg}", file=sys.stderr)


def parse_name_list(raw: str) -> set[str]:
    return {item.strip() for item in raw.split(",") if item.strip()}


def join_names(names: Iterable[str]) -> str:
    return ", ".join(sorted(names))

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .errors import AnnotationError
from .syntax import Attribute, doc_lines

ANNOTATION_PREFIX = "gbindgen:"

AnnotationValue = Union[bool, str, list[str]]


def _parse_value(raw: str) -> AnnotationValue:
    raw = raw.strip()
    if raw.startswith("[") and raw.endswith("]"):
        return [part.strip() for part in raw[1:-1].split(",") if part.strip()]
    if raw == "true":
        return True
    if raw == "false":
        return False
    return raw


@dataclass
class AnnotationSet:
    values: dict[str, AnnotationValue] = field(default_factory=dict)

    @classmethod
    def load(cls, attrs: list[Attribute]) -> "AnnotationSet":
        values: dict[str, AnnotationValue] = {}
        for line in doc_lines(attrs):
            text = line.strip()
            if not text.startswith(ANNOTATION_PREFIX):
                continue
            body = text[len(ANNOTATION_PREFIX):]
            if "=" in body:
                key, raw = body.split("=", 1)
                value = _parse_value(raw)
            else:
                key, value = body, True
            key = key.strip()
            if not key:
                raise AnnotationError(f"empty annotation key in `{text}`")
            if key in values:
                raise AnnotationError(f"duplicate annotation `{key}`")
            values[key] = value
        return cls(values)

    def is_empty(self) -> bool:
        return not self.values

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def get(self, key: str, default=None):
        return self.values.get(key, default)

    def set(self, key: str, value: AnnotationValue) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class Documentation:
    lines: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, attrs: list[Attribute]) -> "Documentation":
        lines = []
        for line in doc_lines(attrs):
            if line.strip().startswith(ANNOTATION_PREFIX):
                continue
            lines.append(line[1:] if line.startswith(" ") else line)
        return cls(lines)

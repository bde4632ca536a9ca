from __future__ import annotations


class GenerationError(Exception):
    pass


class MissingAttributeError(GenerationError):
    def __init__(self, ident: str, key: str) -> None:
        self.ident = ident
        self.key = key
        super().__init__(f"{ident}: missing required attribute `{key}`")


class AnnotationError(GenerationError):
    pass


class NameDerivationError(GenerationError):
    def __init__(self, path: str, runtime_name: str, reason: str) -> None:
        self.path = path
        self.runtime_name = runtime_name
        self.reason = reason
        super().__init__(f"{path}: cannot derive names from `{runtime_name}`: {reason}")


class _AggregateError(GenerationError):
    stage = "generation"

    def __init__(self, errors: list[GenerationError]) -> None:
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} {self.stage} error(s)")


class DiscoveryError(_AggregateError):
    stage = "discovery"


class RenderError(_AggregateError):
    stage = "render"


class DuplicateItemError(GenerationError):
    def __init__(self, identity: str, first: str, second: str) -> None:
        self.identity = identity
        self.first = first
        self.second = second
        super().__init__(f"`{identity}` is declared by both {first} and {second}")

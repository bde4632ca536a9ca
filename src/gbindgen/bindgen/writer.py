from __future__ import annotations

from typing import TextIO


class SourceWriter:
    """Line-at-a-time text sink used by the renderers."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write(self, text: str) -> None:
        if not text:
            return
        self._stream.write(text)

    def new_line(self) -> None:
        self._stream.write("\n")

    def write_line(self, text: str) -> None:
        self.write(text)
        self.new_line()

from __future__ import annotations

# Words split as in `heck`: `GtkWidget` -> gtk_widget, `MyLib` -> MY_LIB,
# `HTTPServer` -> http_server, `Gtk3Widget` -> gtk3_widget.

_BOUNDARY = 0
_LOWER = 1
_UPPER = 2


def _chunk_words(chunk: str) -> list[str]:
    words: list[str] = []
    init = 0
    mode = _BOUNDARY
    for i, ch in enumerate(chunk):
        if i + 1 == len(chunk):
            words.append(chunk[init:])
            break
        nxt = chunk[i + 1]
        if ch.islower():
            next_mode = _LOWER
        elif ch.isupper():
            next_mode = _UPPER
        else:
            next_mode = mode
        if next_mode == _LOWER and nxt.isupper():
            words.append(chunk[init:i + 1])
            init = i + 1
            mode = _BOUNDARY
        elif mode == _UPPER and ch.isupper() and nxt.islower():
            words.append(chunk[init:i])
            init = i
            mode = _BOUNDARY
        else:
            mode = next_mode
    return words


def split_words(name: str) -> list[str]:
    words: list[str] = []
    chunk: list[str] = []
    for ch in name + " ":
        if ch.isalnum():
            chunk.append(ch)
            continue
        if chunk:
            words.extend(_chunk_words("".join(chunk)))
            chunk = []
    return words


def to_snake_case(name: str) -> str:
    return "_".join(word.lower() for word in split_words(name))


def to_shouty_snake_case(name: str) -> str:
    return "_".join(word.upper() for word in split_words(name))

"""Reading files into lines and writing buffers back out.

The buffer models one byte per character. ASCII bytes decode to
themselves and every byte from 0x80 up becomes its ``surrogateescape``
code point, the same mapping the key decoder applies to typed bytes, so
loaded and typed text share one column model and a load/save cycle is
byte-exact.
"""

from __future__ import annotations

from pathlib import Path

ENCODING = "ascii"
ERRORS = "surrogateescape"


def decode(data: bytes) -> str:
    return data.decode(ENCODING, errors=ERRORS)


def encode(text: str) -> bytes:
    return text.encode(ENCODING, errors=ERRORS)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and strip trailing carriage returns.

    A final terminator does not start an extra empty line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line.rstrip("\r") for line in lines]


def load_lines(path: str | Path) -> list[str]:
    """Read *path* and return its lines without terminators."""
    return split_lines(decode(Path(path).read_bytes()))


def write_bytes(path: str | Path, data: bytes) -> int:
    """Write *data* to *path*, replacing its contents. Returns the byte count."""
    return Path(path).write_bytes(data)

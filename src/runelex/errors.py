"""Error types with formatted source context."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from runelex.tokens import Token


class ContractError(Exception):
    """Raised when grammar code breaks an engine contract.

    These are bugs in the caller (emitting the NOOP kind, backing up twice),
    never conditions of the input being scanned.
    """


class GrammarLoadError(Exception):
    """Raised when a ``module:attribute`` grammar reference cannot be loaded."""


def line_col(source: bytes, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of a byte offset.

    Columns count code points, not bytes.
    """
    offset = max(0, min(offset, len(source)))
    line_start = source.rfind(b"\n", 0, offset) + 1
    line = source.count(b"\n", 0, offset) + 1
    column = len(source[line_start:offset].decode("utf-8", errors="replace")) + 1
    return line, column


def _as_bytes(source: str | bytes) -> bytes:
    if isinstance(source, str):
        return source.encode("utf-8")
    return bytes(source)


class ScanError(Exception):
    """An Error token lifted into an exception, with position and source context."""

    def __init__(self, message: str, position: int, source: str | bytes) -> None:
        self.message = message
        self.position = position
        self.source = _as_bytes(source)
        self.line, self.column = line_col(self.source, position)
        super().__init__(self.format())

    @classmethod
    def from_token(cls, token: Token, source: str | bytes) -> ScanError:
        return cls(token.text, token.position, source)

    def format(self, filename: str = "<input>") -> str:
        lines = self.source.split(b"\n")
        line_idx = self.line - 1

        # Build the source line (strip trailing CR for display)
        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip(b"\r").decode("utf-8", errors="replace")
        else:
            source_line = ""

        pad = " " * (self.column - 1)
        line_num = str(self.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.line}:{self.column}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )

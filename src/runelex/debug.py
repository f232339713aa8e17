"""Token dumps for --debug style output."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from runelex.errors import line_col
from runelex.tokens import Token

__all__ = ["dump_tokens", "format_token", "line_col", "token_record"]


def _as_bytes(source: str | bytes) -> bytes:
    return source.encode("utf-8") if isinstance(source, str) else bytes(source)


def format_token(token: Token, source: bytes) -> str:
    """One line: ``line:col  offset  KIND  display``."""
    line, col = line_col(source, token.position)
    where = f"{line}:{col}"
    return f"{where:<8} {token.position:>6}  {token.kind.name:<12} {token.display()}"


def token_record(token: Token, source: bytes) -> dict[str, object]:
    """A JSON-ready description of a token."""
    line, col = line_col(source, token.position)
    return {
        "kind": token.kind.name,
        "position": token.position,
        "line": line,
        "column": col,
        "text": token.text,
    }


def dump_tokens(
    tokens: Iterable[Token], source: str | bytes, *, file: TextIO = sys.stderr
) -> None:
    """Print a human-readable token listing to *file*."""
    data = _as_bytes(source)
    for token in tokens:
        file.write(format_token(token, data) + "\n")

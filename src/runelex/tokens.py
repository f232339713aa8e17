"""Token kinds, the Token value type, and its diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from runelex.errors import ContractError

# Characters of token text shown by Token.display() before truncating.
DISPLAY_WIDTH = 10


class TokenKind(IntEnum):
    """Kinds reserved by the engine.

    Grammars declare their own kinds as members of another Enum. A plain
    Enum never compares equal to these. IntEnum members compare by value
    across classes, so an integer numbering must start above NOOP::

        class Calc(IntEnum):
            NUMBER = TokenKind.NOOP + 1
            PLUS = auto()
    """

    EOF = 1  # end of input
    ERROR = 2  # text holds the error message
    NOOP = 3  # numbering anchor only; never a valid token kind


Kind = TokenKind | Enum


@dataclass(frozen=True, slots=True)
class Token:
    """A classified span of the input, starting at byte offset ``position``."""

    kind: Kind
    position: int
    text: str

    def __post_init__(self) -> None:
        if self.kind is TokenKind.NOOP:
            raise ContractError(
                "TokenKind.NOOP is not a valid token kind; use it only as a numbering base"
            )

    @property
    def is_eof(self) -> bool:
        return self.kind is TokenKind.EOF

    @property
    def is_error(self) -> bool:
        return self.kind is TokenKind.ERROR

    def display(self) -> str:
        """Render the token for debugging output. Not a serialization."""
        if self.kind is TokenKind.EOF:
            return "EOF"
        if self.kind is TokenKind.ERROR:
            return self.text
        if len(self.text) > DISPLAY_WIDTH:
            return f"{self.text[:DISPLAY_WIDTH]!r}…"
        return repr(self.text)

    def __str__(self) -> str:
        return self.display()

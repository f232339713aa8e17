"""Byte-positioned cursor over a UTF-8 buffer, and the services state functions use.

A grammar is a graph of state functions. Each one receives the Scanner,
moves the cursor with next/peek/backup and the accept helpers, emits tokens,
and returns the state function to run next (or None to stop)::

    def lex_number(s: Scanner) -> StateFn | None:
        s.accept_run(DIGITS)
        s.emit(Calc.NUMBER)
        return lex_any

All positions are byte offsets into the encoded input; code points are the
unit of lookahead.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Final, TypeAlias

from runelex.errors import ContractError
from runelex.tokens import Kind, Token, TokenKind

StateFn: TypeAlias = "Callable[[Scanner], StateFn | None]"

# Returned by Scanner.next() and Scanner.peek() at end of input. It is never
# a member of a rune set and never passed to an ignore_runes predicate.
EOF_RUNE: Final = ""

_REPLACEMENT = "\ufffd"


def decode_rune(buf: bytes, pos: int) -> tuple[str, int]:
    """Decode the code point starting at ``buf[pos]``.

    Returns (rune, width in bytes). Malformed or truncated sequences decode
    to U+FFFD with width 1, so scanning always makes progress.
    """
    b0 = buf[pos]
    if b0 < 0x80:
        return chr(b0), 1
    if 0xC2 <= b0 <= 0xDF:
        n = 2
    elif 0xE0 <= b0 <= 0xEF:
        n = 3
    elif 0xF0 <= b0 <= 0xF4:
        n = 4
    else:
        return _REPLACEMENT, 1
    try:
        rune = buf[pos : pos + n].decode("utf-8")
    except UnicodeDecodeError:
        return _REPLACEMENT, 1
    return rune, n


def _rune_set(runes: Iterable[str]) -> frozenset[str]:
    if isinstance(runes, frozenset):
        return runes
    return frozenset(runes)


class Scanner:
    """Cursor state for one scan: the input plus start, pos and last rune width.

    Tokens made by emit() and errorf() are handed to ``deliver``; the engine
    decides what that means (a rendezvous with a consumer thread, or a local
    buffer for pull-driven scanning).
    """

    def __init__(self, input: str | bytes, deliver: Callable[[Token], None]) -> None:
        if isinstance(input, str):
            input = input.encode("utf-8")
        self._input = bytes(input)
        self._deliver = deliver
        self._start = 0
        self._pos = 0
        self._width = 0
        self._can_backup = False

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def input(self) -> bytes:
        return self._input

    @property
    def start(self) -> int:
        """Byte offset where the pending token begins."""
        return self._start

    @property
    def pos(self) -> int:
        """Byte offset of the cursor."""
        return self._pos

    @property
    def pending(self) -> str:
        """Text consumed since the last emit or ignore.

        Malformed bytes decode as lone surrogates, so
        ``text.encode("utf-8", "surrogateescape")`` is exactly the consumed span.
        """
        return self._input[self._start : self._pos].decode("utf-8", errors="surrogateescape")

    # ------------------------------------------------------------------
    # Rune primitives
    # ------------------------------------------------------------------

    def next(self) -> str:
        """Consume and return the next rune, or EOF_RUNE at end of input."""
        self._can_backup = True
        if self._pos >= len(self._input):
            self._width = 0
            return EOF_RUNE
        rune, self._width = decode_rune(self._input, self._pos)
        self._pos += self._width
        return rune

    def peek(self) -> str:
        """Return but do not consume the next rune."""
        rune = self.next()
        self.backup()
        return rune

    def backup(self) -> None:
        """Step back over the rune returned by the last next().

        Only one backup is allowed per next(), and not once emit() or ignore()
        has moved start past that rune. A no-op after next() hit the end of input.
        """
        if not self._can_backup:
            raise ContractError(
                "backup() must directly follow next(); only one step back is allowed"
            )
        self._can_backup = False
        self._pos -= self._width

    def accept(self, valid: Iterable[str]) -> bool:
        """Consume the next rune if it is in ``valid``."""
        if self.next() in _rune_set(valid):
            return True
        self.backup()
        return False

    def accept_run(self, valid: Iterable[str]) -> bool:
        """Consume a run of runes from ``valid``. False if none were consumed."""
        valid = _rune_set(valid)
        accepted = False
        while self.next() in valid:
            accepted = True
        self.backup()
        return accepted

    def accept_until(self, invalid: Iterable[str]) -> bool:
        """Consume runes up to the first one in ``invalid`` or end of input.

        False if none were consumed.
        """
        invalid = _rune_set(invalid)
        accepted = False
        while True:
            rune = self.next()
            if rune == EOF_RUNE or rune in invalid:
                self.backup()
                return accepted
            accepted = True

    def ignore_runes(self, skip: Callable[[str], bool]) -> None:
        """Consume runes while ``skip`` holds, then drop everything pending."""
        while True:
            rune = self.peek()
            if rune == EOF_RUNE or not skip(rune):
                break
            self.next()
        self.ignore()

    def ignore(self) -> None:
        """Drop the pending input without emitting it."""
        self._can_backup = False
        self._start = self._pos

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def emit(self, kind: Kind) -> None:
        """Emit the pending input as a token of ``kind``.

        May block until the consumer takes the token.
        """
        self._deliver(Token(kind, self._start, self.pending))
        self._start = self._pos
        self._can_backup = False

    def errorf(self, fmt: str, *args: object) -> None:
        """Emit an ERROR token and return None, the terminal state.

        Use as ``return s.errorf("unterminated string")``.
        """
        message = fmt % args if args else fmt
        self._can_backup = False
        self._deliver(Token(TokenKind.ERROR, self._start, message))
        return None

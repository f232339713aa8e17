"""Small grammars used across the test suite (and by the CLI/LSP tests)."""

from __future__ import annotations

from enum import IntEnum, auto

from runelex.engine import eof
from runelex.scanner import EOF_RUNE, Scanner, StateFn
from runelex.tokens import TokenKind

DIGITS = "0123456789"
LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"
KEYWORDS = frozenset({"let", "in"})


class Calc(IntEnum):
    NUMBER = TokenKind.NOOP + 1
    PLUS = auto()
    STRING = auto()
    IDENT = auto()
    KEYWORD = auto()
    CHAR = auto()
    WORD = auto()


# ---------------------------------------------------------------------------
# Expressions: numbers, +, strings, identifiers; whitespace ignored
# ---------------------------------------------------------------------------


def lex_expr(s: Scanner) -> StateFn | None:
    s.ignore_runes(str.isspace)
    r = s.peek()
    if r == EOF_RUNE:
        return eof
    if r in DIGITS:
        return lex_number
    if r in LETTERS:
        return lex_ident
    if r == '"':
        return lex_string
    if r == "+":
        s.next()
        s.emit(Calc.PLUS)
        return lex_expr
    s.next()
    return s.errorf("unexpected character %r", r)


def lex_number(s: Scanner) -> StateFn | None:
    s.accept_run(DIGITS)
    s.emit(Calc.NUMBER)
    return lex_expr


def lex_ident(s: Scanner) -> StateFn | None:
    s.accept_run(LETTERS + DIGITS)
    s.emit(Calc.KEYWORD if s.pending in KEYWORDS else Calc.IDENT)
    return lex_expr


def lex_string(s: Scanner) -> StateFn | None:
    s.accept('"')
    s.accept_until('"\n')
    if not s.accept('"'):
        return s.errorf("unterminated string")
    s.emit(Calc.STRING)
    return lex_expr


# ---------------------------------------------------------------------------
# One CHAR token per code point
# ---------------------------------------------------------------------------


def lex_chars(s: Scanner) -> StateFn | None:
    if s.next() == EOF_RUNE:
        return eof
    s.emit(Calc.CHAR)
    return lex_chars


# ---------------------------------------------------------------------------
# Whitespace-separated words; never fails
# ---------------------------------------------------------------------------


def lex_words(s: Scanner) -> StateFn | None:
    s.ignore_runes(str.isspace)
    if s.peek() == EOF_RUNE:
        return eof
    while True:
        r = s.peek()
        if r == EOF_RUNE or r.isspace():
            break
        s.next()
    s.emit(Calc.WORD)
    return lex_words


# ---------------------------------------------------------------------------
# Misbehaving grammars
# ---------------------------------------------------------------------------


def lex_then_raise(s: Scanner) -> StateFn | None:
    s.next()
    s.emit(Calc.CHAR)
    raise ValueError("grammar bug")


def lex_noop(s: Scanner) -> StateFn | None:
    s.emit(TokenKind.NOOP)
    return None


def lex_double_backup(s: Scanner) -> StateFn | None:
    s.next()
    s.backup()
    s.backup()
    return None


def lex_without_eof(s: Scanner) -> StateFn | None:
    s.accept_run(DIGITS)
    s.emit(Calc.NUMBER)
    return None


not_callable = 42

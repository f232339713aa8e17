"""Lexical scanning engine driven by caller-supplied state functions."""

from __future__ import annotations

from runelex.engine import Lexer, eof, iter_tokens, tokenize
from runelex.errors import ContractError, GrammarLoadError, ScanError
from runelex.scanner import EOF_RUNE, Scanner, StateFn
from runelex.tokens import Kind, Token, TokenKind

__version__ = "0.1.0"

__all__ = [
    "EOF_RUNE",
    "ContractError",
    "GrammarLoadError",
    "Kind",
    "Lexer",
    "ScanError",
    "Scanner",
    "StateFn",
    "Token",
    "TokenKind",
    "eof",
    "iter_tokens",
    "tokenize",
]

"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from runelex.scanner import Scanner
from runelex.tokens import Kind, Token


@pytest.fixture
def scanner():
    """Return a helper that builds a Scanner collecting its tokens in a list."""

    def _scanner(source: str | bytes) -> tuple[Scanner, list[Token]]:
        emitted: list[Token] = []
        return Scanner(source, emitted.append), emitted

    return _scanner


def assert_kinds(tokens: list[Token], expected: list[Kind]) -> None:
    """Assert that the token kinds match the expected list."""
    actual = [t.kind for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"

"""Run loop that drives state functions and hands their tokens to a consumer.

Two drivers share the same Scanner and state-function contract:

- ``Lexer`` scans on a background thread. Each emit blocks until the
  consumer takes the token with ``next_token()``.
- ``iter_tokens`` is pull-driven and single-threaded: a state function only
  runs when the consumer asks for a token that has not been produced yet.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING

from runelex.errors import ScanError
from runelex.scanner import Scanner
from runelex.stream import Cancelled, Handoff
from runelex.tokens import Token, TokenKind

if TYPE_CHECKING:
    from runelex.scanner import StateFn

logger = logging.getLogger(__name__)


def eof(s: Scanner) -> None:
    """Terminal state: emit an EOF token and stop."""
    s.emit(TokenKind.EOF)
    return None


class Lexer:
    """Scan ``input`` on a background thread, starting from ``state``.

    Scanning starts as soon as the Lexer is built. Tokens arrive in emission
    order from ``next_token()``; once the grammar stops, ``next_token()``
    returns None. A consumer that stops reading early must call ``drain()``
    (finish the scan, discarding tokens) or ``close()`` (cancel it), or the
    scanning thread stays blocked in emit.
    """

    def __init__(self, input: str | bytes, state: StateFn) -> None:
        self._stream: Handoff[Token] = Handoff()
        self._scanner = Scanner(input, self._stream.send)
        self._failure: Exception | None = None
        self._thread = threading.Thread(
            target=self._run, args=(state,), name="runelex-scan", daemon=True
        )
        self._thread.start()

    @property
    def input(self) -> bytes:
        return self._scanner.input

    @property
    def running(self) -> bool:
        """True while the scanning thread has not finished."""
        return self._thread.is_alive()

    def _run(self, state: StateFn | None) -> None:
        logger.debug("scan started over %d bytes", len(self._scanner.input))
        try:
            while state is not None:
                if self._stream.cancelled:
                    raise Cancelled
                state = state(self._scanner)
        except Cancelled:
            logger.debug("scan cancelled at byte %d", self._scanner.pos)
        except Exception as exc:
            logger.debug("state function raised at byte %d: %r", self._scanner.pos, exc)
            self._failure = exc
        else:
            logger.debug("scan finished at byte %d", self._scanner.pos)
        finally:
            # No more tokens will be delivered
            self._stream.close()

    def _raise_failure(self) -> None:
        if self._failure is not None:
            failure, self._failure = self._failure, None
            raise failure

    def next_token(self) -> Token | None:
        """Return the next token, blocking until one is emitted.

        Returns None once the scan has ended. If a state function raised,
        that exception is raised here (once) after every token emitted
        before it has been returned.
        """
        token = self._stream.recv()
        if token is None:
            self._raise_failure()
        return token

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token

    def drain(self) -> None:
        """Discard the remaining tokens so the scanning thread can finish."""
        while self._stream.recv() is not None:
            pass
        self._thread.join()
        self._raise_failure()

    def close(self) -> None:
        """Cancel the scan without running the rest of the grammar.

        A state function already running completes its current step; the
        first emit it attempts afterwards, or the next state transition,
        ends the scan.
        """
        self._stream.cancel()
        self._thread.join()

    def __enter__(self) -> Lexer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def iter_tokens(input: str | bytes, state: StateFn) -> Iterator[Token]:
    """Scan lazily on the calling thread, yielding tokens as they are emitted."""
    buffer: deque[Token] = deque()
    scanner = Scanner(input, buffer.append)
    current: StateFn | None = state
    while current is not None:
        try:
            current = current(scanner)
        except Exception:
            # Deliver what the failing state emitted before raising
            while buffer:
                yield buffer.popleft()
            raise
        while buffer:
            yield buffer.popleft()


def tokenize(input: str | bytes, state: StateFn, *, strict: bool = False) -> list[Token]:
    """Convenience function: scan input and return the token list.

    With ``strict``, an ERROR token raises ScanError instead of being returned.
    """
    tokens: list[Token] = []
    for token in iter_tokens(input, state):
        if strict and token.is_error:
            raise ScanError.from_token(token, input)
        tokens.append(token)
    return tokens

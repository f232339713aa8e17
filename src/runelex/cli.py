"""Command-line interface: scan a file with a grammar and list its tokens."""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from runelex.debug import format_token, token_record
from runelex.engine import Lexer, iter_tokens
from runelex.errors import ContractError, GrammarLoadError, ScanError

if TYPE_CHECKING:
    from runelex.scanner import StateFn
    from runelex.tokens import Token

logger = logging.getLogger(__name__)

FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    grammar: str
    format: str
    threaded: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="runelex",
        description="Scan a file with a state-function grammar and list its tokens",
    )
    p.add_argument("input", help="Input file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-g",
        "--grammar",
        metavar="MODULE:ATTR",
        help="Initial state function, e.g. mylang.lexer:lex_start",
    )
    p.add_argument("--format", choices=FORMATS, default=None, help="Output format (default: text)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover runelex.toml)",
    )
    p.add_argument(
        "--threaded",
        action="store_true",
        default=None,
        help="Scan on a background thread instead of on demand",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "runelex.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_grammar(ref: str) -> StateFn:
    """Resolve a ``module:attribute`` reference to an initial state function."""
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise GrammarLoadError(f"invalid grammar reference (expected MODULE:ATTR): {ref}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise GrammarLoadError(f"cannot import grammar module '{module_name}': {exc}") from exc
    try:
        state = getattr(module, attr)
    except AttributeError:
        raise GrammarLoadError(f"module '{module_name}' has no attribute '{attr}'") from None
    if not callable(state):
        raise GrammarLoadError(f"grammar '{ref}' is not callable")
    logger.debug("loaded grammar %s", ref)
    return state


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)
    cfg_scan = config.get("scan")
    if not isinstance(cfg_scan, dict):
        cfg_scan = {}

    grammar = args.grammar
    if grammar is None:
        cfg_grammar = cfg_scan.get("grammar")
        if not isinstance(cfg_grammar, str):
            raise argparse.ArgumentTypeError(
                "no grammar given (use --grammar or [scan] grammar in runelex.toml)"
            )
        grammar = cfg_grammar

    fmt = "text"
    cfg_format = cfg_scan.get("format")
    if isinstance(cfg_format, str):
        if cfg_format not in FORMATS:
            raise argparse.ArgumentTypeError(f"invalid format in config: {cfg_format}")
        fmt = cfg_format
    if args.format is not None:
        fmt = args.format

    threaded = False
    cfg_threaded = cfg_scan.get("threaded")
    if isinstance(cfg_threaded, bool):
        threaded = cfg_threaded
    if args.threaded is not None:
        threaded = args.threaded

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        grammar=grammar,
        format=fmt,
        threaded=threaded,
        verbose=args.verbose,
    )


def scan_file(options: CliOptions) -> tuple[list[Token], bytes]:
    """Read the input file and scan it to completion."""
    state = load_grammar(options.grammar)
    source = options.input_file.read_bytes()
    if options.threaded:
        lexer = Lexer(source, state)
        try:
            tokens = list(lexer)
        finally:
            lexer.close()
    else:
        tokens = list(iter_tokens(source, state))
    return tokens, source


def render_tokens(tokens: list[Token], source: bytes, fmt: str) -> str:
    if fmt == "json":
        return json.dumps([token_record(t, source) for t in tokens], indent=2) + "\n"
    return "".join(format_token(t, source) + "\n" for t in tokens)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        tokens, source = scan_file(options)
    except GrammarLoadError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ContractError as exc:
        print(f"error: grammar broke a scanner contract: {exc}", file=sys.stderr)
        return 2

    output = render_tokens(tokens, source, options.format)
    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    if tokens and tokens[-1].is_error:
        err = ScanError.from_token(tokens[-1], source)
        print(err.format(str(options.input_file)), file=sys.stderr)
        return 1
    return 0

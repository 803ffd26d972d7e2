"""Command-line interface for parenlex."""

from __future__ import annotations

import argparse
import io
import json
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from parenlex.errors import LexError
from parenlex.lexer import Scanner
from parenlex.tokens import Token, TokenKind

FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    format: str
    spaces: bool
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="parenlex",
        description="Tokenize a parenthesized source file",
    )
    p.add_argument("input", help="Input source file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (default: text)",
    )
    p.add_argument(
        "--no-space",
        dest="spaces",
        action="store_false",
        default=None,
        help="Leave Space tokens out of the output",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover parenlex.toml)",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-lex")
    p.add_argument("--debug", action="store_true", help="Dump token table to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "parenlex.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


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

    cfg_output = config.get("output")
    if not isinstance(cfg_output, dict):
        cfg_output = {}

    # Format: config < CLI
    fmt = "text"
    cfg_format = cfg_output.get("format")
    if cfg_format is not None:
        if cfg_format not in FORMATS:
            raise argparse.ArgumentTypeError(
                f"invalid output format in config: {cfg_format!r} "
                f"(expected one of {', '.join(FORMATS)})"
            )
        fmt = cfg_format
    if args.format is not None:
        fmt = args.format

    # Space tokens: config < CLI
    spaces = True
    cfg_spaces = cfg_output.get("spaces")
    if isinstance(cfg_spaces, bool):
        spaces = cfg_spaces
    if args.spaces is not None:
        spaces = args.spaces

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        format=fmt,
        spaces=spaces,
        watch=args.watch,
        debug=args.debug,
    )


def lex_file(options: CliOptions) -> Scanner:
    """Read and scan the input file, returning the finished scanner."""
    source = options.input_file.read_bytes()
    scanner = Scanner(source, str(options.input_file))
    scanner.run()
    return scanner


def render_tokens(tokens: list[Token], fmt: str = "text", spaces: bool = True) -> str:
    """Render tokens as one line per token (text) or a JSON array."""
    if not spaces:
        tokens = [t for t in tokens if t.kind is not TokenKind.SPACE]

    if fmt == "json":
        data = [
            {
                "kind": t.kind.label,
                "text": t.text,
                "line": t.position.line,
                "column": t.position.column,
                "offset": t.position.offset,
            }
            for t in tokens
        ]
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    return "".join(f"{t}\n" for t in tokens)


def _to_bytes(text: str) -> bytes:
    # Scanned files are decoded as Latin-1, so encoding back restores the
    # input bytes exactly
    return text.encode("latin-1", errors="backslashreplace")


def _write_raw(stream: TextIO, text: str) -> None:
    """Write scanner-derived text to a standard stream byte for byte."""
    stream.flush()
    stream.buffer.write(_to_bytes(text))
    stream.buffer.flush()


def write_output(options: CliOptions, scanner: Scanner) -> None:
    out = render_tokens(scanner.tokens, options.format, options.spaces)
    if options.output_file:
        options.output_file.write_bytes(_to_bytes(out))
    else:
        _write_raw(sys.stdout, out)

    if options.debug:
        from parenlex.debug import dump_tokens

        buf = io.StringIO()
        dump_tokens(scanner.tokens, file=buf)
        _write_raw(sys.stderr, buf.getvalue())


def report_lex_error(scanner: Scanner) -> bool:
    """Print the formatted LexError to stderr; return True if there was one."""
    try:
        scanner.raise_for_error()
    except LexError as exc:
        _write_raw(sys.stderr, f"{exc}\n")
        return True
    return False


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-lex on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    scanner = lex_file(options)
                    write_output(options, scanner)
                except OSError as exc:
                    print(f"error: {exc}", file=sys.stderr)
                else:
                    if not report_lex_error(scanner):
                        print(f"Scanned {options.input_file}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s"
        )

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        scanner = lex_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        write_output(options, scanner)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if report_lex_error(scanner):
        return 1

    return 0

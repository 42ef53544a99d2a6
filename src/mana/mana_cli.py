"""
Mana CLI Entrypoint.

This module provides the command-line interface for the Mana front end.
It parses Mana source and prints it back in one of several forms, or starts
the interactive REPL.

Features:
    - Read source from `.mana` files or inline strings.
    - Print the canonical rendering, the AST as JSON, or the token stream.
    - Output to console or file.
    - Report every parse error on stderr and exit with status 1.
    - Launch an interactive REPL.

Example usage:
    mana hello.mana
    mana -s "let x = 5 * (2 + 3);"
    mana hello.mana -f json -o hello.json
    mana --repl --tokens
"""

import argparse
import json
import logging
import sys

from mana.mana_lexer import tokenize
from mana.mana_parser import ParseError, parse_or_raise

logger = logging.getLogger(__name__)

FORMATS = ("string", "json", "tokens")


def render(source: str, fmt: str = "string") -> str:
    """
    Render Mana source in the requested output form.

    Args:
        source (str): Mana source code.
        fmt (str): One of "string" (canonical source), "json" (AST) or "tokens".

    Raises:
        ParseError: If the source does not parse (not raised for "tokens").
        ValueError: If `fmt` is not a known format.
    """
    if fmt == "tokens":
        return "\n".join(
            f"{tok.line}:{tok.col}\t{tok.type.name}\t{tok.literal!r}"
            for tok in tokenize(source)
        )
    if fmt not in FORMATS:
        raise ValueError(f"Unknown output format: {fmt}")

    program = parse_or_raise(source)
    logger.debug("parsed %d top-level statement(s)", len(program.statements))
    if fmt == "json":
        return json.dumps(program.to_dict(), indent=2)
    return program.string()


def run_mana(
    source: str,
    is_string: bool = False,
    fmt: str = "string",
    out: str | None = None,
) -> None:
    """
    Run the Mana front end: read, lex, parse, render, then print or write output.

    Args:
        source (str): The Mana source code or path to a `.mana` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        fmt (str): Output form, see `render`.
        out (str | None): Optional path to write the output. If None, prints to stdout.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.mana'.
        ParseError: If the source does not parse.
    """
    if not is_string and not source.endswith(".mana"):
        raise ValueError("Only .mana files are supported.")
    if not is_string:
        logger.debug("reading %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    result = render(source, fmt)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(result + "\n")
        logger.debug("wrote %s", out)
    else:
        print(result)


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the Mana CLI.

    Launches the REPL if no arguments are passed or `--repl` is given;
    otherwise parses the source and prints it in the requested format.
    Exits with status 1 (after printing every error) if parsing fails.
    """
    args_list = sys.argv[1:] if argv is None else argv
    parser = argparse.ArgumentParser(prog="mana")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="string",
        help="Output form (default: string)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL instead"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Start the REPL in tokens mode"
    )
    parser.add_argument(
        "--ast",
        action="store_true",
        help="Start the REPL in verbose (AST dump) mode",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args(args_list)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.repl or args.source is None:
        from mana.mana_repl import start_repl

        start_repl(show_tokens=args.tokens, verbose=args.ast)
        return

    try:
        run_mana(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
        )
    except ParseError as e:
        print("ParseError:", file=sys.stderr)
        for diagnostic in e.diagnostics:
            print(f"\t{diagnostic}", file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"mana: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()

"""
Interactive read-parse-print loop for Mana.

Each line read at the `>>> ` prompt is tokenized and parsed with a fresh
parser. A successful parse is echoed back in its canonical form; a failed
parse prints every accumulated error under a `ParseError:` header.

REPL commands:
    exit / quit     leave the REPL
    tokens-mode     toggle printing of the token stream for each line
    verbose-mode    toggle printing of the AST as a dict for each line
"""

import getpass
import json
import sys
from typing import TextIO

from mana.mana_lexer import tokenize
from mana.mana_parser import Parser

PROMPT = ">>> "
BANNER = """
███╗░░░███╗░█████╗░███╗░░██╗░█████╗░
████╗░████║██╔══██╗████╗░██║██╔══██╗
██╔████╔██║███████║██╔██╗██║███████║
██║╚██╔╝██║██╔══██║██║╚████║██╔══██║
██║░╚═╝░██║██║░░██║██║░╚███║██║░░██║
╚═╝░░░░░╚═╝╚═╝░░╚═╝╚═╝░░╚══╝╚═╝░░╚═╝
"""


def print_parser_errors(errors: list[str], out: TextIO | None = None) -> None:
    out = out or sys.stdout
    out.write("ParseError:\n")
    for msg in errors:
        out.write(f"\t{msg}\n")


def print_tokens(src: str) -> None:
    for tok in tokenize(src):
        print(f"[token] >>> {tok!r}")


def greeting() -> str:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        # No login name in the environment or the password database.
        user = "there"
    return f"Hello {user}! Welcome to Mana REPL!"


def start_repl(show_tokens: bool = False, verbose: bool = False) -> None:
    print(greeting())
    print(BANNER)
    print("Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src = input(PROMPT).strip()
            if src in ("exit", "quit"):
                print("Exiting Mana REPL.")
                return
            if not src:
                continue
            if src == "tokens-mode":
                show_tokens = not show_tokens
                print(f"[mode] >>> Tokens mode {'ON' if show_tokens else 'OFF'}")
                continue
            if src == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue

            if show_tokens:
                print_tokens(src)

            parser = Parser.from_source(src)
            program = parser.parse_program()

            if parser.errors:
                print_parser_errors(parser.errors)
                continue

            if verbose:
                print(json.dumps(program.to_dict(), indent=2))
            print(program.string())

        except (KeyboardInterrupt, EOFError):
            print("\nExiting Mana REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()

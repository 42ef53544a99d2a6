import os
from typing import Any

import pytest

from mana.mana_ast import Program
from mana.mana_parser import Parser

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


def parse_clean(source: str) -> Program:
    """Parses ``source`` and fails the test if the parser recorded any error."""
    parser = Parser.from_source(source)
    program = parser.parse_program()
    assert parser.errors == [], f"parser had {len(parser.errors)} errors: {parser.errors}"
    return program


@pytest.fixture  # type: ignore[misc]
def parse_ok() -> Any:
    return parse_clean

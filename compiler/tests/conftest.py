#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tin_ast import Program
from tin_driver import TinDriver
from tin_parser import Parser


@pytest.fixture
def temp_project(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def write_tin_file(temp_project: Path):
    def _write(name: str, content: str) -> Path:
        file_path = temp_project.joinpath(name).with_suffix(".tin")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(dedent(content))
        return file_path

    return _write


@pytest.fixture
def analyze_single(write_tin_file):
    """Analyze a single Tin file from source string.

    Usage:
        def test_something(analyze_single):
            result = analyze_single('''
                fun f() begin return 42 end;
                x := f()
            ''')
            assert not result.has_errors()
    """

    def _analyze(src: str, name: str = "main"):
        path = write_tin_file(name, src)
        return TinDriver().analyze(path)

    return _analyze


def parse_program(src: str) -> Program:
    """Parse without resolving calls."""
    return Parser.from_source(dedent(src)).parse_program()


def main_body(src: str):
    """Body of the synthesized entry function."""
    return parse_program(src).entry_function.body


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given error code.

    Args:
        diagnostics: List of Diagnostic objects
        code: Error code string like "PAR-0123" or "[PAR-0123]"

    Returns:
        True if any diagnostic message contains the error code
    """
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)

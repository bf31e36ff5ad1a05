#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import re
from pathlib import Path

import pytest

from conftest import has_error_code
from tin_diagnostics import DIAGNOSTIC_CODE_FAMILIES
from tin_driver import TinDriver
from tin_parser import Parser, ParseError


LEX_TRIGGERS = {
    "LEX-0010": 's := "unterminated',
    "LEX-0020": "c := 'ab'",
    "LEX-0040": "x := @",
}

PAR_TRIGGERS = {
    "PAR-0020": "x := 1; fi",
    "PAR-0041": "fun (a) begin skip end",
    "PAR-0042": "fun f begin skip end",
    "PAR-0043": "fun f(1) begin skip end",
    "PAR-0045": "fun f(a begin skip end",
    "PAR-0046": "fun f(a) return a end",
    "PAR-0047": "fun f(a) begin return a",
    "PAR-0100": "if x then fi",
    "PAR-0101": "x",
    "PAR-0121": "if x do skip fi",
    "PAR-0122": "if x then skip elif y do skip fi",
    "PAR-0123": "if x then skip od",
    "PAR-0131": "while x then skip od",
    "PAR-0132": "while x do skip fi",
    "PAR-0141": "for i := 0 i < 3, i := i + 1 do skip od",
    "PAR-0142": "for i := 0, i < 3 i := i + 1 do skip od",
    "PAR-0143": "for i := 0, i < 3, i := i + 1 skip od",
    "PAR-0144": "for i := 0, i < 3, i := i + 1 do skip",
    "PAR-0151": "repeat skip od",
    "PAR-0210": "x := f(1, 2",
    "PAR-0224": "x := (1 + 2",
    "PAR-0225": "x := ;",
}

RES_TRIGGERS = {
    "RES-0010": "x := f(1)",
    "RES-0020": "fun f() begin return 0 end; x := f(1)",
}

# Codes only reachable through Parser.parse_expression.
EXPR_TRIGGERS = {
    "PAR-0021": "1 < 2 < 3",
}

DRV_TRIGGERS = {
    "DRV-0010": "missing.tin",
    "DRV-0020": "",
}


def _all_codes() -> list[str]:
    codes: list[str] = []
    for family in DIAGNOSTIC_CODE_FAMILIES.values():
        codes.extend(family)
    return codes


@pytest.mark.parametrize("code", _all_codes())
def test_diagnostic_code_triggers(code, analyze_single, tmp_path: Path):
    if code in DRV_TRIGGERS:
        # an empty name analyzes the directory itself, which cannot be read
        result = TinDriver().analyze(tmp_path / DRV_TRIGGERS[code])
        assert result.has_errors()
        assert has_error_code(result.diagnostics, code)
        return

    if code in EXPR_TRIGGERS:
        with pytest.raises(ParseError) as excinfo:
            Parser.from_source(EXPR_TRIGGERS[code]).parse_expression()
        assert f"[{code}]" in excinfo.value.message
        return

    for triggers in (LEX_TRIGGERS, PAR_TRIGGERS, RES_TRIGGERS):
        if code in triggers:
            result = analyze_single(triggers[code])
            assert result.has_errors()
            assert has_error_code(result.diagnostics, code)
            return

    pytest.fail(f"no trigger for diagnostic code {code}")


def test_every_code_used_in_sources_is_registered():
    registered = set(_all_codes())
    root = Path(__file__).parent.parent.parent
    used: set[str] = set()
    for path in root.glob("tin*.py"):
        used.update(re.findall(r"\[([A-Z]+-\d{4})\]", path.read_text(encoding="utf-8")))
    used = {code for code in used if not code.startswith("ICE-")}

    assert used
    assert used <= registered

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import parse_program
from tin_ast_printer import format_node, format_program
from tin_driver import read_program


def test_format_program_structure():
    program = parse_program("x := 1 + y")

    assert format_program(program).splitlines() == [
        "Program",
        "  functions:",
        "    FunctionDeclaration(name='main')",
        "      body:",
        "        Assign",
        "          target:",
        "            Variable(name='x')",
        "          value:",
        "            BinaryOperation(op=PLUS)",
        "              left:",
        "                Const(value=1)",
        "              right:",
        "                Variable(name='y')",
    ]


def test_unresolved_and_resolved_targets():
    assert format_node(parse_program("f(1)").entry_function.body)[0] == "FunctionCallStatement"
    assert "FunctionCall(target=?f/1)" in format_program(parse_program("f(1)"))

    program = read_program("fun f(n) begin return f(n) end")
    dumped = format_program(program)
    assert "FunctionCall(target=f/1)" in dumped
    assert "params:" in dumped


def test_spans_are_not_printed():
    dumped = format_program(parse_program("while x do\n skip od"))

    assert "@" not in dumped
    assert "span" not in dumped

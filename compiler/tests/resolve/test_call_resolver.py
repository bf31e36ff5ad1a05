#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from conftest import parse_program
from tin_ast import FunctionCall, UnresolvedFunction, Statement, Program, FunctionDeclaration
from tin_diagnostics import InternalCompilerError
from tin_resolve import CallResolver, CallResolveErrorKind, UnresolvedCallError, index_functions, \
    lookup_function, resolve_calls


def resolve(src: str) -> Program:
    return resolve_calls(parse_program(src))


def test_call_target_is_replaced_by_declaration():
    program = resolve("fun g(x) begin return x end; y := g(1)")

    g = program.functions[0]
    call = program.entry_function.body.value
    assert isinstance(call, FunctionCall)
    assert call.target is g


def test_resolution_is_in_place():
    program = parse_program("fun g() begin skip end; g()")

    assert resolve_calls(program) is program
    assert program.entry_function.body.call.target is program.functions[0]


def test_calls_are_resolved_everywhere():
    src = """
    fun inc(x) begin return x + 1 end;
    fun twice(x) begin return inc(inc(x)) end;
    if twice(1) > 2 then
        while inc(0) do skip od
    else
        repeat inc(2) until !inc(3)
    fi
    """
    program = resolve(src)
    inc, twice = program.functions[0], program.functions[1]

    outer = twice.body.value
    assert outer.target is inc
    assert outer.args[0].target is inc

    stmt = program.entry_function.body
    assert stmt.cond.left.target is twice
    assert stmt.then_branch.cond.target is inc
    repeat = stmt.else_branch
    assert repeat.first.call.target is inc
    assert repeat.second.cond.operand.operand.target is inc
    assert repeat.second.body.call.target is inc


def test_recursive_function_resolves_to_itself():
    program = resolve("fun f(n) begin if n then return f(n - 1) fi; return 0 end")

    f = program.functions[0]
    assert f.body.first.then_branch.value.target is f


def test_entry_function_is_callable():
    program = resolve("fun f() begin return main() end")

    assert program.functions[0].body.value.target is program.entry_function


def test_arity_mismatch_fails():
    with pytest.raises(UnresolvedCallError) as excinfo:
        resolve("fun g(x) begin return x end; y := g(1, 2)")

    err = excinfo.value
    assert err.name == "g"
    assert err.arity == 2
    assert "[RES-0020]" in err.message
    assert "declared with 1" in err.message


def test_unknown_function_fails():
    with pytest.raises(UnresolvedCallError) as excinfo:
        resolve("print(1)")

    err = excinfo.value
    assert (err.name, err.arity) == ("print", 1)
    assert "[RES-0010]" in err.message
    assert err.span is not None
    assert err.span.start_column == 1


def test_same_name_different_arity_selects_by_count():
    program = resolve("fun f() begin return 0 end; fun f(a) begin return a end; x := f(); y := f(1)")

    f0, f1 = program.functions[0], program.functions[1]
    body = program.entry_function.body
    assert body.first.value.target is f0
    assert body.second.value.target is f1


def test_first_duplicate_declaration_wins():
    program = resolve("fun f() begin return 1 end; fun f() begin return 2 end; x := f()")

    assert program.entry_function.body.value.target is program.functions[0]


def test_lookup_function_reports_error_kinds():
    program = parse_program("fun f(a) begin skip end")
    by_name = index_functions(program.functions)

    assert lookup_function(by_name, "f", 1).target is program.functions[0]
    assert lookup_function(by_name, "f", 2).error is CallResolveErrorKind.ARITY_MISMATCH
    assert lookup_function(by_name, "h", 0).error is CallResolveErrorKind.UNKNOWN_FUNCTION


def test_unknown_node_is_an_internal_error():
    class Weird(Statement):
        pass

    decl = FunctionDeclaration("main", [], Weird())
    program = Program([decl], decl)

    with pytest.raises(InternalCompilerError) as excinfo:
        CallResolver(program).resolve()
    assert excinfo.value.code == "ICE-0020"
    assert "Weird" in excinfo.value.message


def test_unresolved_placeholder_carries_call_site_arity():
    program = parse_program("x := h(1, 2, 3)")

    assert program.entry_function.body.value.target == UnresolvedFunction("h", 3)

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional

from tin_ast import (
    Span, Expression, Const, Variable, StringLiteral, UnaryOperation, BinaryOperation, FunctionCall,
    UnresolvedFunction, Statement, Skip, Assign, If, While, Chain, Return, FunctionCallStatement,
    FunctionDeclaration, Program)
from tin_context import CompilationContext
from tin_diagnostics import InternalCompilerError
from tin_logger import log_debug


class CallResolveErrorKind(Enum):
    UNKNOWN_FUNCTION = auto()
    ARITY_MISMATCH = auto()


@dataclass(frozen=True)
class CallResolution:
    target: Optional[FunctionDeclaration]
    error: Optional[CallResolveErrorKind]
    name: str
    arity: int


@dataclass
class UnresolvedCallError(Exception):
    message: str
    name: str
    arity: int
    span: Optional[Span] = None
    filename: Optional[str] = None


def index_functions(functions: List[FunctionDeclaration]) -> Dict[str, List[FunctionDeclaration]]:
    """Group declarations by name, keeping declaration order within each group."""
    by_name: Dict[str, List[FunctionDeclaration]] = {}
    for decl in functions:
        by_name.setdefault(decl.name, []).append(decl)
    return by_name


def lookup_function(
    functions_by_name: Dict[str, List[FunctionDeclaration]],
    name: str,
    arity: int,
) -> CallResolution:
    candidates = functions_by_name.get(name)
    if not candidates:
        return CallResolution(None, CallResolveErrorKind.UNKNOWN_FUNCTION, name, arity)
    for decl in candidates:
        if decl.arity == arity:
            return CallResolution(decl, None, name, arity)
    return CallResolution(None, CallResolveErrorKind.ARITY_MISMATCH, name, arity)


class CallResolver:
    """
    Replaces every UnresolvedFunction call target with the declaration that
    has the same name and parameter count.

    - Works in place on the given Program and returns it.
    - Duplicate declarations are not rejected: the first matching one in
      program.functions wins.
    - The first call that cannot be matched raises UnresolvedCallError.
    """

    def __init__(self, program: Program, context: CompilationContext | None = None,
                 filename: Optional[str] = None):
        self.program = program
        self.context = context or CompilationContext.default()
        self.filename = filename
        self.functions_by_name = index_functions(program.functions)

    def resolve(self) -> Program:
        for name, decls in self.functions_by_name.items():
            arities = [d.arity for d in decls]
            if len(set(arities)) != len(arities):
                log_debug(self.context, f"Function '{name}' declared more than once with the same arity; "
                                        f"calls bind to the first declaration")

        for decl in self.program.functions:
            log_debug(self.context, f"Resolving calls in function '{decl.name}'")
            self._resolve_stmt(decl.body)
        return self.program

    # --- internal helpers ---

    def _resolve_stmt(self, stmt: Statement) -> None:
        if isinstance(stmt, Skip):
            return
        if isinstance(stmt, Assign):
            self._resolve_expr(stmt.value)
        elif isinstance(stmt, If):
            self._resolve_expr(stmt.cond)
            self._resolve_stmt(stmt.then_branch)
            self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, While):
            self._resolve_expr(stmt.cond)
            self._resolve_stmt(stmt.body)
        elif isinstance(stmt, Chain):
            self._resolve_stmt(stmt.first)
            self._resolve_stmt(stmt.second)
        elif isinstance(stmt, Return):
            self._resolve_expr(stmt.value)
        elif isinstance(stmt, FunctionCallStatement):
            self._resolve_expr(stmt.call)
        else:
            raise InternalCompilerError("ICE-0020", f"unexpected statement node {type(stmt).__name__}",
                                        self.filename, stmt.span)

    def _resolve_expr(self, expr: Expression) -> None:
        if isinstance(expr, (Const, Variable, StringLiteral)):
            return
        if isinstance(expr, UnaryOperation):
            self._resolve_expr(expr.operand)
        elif isinstance(expr, BinaryOperation):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, FunctionCall):
            for arg in expr.args:
                self._resolve_expr(arg)
            if isinstance(expr.target, UnresolvedFunction):
                expr.target = self._resolve_target(expr)
        else:
            raise InternalCompilerError("ICE-0021", f"unexpected expression node {type(expr).__name__}",
                                        self.filename, expr.span)

    def _resolve_target(self, call: FunctionCall) -> FunctionDeclaration:
        target = call.target
        result = lookup_function(self.functions_by_name, target.name, target.arity)
        if result.target is not None:
            return result.target

        if result.error is CallResolveErrorKind.UNKNOWN_FUNCTION:
            message = f"[RES-0010] call to undeclared function '{target.name}' with {target.arity} argument(s)"
        else:
            declared = ", ".join(str(d.arity) for d in self.functions_by_name[target.name])
            message = (f"[RES-0020] no function '{target.name}' takes {target.arity} argument(s) "
                       f"(declared with {declared})")
        raise UnresolvedCallError(message, target.name, target.arity, call.span, self.filename)


def resolve_calls(program: Program, context: CompilationContext | None = None,
                  filename: Optional[str] = None) -> Program:
    return CallResolver(program, context, filename).resolve()

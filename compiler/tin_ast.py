#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Union


# ==========================
# AST definitions
# ==========================


@dataclass
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)


# --- operators ---

class BinaryOperator(Enum):
    OR = auto()  # !!
    AND = auto()  # &&
    LT = auto()  # <
    GT = auto()  # >
    EQ = auto()  # ==
    NEQ = auto()  # !=
    LEQ = auto()  # <=
    GEQ = auto()  # >=
    PLUS = auto()  # +
    MINUS = auto()  # -
    TIMES = auto()  # *
    DIV = auto()  # /
    REM = auto()  # %


class UnaryOperator(Enum):
    NOT = auto()  # !


# --- expressions ---

@dataclass
class Expression(Node):
    pass


@dataclass
class Const(Expression):
    value: int


@dataclass
class Variable(Expression):
    name: str


@dataclass
class StringLiteral(Expression):
    text: str  # without the surrounding quotes


@dataclass
class UnaryOperation(Expression):
    operand: Expression
    op: UnaryOperator


@dataclass
class BinaryOperation(Expression):
    left: Expression
    right: Expression
    op: BinaryOperator


@dataclass
class UnresolvedFunction:
    """Call target placeholder: only the name and the argument count seen at the call site."""
    name: str
    arity: int


@dataclass
class FunctionCall(Expression):
    target: Union[UnresolvedFunction, "FunctionDeclaration"]  # replaced by the call resolver
    args: List[Expression]


# --- statements ---

@dataclass
class Statement(Node):
    pass


@dataclass
class Skip(Statement):
    pass


@dataclass
class Assign(Statement):
    target: Variable
    value: Expression


@dataclass
class If(Statement):
    cond: Expression
    then_branch: Statement
    else_branch: Statement


@dataclass
class While(Statement):
    cond: Expression
    body: Statement


@dataclass
class Chain(Statement):
    first: Statement
    second: Statement


@dataclass
class Return(Statement):
    value: Expression


@dataclass
class FunctionCallStatement(Statement):
    call: FunctionCall


# --- declarations ---

# Identity equality: a resolved FunctionCall points back at its declaration,
# and recursive functions would otherwise compare forever.
@dataclass(eq=False)
class FunctionDeclaration(Node):
    name: str
    params: List[Variable]
    body: Statement

    __eq__ = object.__eq__
    __hash__ = object.__hash__

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass
class Program(Node):
    functions: List[FunctionDeclaration]
    entry_function: FunctionDeclaration = field(repr=False, compare=False)


ENTRY_FUNCTION_NAME = "main"

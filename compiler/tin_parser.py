#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import copy
from dataclasses import dataclass, field
from functools import reduce
from typing import List, Optional

from tin_ast import (
    Span, Expression, Const, Variable, StringLiteral, UnaryOperation, BinaryOperation, FunctionCall,
    UnresolvedFunction, BinaryOperator, UnaryOperator, Statement, Skip, Assign, If, While, Chain, Return,
    FunctionCallStatement, FunctionDeclaration, Program, ENTRY_FUNCTION_NAME)
from tin_diagnostics import InternalCompilerError
from tin_lexer import TokenKind, Token, Lexer


# ==========================
# Parser
# ==========================

@dataclass
class ParseError(Exception):
    message: str
    token: Optional[Token] = None
    filename: Optional[str] = None
    expected: List[str] = field(default_factory=list)


# Operator token kinds per precedence level, lowest first.
OR_OPERATORS = (TokenKind.OROR,)
AND_OPERATORS = (TokenKind.ANDAND,)
COMPARISON_OPERATORS = (TokenKind.EQEQ, TokenKind.NE, TokenKind.LT, TokenKind.GT, TokenKind.LE, TokenKind.GE)
ADDITIVE_OPERATORS = (TokenKind.PLUS, TokenKind.MINUS)
MULTIPLICATIVE_OPERATORS = (TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT)

STATEMENT_STARTS = frozenset({
    TokenKind.SKIP,
    TokenKind.IDENT,
    TokenKind.IF,
    TokenKind.WHILE,
    TokenKind.FOR,
    TokenKind.REPEAT,
    TokenKind.RETURN,
})

ATOM_ALTERNATIVES = [
    "integer literal",
    "char literal",
    "'true'",
    "'false'",
    "function call",
    "'!'",
    "'('",
    "variable",
    "string literal",
]


def binary_operator_for(kind: TokenKind) -> BinaryOperator:
    if kind is TokenKind.OROR:
        return BinaryOperator.OR
    if kind is TokenKind.ANDAND:
        return BinaryOperator.AND
    if kind is TokenKind.LT:
        return BinaryOperator.LT
    if kind is TokenKind.GT:
        return BinaryOperator.GT
    if kind is TokenKind.EQEQ:
        return BinaryOperator.EQ
    if kind is TokenKind.NE:
        return BinaryOperator.NEQ
    if kind is TokenKind.LE:
        return BinaryOperator.LEQ
    if kind is TokenKind.GE:
        return BinaryOperator.GEQ
    if kind is TokenKind.PLUS:
        return BinaryOperator.PLUS
    if kind is TokenKind.MINUS:
        return BinaryOperator.MINUS
    if kind is TokenKind.STAR:
        return BinaryOperator.TIMES
    if kind is TokenKind.SLASH:
        return BinaryOperator.DIV
    if kind is TokenKind.PERCENT:
        return BinaryOperator.REM
    raise InternalCompilerError("ICE-0010", f"token kind {kind.name} is not a binary operator")


def unary_operator_for(kind: TokenKind) -> UnaryOperator:
    if kind is TokenKind.BANG:
        return UnaryOperator.NOT
    raise InternalCompilerError("ICE-0011", f"token kind {kind.name} is not a unary operator")


def _cover(first: Optional[Span], last: Optional[Span]) -> Optional[Span]:
    if first is None or last is None:
        return first or last
    return Span(first.start_line, first.start_column, last.end_line, last.end_column)


def chain_of(statements: List[Statement]) -> Statement:
    """
    Sequence statements into right-nested Chain nodes, in source order:
    [a, b, c] -> Chain(a, Chain(b, c)). A single statement is returned as is,
    an empty list becomes Skip.
    """
    if not statements:
        return Skip()
    return reduce(
        lambda rest, stmt: Chain(stmt, rest, span=_cover(stmt.span, rest.span)),
        reversed(statements[:-1]),
        statements[-1],
    )


class Parser:
    def __init__(self, tokens: List[Token], filename: Optional[str] = None) -> None:
        self.tokens = tokens
        self.index = 0
        self.filename = filename

    @classmethod
    def from_source(cls, source: str) -> "Parser":
        lexer = Lexer.from_source(source)
        tokens = lexer.tokenize()
        return cls(tokens)

    # --- token utilities ---

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _peek_next(self) -> Token:
        if self.index + 1 < len(self.tokens):
            return self.tokens[self.index + 1]
        return self.tokens[-1]

    def _last(self) -> Token:
        return self.tokens[self.index - 1 if self.index > 0 else 0]

    def _at_end(self) -> bool:
        return self._peek().kind is TokenKind.EOF

    def _advance(self) -> Token:
        tok = self._peek()
        if not self._at_end():
            self.index += 1
        return tok

    def _check(self, kind: TokenKind) -> bool:
        return self._peek().kind is kind

    def _match(self, *kinds: TokenKind) -> bool:
        if self._peek().kind in kinds:
            self._advance()
            return True
        return False

    def _error(self, message: str, expected: List[str]) -> ParseError:
        return ParseError(message, self._peek(), self.filename, expected)

    def _expect(self, kind: TokenKind, what: str, msg: str) -> Token:
        if not self._check(kind):
            raise self._error(f"{msg}, got {self._peek()} instead", [what])
        return self._advance()

    def _span_start(self) -> Span:
        here = self._peek()
        return Span(here.line, here.column, here.line, here.column)

    def _extend_span(self, start: Span) -> Span:
        here = self._last()
        return Span(
            start.start_line,
            start.start_column,
            here.line,
            here.column + len(here.text),
        )

    # --- entry point ---

    def parse_program(self, filename: Optional[str] = None) -> Program:
        """
        Parse the whole token stream.

        Top-level items are function declarations and loose statements, each
        optionally followed by ';'. Declarations keep their source order; the
        loose statements, also in source order, become the body of the
        synthesized zero-parameter entry function, which is appended last.
        """
        if filename is not None:
            self.filename = filename

        start = self._span_start()
        functions: List[FunctionDeclaration] = []
        statements: List[Statement] = []
        while not self._at_end():
            if self._check(TokenKind.FUN):
                functions.append(self._parse_function_decl())
            elif self._peek().kind in STATEMENT_STARTS:
                statements.append(self._parse_stmt())
            else:
                raise self._error(
                    f"[PAR-0020] expected function declaration or statement at top level, got {self._peek()} instead",
                    ["'fun'", "statement"],
                )
            self._match(TokenKind.SEMI)

        body = chain_of(statements)
        entry = FunctionDeclaration(ENTRY_FUNCTION_NAME, [], body, span=body.span)
        return Program(functions + [entry], entry, span=self._extend_span(start))

    # --- declarations ---

    def _parse_function_decl(self) -> FunctionDeclaration:
        # fun <name> ( <param>, ... ) begin <statements> end
        start = self._span_start()
        self._advance()  # 'fun'
        name_tok = self._expect(TokenKind.IDENT, "function name", "[PAR-0041] expected function name")
        self._expect(TokenKind.LPAREN, "'('", "[PAR-0042] expected '(' after function name")
        params: List[Variable] = []
        if not self._check(TokenKind.RPAREN):
            while True:
                param_start = self._span_start()
                param_tok = self._expect(TokenKind.IDENT, "parameter name", "[PAR-0043] expected parameter name")
                params.append(Variable(param_tok.text, span=self._extend_span(param_start)))
                if not self._match(TokenKind.COMMA):
                    break
        self._expect(TokenKind.RPAREN, "')'", "[PAR-0045] expected ')' after parameters")
        self._expect(TokenKind.BEGIN, "'begin'", "[PAR-0046] expected 'begin' before function body")
        body = self._parse_statements()
        self._expect(TokenKind.END, "'end'", "[PAR-0047] expected 'end' after function body")
        return FunctionDeclaration(name_tok.text, params, body, span=self._extend_span(start))

    # --- statements ---

    def _parse_statements(self) -> Statement:
        # <stmt> ( ; <stmt> )* ;?
        stmts: List[Statement] = [self._parse_stmt()]
        while self._match(TokenKind.SEMI):
            if self._peek().kind not in STATEMENT_STARTS:
                break  # single trailing ';'
            stmts.append(self._parse_stmt())
        return chain_of(stmts)

    def _parse_stmt(self) -> Statement:
        if self._check(TokenKind.SKIP):
            start = self._span_start()
            self._advance()
            return Skip(span=self._extend_span(start))
        elif self._check(TokenKind.IDENT):
            if self._peek_next().kind is TokenKind.LPAREN:
                return self._parse_call_stmt()
            if self._peek_next().kind is TokenKind.ASSIGN:
                return self._parse_assign_stmt()
            self._advance()
            raise self._error(
                f"[PAR-0101] expected ':=' or '(' after identifier, got {self._peek()} instead",
                ["':='", "'('"],
            )
        elif self._check(TokenKind.IF):
            return self._parse_if_stmt()
        elif self._check(TokenKind.WHILE):
            return self._parse_while_stmt()
        elif self._check(TokenKind.FOR):
            return self._parse_for_stmt()
        elif self._check(TokenKind.REPEAT):
            return self._parse_repeat_stmt()
        elif self._check(TokenKind.RETURN):
            return self._parse_return_stmt()

        raise self._error(
            f"[PAR-0100] expected statement, got {self._peek()} instead",
            ["'skip'", "assignment", "function call", "'if'", "'while'", "'for'", "'repeat'", "'return'"],
        )

    def _parse_call_stmt(self) -> FunctionCallStatement:
        start = self._span_start()
        call = self._parse_call()
        return FunctionCallStatement(call, span=self._extend_span(start))

    def _parse_assign_stmt(self) -> Assign:
        start = self._span_start()
        name_tok = self._advance()
        target = Variable(name_tok.text, span=self._extend_span(start))
        self._advance()  # ':='
        value = self._parse_expr()
        return Assign(target, value, span=self._extend_span(start))

    def _parse_if_stmt(self) -> If:
        # if C then B (elif C then B)* (else B)? fi
        start = self._span_start()
        self._advance()  # 'if'
        cond = self._parse_expr()
        self._expect(TokenKind.THEN, "'then'", "[PAR-0121] expected 'then' after condition")
        then_branch = self._parse_statements()

        elifs: List[tuple[Expression, Statement, Span]] = []
        while self._check(TokenKind.ELIF):
            elif_start = self._span_start()
            self._advance()
            elif_cond = self._parse_expr()
            self._expect(TokenKind.THEN, "'then'", "[PAR-0122] expected 'then' after 'elif' condition")
            elifs.append((elif_cond, self._parse_statements(), elif_start))

        else_branch: Statement = Skip()
        if self._match(TokenKind.ELSE):
            else_branch = self._parse_statements()
        self._expect(TokenKind.FI, "'fi'", "[PAR-0123] expected 'fi' to close 'if'")

        # each elif becomes the else branch of the one before it
        for elif_cond, elif_body, elif_start in reversed(elifs):
            else_branch = If(elif_cond, elif_body, else_branch, span=self._extend_span(elif_start))
        return If(cond, then_branch, else_branch, span=self._extend_span(start))

    def _parse_while_stmt(self) -> While:
        # while C do B od
        start = self._span_start()
        self._advance()  # 'while'
        cond = self._parse_expr()
        self._expect(TokenKind.DO, "'do'", "[PAR-0131] expected 'do' after loop condition")
        body = self._parse_statements()
        self._expect(TokenKind.OD, "'od'", "[PAR-0132] expected 'od' to close 'while'")
        return While(cond, body, span=self._extend_span(start))

    def _parse_for_stmt(self) -> Chain:
        # for Init, C, Step do B od  =>  Init; while C do B; Step od
        start = self._span_start()
        self._advance()  # 'for'
        init = self._parse_stmt()
        self._expect(TokenKind.COMMA, "','", "[PAR-0141] expected ',' after 'for' initializer")
        cond = self._parse_expr()
        self._expect(TokenKind.COMMA, "','", "[PAR-0142] expected ',' after 'for' condition")
        step = self._parse_stmt()
        self._expect(TokenKind.DO, "'do'", "[PAR-0143] expected 'do' after 'for' step")
        body = self._parse_statements()
        self._expect(TokenKind.OD, "'od'", "[PAR-0144] expected 'od' to close 'for'")
        span = self._extend_span(start)
        loop = While(cond, Chain(body, step, span=_cover(body.span, step.span)), span=span)
        return Chain(init, loop, span=span)

    def _parse_repeat_stmt(self) -> Chain:
        # repeat B until C  =>  B; while !C do B od
        start = self._span_start()
        self._advance()  # 'repeat'
        body = self._parse_statements()
        self._expect(TokenKind.UNTIL, "'until'", "[PAR-0151] expected 'until' after 'repeat' body")
        cond = self._parse_expr()
        span = self._extend_span(start)
        negated = UnaryOperation(cond, UnaryOperator.NOT, span=cond.span)
        return Chain(body, While(negated, copy.deepcopy(body), span=span), span=span)

    def _parse_return_stmt(self) -> Return:
        start = self._span_start()
        self._advance()  # 'return'
        value = self._parse_expr()
        return Return(value, span=self._extend_span(start))

    # --- expressions with precedence ---

    def parse_expression(self) -> Expression:
        """Parse a single expression that must span the whole input."""
        expr = self._parse_expr()
        if not self._at_end():
            raise self._error(f"[PAR-0021] unexpected {self._peek()} after expression", ["end of input"])
        return expr

    def _parse_expr(self) -> Expression:
        return self._parse_or_expr()

    def _parse_left_assoc(self, operand, operators: tuple) -> Expression:
        start = self._span_start()
        expr = operand()
        while self._peek().kind in operators:
            op = binary_operator_for(self._advance().kind)
            right = operand()
            expr = BinaryOperation(expr, right, op, span=self._extend_span(start))
        return expr

    def _parse_or_expr(self) -> Expression:
        return self._parse_left_assoc(self._parse_and_expr, OR_OPERATORS)

    def _parse_and_expr(self) -> Expression:
        return self._parse_left_assoc(self._parse_comparison_expr, AND_OPERATORS)

    def _parse_comparison_expr(self) -> Expression:
        # at most one comparison: 'a < b < c' leaves '< c' for the caller to reject
        start = self._span_start()
        expr = self._parse_add_expr()
        if self._peek().kind in COMPARISON_OPERATORS:
            op = binary_operator_for(self._advance().kind)
            right = self._parse_add_expr()
            expr = BinaryOperation(expr, right, op, span=self._extend_span(start))
        return expr

    def _parse_add_expr(self) -> Expression:
        return self._parse_left_assoc(self._parse_mul_expr, ADDITIVE_OPERATORS)

    def _parse_mul_expr(self) -> Expression:
        return self._parse_left_assoc(self._parse_atom, MULTIPLICATIVE_OPERATORS)

    def _parse_call(self) -> FunctionCall:
        start = self._span_start()
        name_tok = self._advance()
        self._advance()  # '('
        args: List[Expression] = []
        if not self._check(TokenKind.RPAREN):
            while True:
                args.append(self._parse_expr())
                if not self._match(TokenKind.COMMA):
                    break
        self._expect(TokenKind.RPAREN, "')'", "[PAR-0210] expected ')' after arguments")
        return FunctionCall(UnresolvedFunction(name_tok.text, len(args)), args, span=self._extend_span(start))

    def _parse_atom(self) -> Expression:
        start = self._span_start()
        tok = self._peek()

        # Literals
        if self._match(TokenKind.NUMBER):
            return Const(int(tok.text), span=self._extend_span(start))
        if self._match(TokenKind.CHAR):
            return Const(ord(tok.text[1]), span=self._extend_span(start))
        if self._match(TokenKind.TRUE):
            return Const(1, span=self._extend_span(start))
        if self._match(TokenKind.FALSE):
            return Const(0, span=self._extend_span(start))

        if self._check(TokenKind.IDENT) and self._peek_next().kind is TokenKind.LPAREN:
            return self._parse_call()

        # '!' binds tighter than any binary operator: '!a + b' is '(!a) + b'
        if self._check(TokenKind.BANG):
            op = unary_operator_for(self._advance().kind)
            operand = self._parse_atom()
            return UnaryOperation(operand, op, span=self._extend_span(start))

        if self._match(TokenKind.LPAREN):
            inner = self._parse_expr()
            self._expect(TokenKind.RPAREN, "')'", "[PAR-0224] expected ')' after expression")
            return inner

        if self._match(TokenKind.IDENT):
            return Variable(tok.text, span=self._extend_span(start))

        if self._match(TokenKind.STRING):
            return StringLiteral(tok.text[1:-1], span=self._extend_span(start))

        raise self._error(
            f"[PAR-0225] unexpected token in expression: {tok}, expected one of {', '.join(ATOM_ALTERNATIVES)}",
            list(ATOM_ALTERNATIVES),
        )

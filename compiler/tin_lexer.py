#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


# ==========================
# Tokens and lexer
# ==========================

class TokenKind(Enum):
    # Special
    EOF = auto()

    IDENT = auto()  # identifier, e.g. i, name, etc.
    NUMBER = auto()  # integer literal, e.g. 42
    CHAR = auto()  # char literal, e.g. 'a'
    STRING = auto()  # string literal, e.g. "hello world"

    # Keywords
    IF = auto()
    THEN = auto()
    ELIF = auto()
    ELSE = auto()
    FI = auto()
    WHILE = auto()
    FOR = auto()
    DO = auto()
    OD = auto()
    SKIP = auto()
    REPEAT = auto()
    UNTIL = auto()
    BEGIN = auto()
    END = auto()
    FUN = auto()
    RETURN = auto()
    TRUE = auto()
    FALSE = auto()

    # Punctuation / operators
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    COMMA = auto()  # ,
    SEMI = auto()  # ;
    ASSIGN = auto()  # :=
    PLUS = auto()  # +
    MINUS = auto()  # -
    STAR = auto()  # *
    SLASH = auto()  # /
    PERCENT = auto()  # %
    LT = auto()  # <
    GT = auto()  # >
    LE = auto()  # <=
    GE = auto()  # >=
    EQEQ = auto()  # ==
    NE = auto()  # !=
    ANDAND = auto()  # &&
    OROR = auto()  # !!
    BANG = auto()  # !


KEYWORDS = {
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "elif": TokenKind.ELIF,
    "else": TokenKind.ELSE,
    "fi": TokenKind.FI,
    "while": TokenKind.WHILE,
    "for": TokenKind.FOR,
    "do": TokenKind.DO,
    "od": TokenKind.OD,
    "skip": TokenKind.SKIP,
    "repeat": TokenKind.REPEAT,
    "until": TokenKind.UNTIL,
    "begin": TokenKind.BEGIN,
    "end": TokenKind.END,
    "fun": TokenKind.FUN,
    "return": TokenKind.RETURN,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
}

# Two-character operators, checked before their one-character prefixes.
DOUBLE_CHAR_OPERATORS = {
    ":=": TokenKind.ASSIGN,
    "==": TokenKind.EQEQ,
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
    "!=": TokenKind.NE,
    "!!": TokenKind.OROR,
    "&&": TokenKind.ANDAND,
}

SINGLE_CHAR_OPERATORS = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMI,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "!": TokenKind.BANG,
}


@dataclass
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int
    offset: int = 0

    def __repr__(self) -> str:
        return f"{self.text!r}" if self.kind != TokenKind.EOF else "end-of-file"


@dataclass
class LexerError(Exception):
    message: str
    filename: str
    line: int
    column: int
    offset: int = 0


# ASCII only: str.isdigit/isalpha also accept digits and letters of other scripts.
def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_ident_start(c: str) -> bool:
    return "a" <= c <= "z" or "A" <= c <= "Z" or c == "_"


def _is_ident_char(c: str) -> bool:
    return _is_ident_start(c) or _is_digit(c)


class Lexer:
    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.length = len(source)
        self.index = 0
        self.line = 1
        self.column = 1

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(source)

    # --- low-level char utilities ---

    def _at_end(self) -> bool:
        return self.index >= self.length

    def _peek(self) -> str:
        if self._at_end():
            return "\0"
        return self.source[self.index]

    def _peek_next(self) -> str:
        if self.index + 1 >= self.length:
            return "\0"
        return self.source[self.index + 1]

    def _advance(self) -> str:
        c = self._peek()
        if not self._at_end():
            self.index += 1
            if c == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return c

    def _error(self, message: str, line: int, column: int, offset: int) -> LexerError:
        return LexerError(message, self.filename, line, column, offset)

    # --- main API ---

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            tok = self._next_token()
            tokens.append(tok)
            if tok.kind is TokenKind.EOF:
                break
        return tokens

    def _next_token(self) -> Token:
        self._skip_whitespace()
        start_line, start_col, start = self.line, self.column, self.index

        if self._at_end():
            return Token(TokenKind.EOF, "", start_line, start_col, start)

        c = self._peek()

        # identifiers / keywords: the whole word is read before classifying it,
        # so keyword prefixes (ifValue, done, endx) stay identifiers
        if _is_ident_start(c):
            ident = [self._advance()]
            while _is_ident_char(self._peek()):
                ident.append(self._advance())
            text = "".join(ident)
            return Token(KEYWORDS.get(text, TokenKind.IDENT), text, start_line, start_col, start)

        # numbers (non-negative integers; '-' is always an operator)
        if _is_digit(c):
            digits = [self._advance()]
            while _is_digit(self._peek()):
                digits.append(self._advance())
            return Token(TokenKind.NUMBER, "".join(digits), start_line, start_col, start)

        if c == '"':
            text = self._read_string_literal(start_line, start_col, start)
            return Token(TokenKind.STRING, text, start_line, start_col, start)

        if c == "'":
            text = self._read_char_literal(start_line, start_col, start)
            return Token(TokenKind.CHAR, text, start_line, start_col, start)

        pair = c + self._peek_next()
        if pair in DOUBLE_CHAR_OPERATORS:
            self._advance()
            self._advance()
            return Token(DOUBLE_CHAR_OPERATORS[pair], pair, start_line, start_col, start)

        if c in SINGLE_CHAR_OPERATORS:
            self._advance()
            return Token(SINGLE_CHAR_OPERATORS[c], c, start_line, start_col, start)

        raise self._error(f"[LEX-0040] unexpected character {c!r} at {start_line}:{start_col}",
                          start_line, start_col, start)

    def _read_char_literal(self, start_line: int, start_col: int, start: int) -> str:
        # exactly one character between single quotes, no escapes
        self._advance()  # opening '
        ch = self._peek()
        if self._at_end() or ch == "\n" or self._peek_next() != "'":
            raise self._error("[LEX-0020] invalid char literal, expected a single character between quotes",
                              start_line, start_col, start)
        self._advance()
        self._advance()  # closing '
        return self.source[start:self.index]

    def _read_string_literal(self, start_line: int, start_col: int, start: int) -> str:
        self._advance()  # opening "
        while True:
            ch = self._peek()
            if self._at_end() or ch == "\n":
                raise self._error("[LEX-0010] unterminated string literal", start_line, start_col, start)
            self._advance()
            if ch == '"':
                break
        return self.source[start:self.index]

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek().isspace():
            self._advance()

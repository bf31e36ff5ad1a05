#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Optional

from tin_ast import Span
from tin_lexer import LexerError, Token


DIAGNOSTIC_CODE_FAMILIES = {
    "LEX": [
        "LEX-0010",
        "LEX-0020",
        "LEX-0040",
    ],
    "PAR": [
        "PAR-0020",
        "PAR-0021",
        "PAR-0041",
        "PAR-0042",
        "PAR-0043",
        "PAR-0045",
        "PAR-0046",
        "PAR-0047",
        "PAR-0100",
        "PAR-0101",
        "PAR-0121",
        "PAR-0122",
        "PAR-0123",
        "PAR-0131",
        "PAR-0132",
        "PAR-0141",
        "PAR-0142",
        "PAR-0143",
        "PAR-0144",
        "PAR-0151",
        "PAR-0210",
        "PAR-0224",
        "PAR-0225",
    ],
    "RES": [
        "RES-0010",
        "RES-0020",
    ],
    "DRV": [
        "DRV-0010",
        "DRV-0020",
    ],
    # ICE codes belong to InternalCompilerError (front-end bugs, not
    # user-facing diagnostics) and are not registered here.
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    filename: Optional[str] = None  # file path

    # Primary location (start of the span)
    line: Optional[int] = None
    column: Optional[int] = None

    # Optional end of span (exclusive)
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    def format(self) -> str:
        loc = ""
        if self.filename is not None and not self.filename.startswith("<"):
            loc += os.path.abspath(str(self.filename))
        elif self.filename is not None:
            loc += self.filename
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        if loc:
            loc += ": "
        return f"{loc}{self.kind}: {self.message}"


def diag_from_span(
        kind: str,
        message: str,
        *,
        filename: Optional[str],
        span: Optional[Span],
) -> Diagnostic:
    line = column = end_line = end_column = None
    if span is not None:
        line = span.start_line
        column = span.start_column
        end_line = span.end_line
        end_column = span.end_column
    return Diagnostic(
        kind=kind,
        message=message,
        filename=filename,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
    )


def diag_from_token(
        kind: str,
        message: str,
        *,
        filename: Optional[str],
        token: Optional[Token],
) -> Diagnostic:
    line = column = end_line = end_column = None
    if token is not None:
        line = token.line
        column = token.column
        end_line = token.line
        end_column = token.column + len(token.text)
    return Diagnostic(
        kind=kind,
        message=message,
        filename=filename,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
    )


def diag_from_lexer_error(error: LexerError) -> Diagnostic:
    return Diagnostic(
        kind="error",
        message=error.message,
        filename=error.filename,
        line=error.line,
        column=error.column,
    )


@dataclass
class InternalCompilerError(Exception):
    """
    A front-end bug: a parser or resolver invariant does not hold.

    Never raised for mistakes in the Tin program, those are LexerError,
    ParseError and UnresolvedCallError.
    """
    code: str  # "ICE-xxxx"
    message: str
    filename: Optional[str] = None
    span: Optional[Span] = None

    def to_diagnostic(self) -> Diagnostic:
        return diag_from_span(
            "internal compiler error",
            f"[{self.code}] {self.message}",
            filename=self.filename,
            span=self.span,
        )

    def __str__(self) -> str:
        return self.to_diagnostic().format()

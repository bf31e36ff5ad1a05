#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from pathlib import Path
from typing import Optional

from tin_analysis import AnalysisResult
from tin_ast import Program
from tin_context import CompilationContext
from tin_diagnostics import Diagnostic, diag_from_lexer_error, diag_from_span, diag_from_token
from tin_lexer import LexerError, Lexer
from tin_logger import log_info, log_debug, log_stage
from tin_parser import Parser, ParseError
from tin_resolve import CallResolver, UnresolvedCallError


class TinDriver:
    """
    Front-end driver:
      - read file
      - tokenize
      - parse (assembling the synthesized entry function)
      - resolve calls

    Entry points:
      - parse_source(text): lex and parse only; call targets stay unresolved.
      - load_program(text): the full pipeline on in-memory source.
      - load_file(path): the full pipeline on a file.
      - analyze(path): like load_file, but user errors become diagnostics.
    """

    def __init__(self, context: CompilationContext | None = None):
        self.context = context or CompilationContext.default()

    # --- Public API ---

    def analyze(self, path: str | Path) -> AnalysisResult:
        """
        Run the whole pipeline on `path` and collect the outcome.

        Never raises for user errors: a missing or unreadable file, a lexical
        error, a parse error or an unresolved call is reported as a single
        error diagnostic and the result carries no program.
        """
        filename = str(path)
        log_info(self.context, f"Starting analysis for '{filename}'")
        result = AnalysisResult(filename=filename, context=self.context)

        try:
            result.program = self.load_file(path)
        except FileNotFoundError as e:
            result.diagnostics.append(
                Diagnostic(kind="error", message=f"file: [DRV-0010] {str(e)}")
            )
        except (OSError, UnicodeDecodeError) as e:
            result.diagnostics.append(
                Diagnostic(kind="error", message=f"file: [DRV-0020] cannot read Tin source file {filename}: {e}")
            )
        except LexerError as e:
            result.diagnostics.append(diag_from_lexer_error(e))
        except ParseError as e:
            result.diagnostics.append(
                diag_from_token(
                    kind="error",
                    message=e.message,
                    token=e.token,
                    filename=e.filename,
                )
            )
        except UnresolvedCallError as e:
            result.diagnostics.append(
                diag_from_span(
                    kind="error",
                    message=e.message,
                    span=e.span,
                    filename=e.filename,
                )
            )

        log_info(self.context, f"Analysis complete: {len(result.diagnostics)} diagnostic(s)")
        return result

    def load_file(self, path: str | Path) -> Program:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Tin source file not found: {path}")

        text = path.read_text(encoding="utf-8")
        return self.load_program(text, filename=str(path))

    def load_program(self, text: str, filename: str = "<input>") -> Program:
        program = self.parse_source(text, filename)

        log_stage(self.context, "Resolving calls in", filename)
        CallResolver(program, self.context, filename).resolve()
        return program

    def parse_source(self, text: str, filename: str = "<input>") -> Program:
        log_stage(self.context, "Lexing", filename)
        lexer = Lexer(text, filename=filename)
        tokens = lexer.tokenize()
        log_debug(self.context, f"Lexed {len(tokens)} token(s) from {filename}")

        log_stage(self.context, "Parsing", filename)
        parser = Parser(tokens)
        program = parser.parse_program(filename=filename)
        log_debug(self.context, f"Parsed {len(program.functions) - 1} function declaration(s) from {filename}")
        return program


def read_program(text: str, filename: Optional[str] = None,
                 context: CompilationContext | None = None) -> Program:
    """
    Turn Tin source text into a resolved Program.

    Raises LexerError, ParseError or UnresolvedCallError on the first failure.
    """
    return TinDriver(context).load_program(text, filename or "<input>")

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
from pathlib import Path
from typing import Optional

from tin_analysis import AnalysisResult
from tin_ast_printer import format_program
from tin_context import CompilationContext, LogLevel
from tin_diagnostics import InternalCompilerError
from tin_driver import TinDriver
from tin_lexer import TokenKind, Lexer, LexerError
from tin_logger import log_info, log_error


def print_diagnostics(result: AnalysisResult, context: CompilationContext) -> None:
    for diag in result.diagnostics:
        log_error(context, diag.format())


def build_compilation_context(args: argparse.Namespace) -> CompilationContext:
    if args.verbosity >= 3:
        level = LogLevel.DEBUG
    elif args.verbosity >= 1:
        level = LogLevel.INFO
    else:
        level = LogLevel.WARNING
    return CompilationContext(log_rich_format=args.log, log_level=level)


def _run_analysis(args: argparse.Namespace) -> tuple[Optional[AnalysisResult], int]:
    context = build_compilation_context(args)
    driver = TinDriver(context=context)
    try:
        result = driver.analyze(args.file)
    except InternalCompilerError as e:
        log_error(context, str(e))
        return None, 1
    if result.has_errors():
        print_diagnostics(result, context)
        return result, 1
    return result, 0


def cmd_check(args: argparse.Namespace) -> int:
    result, exit_code = _run_analysis(args)
    if exit_code == 0:
        log_info(result.context, f"{args.file}: OK ({len(result.program.functions)} function(s))")
    return exit_code


def cmd_ast(args: argparse.Namespace) -> int:
    """
    Dump the resolved AST of a source file, one node per line.
    """
    result, exit_code = _run_analysis(args)
    if exit_code != 0:
        return exit_code
    print(format_program(result.program))
    return 0


def cmd_tok(args: argparse.Namespace) -> int:
    """
    Dump lexer tokens of a source file.
    """
    context = build_compilation_context(args)
    path = Path(args.file)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log_error(context, f"error: [DRV-0020] cannot read Tin source file {path}: {e}")
        return 1

    try:
        tokens = Lexer(text, filename=str(path)).tokenize()
    except LexerError as e:
        log_error(context, f"{e.filename}:{e.line}:{e.column}: error: {e.message}")
        return 1

    for tok in tokens:
        if not args.include_eof and tok.kind is TokenKind.EOF:
            continue
        # Format: file:line:col: KIND  'text'
        print(
            f"{path}:{tok.line}:{tok.column}:\t"
            f"{tok.kind.name:<12} {tok.text!r}"
        )
    return 0


def _add_file_arg(parser: argparse.ArgumentParser) -> None:
    """Add the source file argument."""
    parser.add_argument("file", help="Tin source file")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="tinc", description="Tin front end")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")

    p_check = subparsers.add_parser("check", help="Parse and resolve a source file", aliases=["analyze"])
    _add_file_arg(p_check)
    p_check.set_defaults(func=cmd_check)

    p_tok = subparsers.add_parser("tok", help="Dump lexer tokens", aliases=["tokens"])
    p_tok.add_argument("--include-eof", "-I", action="store_true",
                       help="Include the EOF token in the output")
    _add_file_arg(p_tok)
    p_tok.set_defaults(func=cmd_tok)

    p_ast = subparsers.add_parser("ast", help="Dump the resolved AST")
    _add_file_arg(p_ast)
    p_ast.set_defaults(func=cmd_ast)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()

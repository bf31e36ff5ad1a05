#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import List, Optional

from tin_ast import Program
from tin_context import CompilationContext
from tin_diagnostics import Diagnostic


@dataclass
class AnalysisResult:
    """
    Front-end result for one source file.

    Parsing is all-or-nothing: `program` is the resolved Program when the
    file was read, lexed, parsed and resolved without error, and None
    otherwise, in which case `diagnostics` holds the single error.
    """
    program: Optional[Program] = None
    filename: Optional[str] = None
    context: CompilationContext = field(default_factory=CompilationContext.default)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)

    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.diagnostics)

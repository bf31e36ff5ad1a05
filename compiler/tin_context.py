"""
Compilation context for cross-cutting front-end options.

This module defines the CompilationContext dataclass which holds the options
shared by the driver, the call resolver and the CLI (currently logging only).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Hierarchical logging levels for the Tin front end."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class CompilationContext:
    """
    Holds cross-cutting options that affect multiple front-end stages.

    Attributes:
        log_rich_format:        If True, emit logs in rich format: timestamp and log level prefix.
        log_level:              Current logging level.
    """
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'CompilationContext':
        """Create a CompilationContext with default settings."""
        return CompilationContext(log_level=LogLevel.WARNING)

"""
Logging utilities for the Tin front end.

Messages go to stderr and are filtered by the CompilationContext log level.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from tin_context import CompilationContext, LogLevel

_LEVEL_TAGS = {
    LogLevel.ERROR: "ERROR",
    LogLevel.WARNING: "WARNING",
    LogLevel.INFO: "INFO",
    LogLevel.DEBUG: "DEBUG",
}


def log(context: Optional[CompilationContext], log_level: LogLevel, message: str) -> None:
    """
    Write `message` to stderr if the context's level admits `log_level`.

    Without a context the message is always written, unprefixed.

    Args:
        context:    The compilation context holding the logging level and format.
        log_level:  The level of the message.
        message:    The message to log.
    """
    if context is None:
        print(message, file=sys.stderr)
        return
    if context.log_level < log_level:
        return
    prefix = ""
    if context.log_rich_format and log_level in _LEVEL_TAGS:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = f"{timestamp} [{_LEVEL_TAGS[log_level]}] "
    print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.ERROR, message)


def log_warning(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.WARNING, message)


def log_info(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_stage(context: Optional[CompilationContext], stage: str, filename: Optional[str] = None) -> None:
    """
    Log the start of a front-end stage.

    Args:
        context: The compilation context.
        stage: The name of the stage (e.g., "Lexing", "Parsing").
        filename: Optional source file being processed.
    """
    if filename:
        log(context, LogLevel.INFO, f"{stage} '{filename}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")

"""
Standardized logging setup for the DataSF MCP server.
Uses Python's built-in logging with structured session correlation.
"""

import logging
import sys
import os
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Colored logging formatter with timestamps."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_colors=True):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        # stderr is the MCP stdio side channel; only color a real terminal
        self.use_colors = use_colors and sys.stderr.isatty()

    def _colorize(self, record, format_func):
        if not self.use_colors:
            return format_func(record)

        level_color = self.COLORS.get(record.levelname, '')
        reset_color = self.COLORS['RESET']

        original_levelname = record.levelname
        record.levelname = f"{level_color}{record.levelname}{reset_color}"
        try:
            return format_func(record)
        finally:
            record.levelname = original_levelname

    def format(self, record):
        return self._colorize(record, super().format)


class SessionColoredFormatter(ColoredFormatter):
    """Colored formatter with session context for our component loggers."""

    def __init__(self, use_colors=True):
        super().__init__(use_colors)
        self.fmt = '%(asctime)s - %(name)s%(session_part)s - %(levelname)s - %(message)s'
        self._fmt = logging.Formatter(self.fmt, datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record):
        session = getattr(record, 'session', '')
        record.session_part = f" {session}" if session else ""
        return self._colorize(record, self._fmt.format)


# Get log level from environment variable, default to INFO
log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
log_level_value = getattr(logging, log_level, logging.INFO)

use_colors = os.getenv('LOG_COLORS', 'true').lower() in ('true', '1', 'yes', 'on')

# Leave third-party loggers alone, but make sure their warnings reach stderr
if not logging.getLogger().handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s:%(name)s:%(message)s'))
    logging.getLogger().addHandler(handler)
    logging.getLogger().setLevel(logging.WARNING)


class SessionContextFilter(logging.Filter):
    """Add MCP session context to log records."""

    def __init__(self):
        super().__init__()
        self.session_id = None

    def set_context(self, session_id: Optional[str] = None):
        """Set session context for the current request."""
        self.session_id = session_id

    def filter(self, record):
        if self.session_id:
            record.session = f"session:{self.session_id[:8]}..."
        else:
            record.session = ""
        return True


class SessionHandler(logging.StreamHandler):
    """Handler that applies session formatting and colors to our loggers."""

    def __init__(self, use_colors=True):
        super().__init__(sys.stderr)
        self.setFormatter(SessionColoredFormatter(use_colors=use_colors))


# Global session context filter
session_filter = SessionContextFilter()


def get_logger(name: str) -> logging.Logger:
    """Get a logger with session context and colored formatting."""
    logger = logging.getLogger(name)
    if session_filter not in logger.filters:
        logger.addFilter(session_filter)
        if not any(isinstance(h, SessionHandler) for h in logger.handlers):
            logger.addHandler(SessionHandler(use_colors=use_colors))
            logger.propagate = False
            logger.setLevel(log_level_value)
    return logger


def set_session_context(session_id: Optional[str] = None):
    """Set session context for all loggers."""
    session_filter.set_context(session_id)


def preview(text: Optional[str], limit: int = 100) -> str:
    """Shorten free text (queries, search terms) before it goes into a log line."""
    if text is None:
        return ""
    return text[:limit] + "..." if len(text) > limit else text


# Component-specific loggers
session_logger = get_logger('SESSION')
query_logger = get_logger('QUERY')
schema_logger = get_logger('SCHEMA')
cache_logger = get_logger('CACHE')
correction_logger = get_logger('CORRECTION')
catalog_logger = get_logger('CATALOG')


def log_tool_call(tool_name: str, session_id: Optional[str] = None, **params):
    """Helper to log tool execution."""
    set_session_context(session_id)
    extra_str = " | ".join(f"{k}:{str(v)[:50]}" for k, v in params.items() if v is not None)
    query_logger.info(f"executing {tool_name} | {extra_str}" if extra_str else f"executing {tool_name}")

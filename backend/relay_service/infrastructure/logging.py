"""
Unified logging system for the document relay.

Verbosity is carried by an explicit LogConfig object handed to each
component at construction. Debug and info output is only written when
verbose output is enabled; warnings and errors are always written.
"""

import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration shared by all relay components."""
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "LogConfig":
        """
        Build a LogConfig from the VERBOSE_OUTPUT environment variable.

        Returns:
            LogConfig with verbose=True if VERBOSE_OUTPUT is 'true' (case-insensitive)
        """
        return cls(verbose=os.getenv('VERBOSE_OUTPUT', 'false').lower() == 'true')


def _format_message(level: str, message: str, component: Optional[str] = None) -> str:
    """
    Format a log message with timestamp, level and optional component prefix.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        message: The message to log
        component: Name of the component emitting the message

    Returns:
        Formatted log message string
    """
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    if component:
        return f"[{timestamp}] [{level}] [{component}] {message}"
    return f"[{timestamp}] [{level}] {message}"


class RelayLogger:
    """
    Component logger bound to a LogConfig.

    Messages accept printf-style arguments the same way the stdlib
    logging module does: log.debug("pages=%d", n).
    """

    def __init__(self, config: Optional[LogConfig] = None, component: Optional[str] = None):
        self.config = config or LogConfig()
        self.component = component

    def child(self, component: str) -> "RelayLogger":
        """Return a logger for another component sharing this configuration."""
        return RelayLogger(self.config, component)

    def _render(self, level: str, message: str, args: tuple) -> str:
        formatted_msg = message if not args else message % args
        return _format_message(level, formatted_msg, self.component)

    def debug(self, message: str, *args: Any) -> None:
        """Log a debug message. Only outputs if verbose output is enabled."""
        if self.config.verbose:
            print(self._render("DEBUG", message, args), file=sys.stdout)

    def info(self, message: str, *args: Any) -> None:
        """Log an informational message. Only outputs if verbose output is enabled."""
        if self.config.verbose:
            print(self._render("INFO", message, args), file=sys.stdout)

    def warning(self, message: str, *args: Any) -> None:
        """Log a warning message. Always outputs."""
        print(self._render("WARNING", message, args), file=sys.stderr)

    def error(self, message: str, *args: Any) -> None:
        """Log an error message. Always outputs."""
        print(self._render("ERROR", message, args), file=sys.stderr)


def get_logger(component: str, config: Optional[LogConfig] = None) -> RelayLogger:
    """
    Create a logger for a component.

    Args:
        component: Short component name used as a prefix
        config: Logging configuration (defaults to non-verbose)

    Returns:
        RelayLogger bound to the given configuration
    """
    return RelayLogger(config, component)

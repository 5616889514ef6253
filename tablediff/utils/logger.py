"""
Structured logging utility.
Single responsibility: provide consistent logging across the comparison stages.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import json


LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARN": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class StructuredLogger:
    """
    Structured logger for consistent application logging.

    Events are dotted names (``parser.csv.parsed``) carrying keyword context.
    Console output is human readable; the optional log file gets JSON lines.
    """

    def __init__(self, name: str = "tablediff",
                 log_file: Optional[Path] = None,
                 level: str = "INFO"):
        """
        Initialize logger.

        Args:
            name: Logger name
            log_file: Optional file path for JSON-lines logging
            level: Minimum level that gets emitted
        """
        self.name = name
        self.log_file = log_file
        self.level = normalize_level(level)

    def _format_message(self, level: str, message: str,
                       **kwargs) -> Dict[str, Any]:
        """
        Format log message with metadata.

        Args:
            level: Log level (INFO, DEBUG, ERROR, etc.)
            message: Event name
            **kwargs: Additional context fields

        Returns:
            Formatted log entry
        """
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "logger": self.name,
            "message": message
        }

        if kwargs:
            entry["context"] = kwargs

        return entry

    def _output(self, entry: Dict[str, Any]):
        """
        Output log entry to console and optionally file.

        Args:
            entry: Log entry dictionary
        """
        if LEVELS[entry["level"]] < LEVELS[self.level]:
            return

        timestamp = entry["timestamp"].split("T")[1][:8]
        level = entry["level"]
        msg = entry["message"]

        print(f"[{timestamp}] {level:5} | {msg}", file=sys.stderr)

        if "context" in entry:
            for key, value in entry["context"].items():
                print(f"  {key}={value}", file=sys.stderr)

        if self.log_file:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")

    def is_enabled_for(self, level: str) -> bool:
        """Check whether a level would be emitted."""
        return LEVELS[normalize_level(level)] >= LEVELS[self.level]

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._output(self._format_message("INFO", message, **kwargs))

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._output(self._format_message("DEBUG", message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._output(self._format_message("WARN", message, **kwargs))

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._output(self._format_message("ERROR", message, **kwargs))

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._output(self._format_message("CRITICAL", message, **kwargs))


def normalize_level(level: str) -> str:
    """
    Map a user supplied level name onto a known level.

    ``WARNING`` is accepted as an alias of ``WARN``.

    Raises:
        ValueError: If the level is unknown
    """
    name = str(level).strip().upper()
    if name == "WARNING":
        name = "WARN"
    if name not in LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    return name


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "tablediff") -> StructuredLogger:
    """
    Get or create logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = StructuredLogger(name)
    return _logger


def configure_logger(level: str = "INFO",
                     log_file: Optional[Path] = None) -> StructuredLogger:
    """
    Reconfigure the shared logger in place.

    Modules keep the instance they fetched at import time, so the
    existing object is updated rather than replaced.

    Args:
        level: Minimum level to emit
        log_file: Optional JSON-lines log file

    Returns:
        The shared logger
    """
    logger = get_logger()
    logger.level = normalize_level(level)
    logger.log_file = Path(log_file) if log_file else None
    return logger

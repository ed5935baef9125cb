"""
Structured logging system for the roster.

Provides centralized logging with console and file destinations,
log levels, and per-process operation metrics.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


def _console_handler(level: str) -> logging.Handler:
    # stdout carries command output, so log lines go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    return handler


def _file_handler(log_dir: Optional[Path]) -> logging.Handler:
    log_dir = Path("logs") if log_dir is None else log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / f"roster_{datetime.now():%Y%m%d}.log"
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
    return handler


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for the operations run in this process.
    """

    def __init__(
        self,
        name: str = "roster",
        level: str = "WARNING",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to stderr
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        self.metrics = {
            "operations": {},
            "employees_created": 0,
            "validation_failures": {},
            "errors_by_type": {},
        }

        self.configure(level, log_dir, enable_file, enable_console)

    def configure(
        self,
        level: str = "WARNING",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """Replace the output handlers; metrics are kept."""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        handlers = []
        if enable_console:
            handlers.append(_console_handler(level))
        if enable_file:
            handlers.append(_file_handler(log_dir))
        for handler in handlers or [logging.NullHandler()]:
            self.logger.addHandler(handler)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def critical(self, message: str, **context):
        self._log(logging.CRITICAL, message, context)

    def _log(self, level: int, message: str, context: dict):
        """Append keyword context to the message as JSON."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_operation(self, command: str):
        """Count one CLI operation."""
        ops = self.metrics["operations"]
        ops[command] = ops.get(command, 0) + 1

    def record_employee_created(self):
        self.metrics["employees_created"] += 1

    def record_validation_failure(self, field: str):
        """Count one rejected entry for a prompt field."""
        failures = self.metrics["validation_failures"]
        failures[field] = failures.get(field, 0) + 1

    def record_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics."""
        metrics_copy = {
            key: dict(value) if isinstance(value, dict) else value
            for key, value in self.metrics.items()
        }
        metrics_copy["total_validation_failures"] = sum(
            metrics_copy["validation_failures"].values()
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Roster Session Metrics ===")
        for command, count in metrics["operations"].items():
            self.info(f"Operation {command}: {count}")
        self.info(f"Employees created: {metrics['employees_created']}")

        if metrics["validation_failures"]:
            self.info(f"Validation failures: {metrics['total_validation_failures']}")
            for field, count in metrics["validation_failures"].items():
                self.info(f"  {field}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


def mask_ssn(ssn: Optional[str]) -> str:
    """Keep only the last four digits of an SSN for log output."""
    if not ssn:
        return ""
    return f"***-**-{ssn[-4:]}"


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(**kwargs) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level, log directory and file output default to the values from
    roster.env.get_settings(); keyword arguments override them.

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        from .env import get_settings

        settings = get_settings()
        options = {
            "level": settings.log_level,
            "log_dir": settings.log_dir,
            "enable_file": settings.log_to_file,
        }
        options.update(kwargs)
        _global_logger = StructuredLogger(**options)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None

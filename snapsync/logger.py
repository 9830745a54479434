"""
Structured logging system for snapsync.

Provides centralized logging with console and file outputs, log levels,
and counters for monitoring how many snapshots were checked, changed,
saved and published during a sync session.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring sync health.
    """

    def __init__(
        self,
        name: str = "snapsync",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if enable_file else getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "snapshots_checked": 0,
            "snapshots_changed": 0,
            "snapshots_unchanged": 0,
            "degraded_compares": 0,
            "snapshots_saved": 0,
            "save_failures": 0,
            "fetches_attempted": 0,
            "fetches_failed": 0,
            "publishes": 0,
            "errors_by_type": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"snapsync_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_check(self, changed: bool, degraded: bool = False):
        """Record the outcome of a change check."""
        self.metrics["snapshots_checked"] += 1
        if changed:
            self.metrics["snapshots_changed"] += 1
        else:
            self.metrics["snapshots_unchanged"] += 1
        if degraded:
            self.metrics["degraded_compares"] += 1

    def record_save(self):
        """Increment saved snapshot counter."""
        self.metrics["snapshots_saved"] += 1

    def record_fetch_attempt(self):
        """Increment fetch attempt counter."""
        self.metrics["fetches_attempted"] += 1

    def record_publish(self):
        """Increment publish counter."""
        self.metrics["publishes"] += 1

    def record_failure(self, stage: str, error_type: str):
        """Record a failed fetch or save, keyed by error type."""
        if stage == "fetch":
            self.metrics["fetches_failed"] += 1
        elif stage == "save":
            self.metrics["save_failures"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return a copy of the current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        checked = metrics["snapshots_checked"]
        changed = metrics["snapshots_changed"]
        change_rate = 0
        if checked > 0:
            change_rate = round(changed / checked * 100, 1)

        self.info("=== Sync Session Metrics ===")
        self.info(f"Fetches: {metrics['fetches_attempted']} ({metrics['fetches_failed']} failed)")
        self.info(f"Checked: {checked}, changed: {changed} ({change_rate}%)")
        self.info(f"Saved: {metrics['snapshots_saved']} ({metrics['save_failures']} failed)")
        self.info(f"Published: {metrics['publishes']}")

        if metrics["degraded_compares"]:
            self.info(f"Raw byte comparisons: {metrics['degraded_compares']}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "snapsync",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None

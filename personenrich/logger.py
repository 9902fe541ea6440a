"""
Structured logging for personenrich.

One logger writes to stderr and to a daily file under the log directory, and
keeps per-service counters of lookup outcomes so a batch run can report how
agify, genderize and nationalize behaved.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# outcomes a single lookup can end in
OUTCOMES = ("determined", "undetermined", "failed")


def _console_handler(level: int) -> logging.Handler:
    # stderr keeps stdout clean for the CLI's JSON output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"personenrich_{datetime.now().strftime('%Y%m%d')}.log"
    handler = logging.FileHandler(log_file, encoding='utf-8')
    handler.setLevel(logging.DEBUG)  # file always gets everything
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


class StructuredLogger:
    """
    Logger with JSON context and lookup outcome counters.

    Args:
        name: Logger name
        level: Console log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (default: logs/)
        enable_file: Write logs to file
        enable_console: Write logs to stderr
    """

    def __init__(
        self,
        name: str = "personenrich",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        numeric_level = getattr(logging, level.upper())
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if enable_file else numeric_level)
        self.logger.handlers.clear()

        if enable_console:
            self.logger.addHandler(_console_handler(numeric_level))
        if enable_file:
            self.logger.addHandler(_file_handler(Path(log_dir or "logs")))

        self.services: Dict[str, Dict[str, int]] = {}
        self.errors_by_type: Dict[str, int] = {}

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Lookup metrics

    def _stats(self, service: str) -> Dict[str, int]:
        if service not in self.services:
            self.services[service] = {"attempts": 0, **{outcome: 0 for outcome in OUTCOMES}}
        return self.services[service]

    def record_lookup_attempt(self, service: str):
        self._stats(service)["attempts"] += 1

    def record_lookup_success(self, service: str):
        """The service returned a usable value."""
        self._stats(service)["determined"] += 1

    def record_lookup_undetermined(self, service: str):
        """The service answered but could not determine a value for the name."""
        self._stats(service)["undetermined"] += 1

    def record_lookup_failure(self, service: str, error_type: str):
        self._stats(service)["failed"] += 1
        self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """
        Snapshot of the counters.

        Totals are summed over services; each service also carries its
        success_rate (determined / attempts). Mutating the result does not
        touch the logger's own counters.
        """
        services = {}
        for service, stats in self.services.items():
            snapshot = dict(stats)
            if stats["attempts"]:
                snapshot["success_rate"] = round(stats["determined"] / stats["attempts"], 3)
            services[service] = snapshot

        def total(key):
            return sum(stats[key] for stats in self.services.values())

        return {
            "lookups_attempted": total("attempts"),
            "lookups_successful": total("determined"),
            "lookups_undetermined": total("undetermined"),
            "lookups_failed": total("failed"),
            "errors_by_type": dict(self.errors_by_type),
            "services": services,
        }

    def log_metrics_summary(self):
        """Log one line per service and the failure breakdown."""
        metrics = self.get_metrics()
        attempts = metrics["lookups_attempted"]
        if not attempts:
            self.info("No lookups were made")
            return

        rate = round(metrics["lookups_successful"] / attempts * 100, 1)
        self.info("=== Enrichment Session Metrics ===")
        self.info(
            f"Lookups: {metrics['lookups_successful']}/{attempts} ({rate}% success), "
            f"undetermined={metrics['lookups_undetermined']} failed={metrics['lookups_failed']}"
        )
        for service, stats in sorted(metrics["services"].items()):
            self.info(
                f"  {service}: determined={stats['determined']} undetermined={stats['undetermined']} "
                f"failed={stats['failed']} of {stats['attempts']}"
            )
        for error_type, count in sorted(metrics["errors_by_type"].items()):
            self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "personenrich", level: str = "INFO", **kwargs) -> StructuredLogger:
    """
    Get or create the process-wide logger.

    Arguments only apply on the first call; later calls return the same instance.
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the process-wide logger so the next get_logger builds a fresh one."""
    global _global_logger
    _global_logger = None

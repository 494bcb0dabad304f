"""Structured logging utilities with JSONL output."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any


def get_logger(
    name: str,
    log_file: Path | None = None,
    level: str | int = logging.INFO,
) -> logging.Logger:
    """
    Get a configured logger with both console and file handlers.

    Args:
        name: Logger name (usually __name__)
        log_file: Optional path to JSONL log file
        level: Logging level name or number

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if logger.handlers:
        return logger

    logger.setLevel(level)

    # Console handler (human-readable)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = JSONLFileHandler(log_file)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """
    Configure the package root logger once at startup.

    Every module logger under ``sitechat`` propagates here, so one call
    wires console and JSONL output for the whole pipeline.
    """
    return get_logger("sitechat", log_file=log_file, level=level.upper())


class JSONLFileHandler(logging.Handler):
    """Custom handler that writes log records as JSONL (JSON Lines)."""

    def __init__(self, filepath: Path):
        super().__init__()
        self.filepath = Path(filepath)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: logging.LogRecord) -> None:
        """Write log record as JSON line."""
        try:
            log_entry = {
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            }

            # Structured fields attached by log_event()
            event = getattr(record, "event", None)
            if event:
                log_entry.update(event)

            with open(self.filepath, "a", encoding="utf-8") as f:
                f.write(json.dumps(log_entry, default=str) + "\n")

        except Exception:
            self.handleError(record)


def log_event(
    logger: logging.Logger,
    event_type: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Log a structured event with additional metadata.

    Args:
        logger: Logger instance
        event_type: Type of event (e.g., "crawl_start", "page_indexed")
        message: Human-readable message
        level: Logging level for the record
        **kwargs: Additional metadata to include in log
    """
    logger.log(level, message, extra={"event": {"event_type": event_type, **kwargs}})

"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Iterable

import structlog

LOGGER_NAME = "fuzzy_row_matcher"

_LOGGING_INITIALISED = False


def default_log_dir() -> Path:
    env_root = os.environ.get("FUZZY_ROW_MATCHER_HOME")
    root = Path(env_root).expanduser() if env_root else Path.cwd()
    return root.resolve() / "logs"


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the application logger."""

    global _LOGGING_INITIALISED
    log_dir = default_log_dir()
    error_log = log_dir / "error.log"
    matcher_log = log_dir / "matcher.log"
    (log_dir / "runs").mkdir(parents=True, exist_ok=True)
    error_log.touch(exist_ok=True)
    matcher_log.touch(exist_ok=True)

    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(threadName)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "plain",
                    },
                    "matcher_file": {
                        "class": "logging.FileHandler",
                        "level": "INFO",
                        "filename": str(matcher_log),
                        "formatter": "plain",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(error_log),
                        "formatter": "plain",
                    },
                },
                "loggers": {
                    LOGGER_NAME: {
                        "handlers": ["console", "matcher_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger(LOGGER_NAME)


def run_logger(run_timestamp: str, verbose: bool = False) -> structlog.BoundLogger:
    """Return a logger bound to one matcher run, mirrored into its own file."""

    logger = configure_logging(verbose)
    run_log_path = default_log_dir() / "runs" / f"{run_timestamp}.log"
    run_log_path.parent.mkdir(parents=True, exist_ok=True)

    py_logger = logging.getLogger(LOGGER_NAME)
    if not any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == str(run_log_path)
        for handler in py_logger.handlers
    ):
        file_handler = logging.FileHandler(run_log_path, encoding="utf-8")
        if py_logger.handlers:
            file_handler.setFormatter(py_logger.handlers[0].formatter)
        file_handler.setLevel(logging.INFO)
        py_logger.addHandler(file_handler)

    return logger.bind(run=run_timestamp)


def release_run_logger(run_timestamp: str) -> None:
    """Detach and close the file handler added by `run_logger`."""

    run_log_path = str(default_log_dir() / "runs" / f"{run_timestamp}.log")
    py_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(py_logger.handlers):
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == run_log_path:
            py_logger.removeHandler(handler)
            handler.close()


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_run_logs() -> Iterable[Path]:
    """Yield per-run log files, oldest first."""

    runs_dir = default_log_dir() / "runs"
    if not runs_dir.exists():
        return []
    return sorted(p for p in runs_dir.glob("*.log") if p.is_file())


__all__ = [
    "LOGGER_NAME",
    "available_run_logs",
    "configure_logging",
    "default_log_dir",
    "release_run_logger",
    "run_logger",
    "tail_log",
]

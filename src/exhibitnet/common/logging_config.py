"""
Logging configuration for the exhibitnet library.

Every module obtains its logger through ``get_logger(__name__)``, so all
library loggers live below the ``exhibitnet`` root configured here. The
configuration can come from function arguments or from environment
variables, with arguments taking precedence.
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any


ROOT_LOGGER_NAME = "exhibitnet"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

ENV_LOG_LEVEL = "EXHIBITNET_LOG_LEVEL"
ENV_LOG_FILE = "EXHIBITNET_LOG_FILE"
ENV_LOG_DIR = "EXHIBITNET_LOG_DIR"
ENV_LOG_FORMAT = "EXHIBITNET_LOG_FORMAT"
ENV_LOG_CONSOLE = "EXHIBITNET_LOG_CONSOLE"
ENV_LOG_JSON = "EXHIBITNET_LOG_JSON"

_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName", "taskName",
    "processName", "process", "exc_info", "exc_text",
    "stack_info", "message"
}


class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_obj[key] = value

        return json.dumps(log_obj, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Parameters
    ----------
    name : str
        The logger name, typically ``__name__``

    Returns
    -------
    logging.Logger
        Logger that inherits handlers from the ``exhibitnet`` root once
        ``setup_logging()`` has been called
    """
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: Optional[bool] = None,
    json_format: Optional[bool] = None,
    format_string: Optional[str] = None,
    max_file_size: Optional[int] = None,
    backup_count: Optional[int] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Configure the ``exhibitnet`` root logger.

    Parameters
    ----------
    level : str, optional
        Logging level name. Falls back to EXHIBITNET_LOG_LEVEL, then INFO.
    log_file : str, optional
        Path of a rotating log file. Falls back to EXHIBITNET_LOG_FILE.
    log_dir : str, optional
        Directory for ``exhibitnet.log`` when no log_file is given.
        Falls back to EXHIBITNET_LOG_DIR. No file is written if neither is set.
    console : bool, optional
        Log to stdout. Falls back to EXHIBITNET_LOG_CONSOLE, then True.
    json_format : bool, optional
        Emit JSON lines. Falls back to EXHIBITNET_LOG_JSON, then False.
    format_string : str, optional
        Format for text output. Falls back to EXHIBITNET_LOG_FORMAT.
    max_file_size : int, optional
        Rotation size in bytes (default 10MB)
    backup_count : int, optional
        Number of rotated files kept (default 5)
    force_setup : bool, default False
        Replace existing handlers instead of returning early

    Returns
    -------
    logging.Logger
        The configured root logger

    Raises
    ------
    ValueError
        If the logging level is not a valid level name

    Examples
    --------
    >>> logger = setup_logging(level="DEBUG", console=True)
    >>> logger = setup_logging(log_dir="logs", json_format=True, force_setup=True)
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    if not force_setup and root_logger.handlers:
        return root_logger

    if force_setup:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    config = _resolve_logging_config(
        level=level,
        log_file=log_file,
        log_dir=log_dir,
        console=console,
        json_format=json_format,
        format_string=format_string,
        max_file_size=max_file_size,
        backup_count=backup_count
    )

    log_level = logging.getLevelName(config["level"].upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Invalid logging level: {config['level']}")
    root_logger.setLevel(log_level)

    if config["json_format"]:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=config["format_string"], datefmt=DEFAULT_DATE_FORMAT)

    if config["console"]:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if config["log_file"]:
        log_path = Path(config["log_file"])
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config["max_file_size"],
            backupCount=config["backup_count"],
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.propagate = False

    root_logger.info(
        "Logging configured: level=%s, console=%s, file=%s, json=%s",
        config["level"], config["console"],
        config["log_file"] or "None", config["json_format"]
    )

    return root_logger


def _resolve_logging_config(**kwargs) -> Dict[str, Any]:
    """Merge arguments, environment variables and defaults (in that order)."""
    level = kwargs.get("level") or os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)

    log_file = kwargs.get("log_file") or os.getenv(ENV_LOG_FILE)
    log_dir = kwargs.get("log_dir") or os.getenv(ENV_LOG_DIR)
    if not log_file and log_dir:
        log_file = os.path.join(log_dir, "exhibitnet.log")

    console = kwargs.get("console")
    if console is None:
        console = env_flag(ENV_LOG_CONSOLE, True)

    json_format = kwargs.get("json_format")
    if json_format is None:
        json_format = env_flag(ENV_LOG_JSON, False)

    return {
        "level": level,
        "log_file": log_file,
        "console": console,
        "json_format": json_format,
        "format_string": kwargs.get("format_string") or os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT),
        "max_file_size": kwargs.get("max_file_size") or DEFAULT_MAX_FILE_SIZE,
        "backup_count": kwargs.get("backup_count") or DEFAULT_BACKUP_COUNT,
    }


def env_flag(env_var: str, default: bool) -> bool:
    """Parse a boolean environment variable (true/yes/1/on, false/no/0/off)."""
    value = os.getenv(env_var, "").strip().lower()
    if value in ("true", "yes", "1", "on"):
        return True
    elif value in ("false", "no", "0", "off"):
        return False
    return default


def log_function_entry(func_name: str, **kwargs) -> None:
    """Log entry into a public operation with its parameters (DEBUG only)."""
    logger = get_logger(f"{ROOT_LOGGER_NAME}.debug")
    if logger.isEnabledFor(logging.DEBUG):
        param_str = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        logger.debug("Entering %s(%s)", func_name, param_str)


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log the duration of an operation to ``exhibitnet.performance``.

    Parameters
    ----------
    operation : str
        Name of the timed operation
    duration : float
        Duration in seconds
    details : Dict[str, Any], optional
        Extra context such as node or record counts
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.performance")

    message = f"Performance: {operation} completed in {duration:.3f}s"
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        message += f" ({detail_str})"

    logger.info(message, extra={"operation": operation, "duration": duration})


class LoggingTimer:
    """
    Context manager that times a block and logs it as a performance metric.

    Examples
    --------
    >>> with LoggingTimer("build_cooccurrence_graph", {"records": 1200}):
    ...     pass
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.details = details or {}
        self.start_time: Optional[float] = None

    def __enter__(self) -> "LoggingTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            duration = time.perf_counter() - self.start_time
            log_performance_metric(self.operation, duration, self.details)

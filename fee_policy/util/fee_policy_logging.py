from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, cast

import colorlog
from concurrent_log_handler import ConcurrentRotatingFileHandler

from fee_policy import __version__
from fee_policy.util.config import path_from_root

default_log_level = "WARNING"
log_date_format = "%Y-%m-%dT%H:%M:%S"


def get_file_log_handler(
    formatter: logging.Formatter, root_path: Path, logging_config: Dict[str, Any]
) -> ConcurrentRotatingFileHandler:
    log_path = path_from_root(root_path, str(logging_config.get("log_filename", "log/debug.log")))
    log_path.parent.mkdir(parents=True, exist_ok=True)
    maxrotation = cast(int, logging_config.get("log_maxfilesrotation", 7))
    maxbytesrotation = cast(int, logging_config.get("log_maxbytesrotation", 50 * 1024 * 1024))
    use_gzip = cast(bool, logging_config.get("log_use_gzip", False))
    handler = ConcurrentRotatingFileHandler(
        os.fspath(log_path), "a", maxBytes=maxbytesrotation, backupCount=maxrotation, use_gzip=use_gzip
    )
    handler.setFormatter(formatter)
    return handler


def get_stdout_log_handler(service_name: str, file_name_length: int) -> logging.Handler:
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            f"%(asctime)s.%(msecs)03d {__version__} {service_name} %(name)-{file_name_length}s: "
            f"%(log_color)s%(levelname)-8s%(reset)s %(message)s",
            datefmt=log_date_format,
            reset=True,
        )
    )
    return handler


def initialize_logging(service_name: str, logging_config: Dict[str, Any], root_path: Path) -> List[logging.Handler]:
    """
    Attach the configured handlers to the root logger, either colored stdout
    or a rotating log file under `root_path`, and returns them.
    """
    log_level = logging_config.get("log_level", default_log_level)
    file_name_length = max(33 - len(service_name), 1)
    handlers: List[logging.Handler] = []
    if logging_config.get("log_stdout", False):
        handlers.append(get_stdout_log_handler(service_name, file_name_length))
    else:
        file_log_formatter = logging.Formatter(
            fmt=f"%(asctime)s.%(msecs)03d {__version__} {service_name} %(name)-{file_name_length}s: "
            f"%(levelname)-8s %(message)s",
            datefmt=log_date_format,
        )
        handlers.append(get_file_log_handler(file_log_formatter, root_path, logging_config))

    root_logger = logging.getLogger()
    for handler in handlers:
        root_logger.addHandler(handler)

    set_log_level(log_level=log_level, service_name=service_name)
    return handlers


def initialize_service_logging(service_name: str, config: Dict[str, Any], root_path: Path) -> List[logging.Handler]:
    logging_config = config.get("logging") or {}
    return initialize_logging(service_name=service_name, logging_config=logging_config, root_path=root_path)


def set_log_level(log_level: str, service_name: str) -> List[str]:
    root_logger = logging.getLogger()
    log_level_exceptions = {}

    for handler in root_logger.handlers:
        try:
            handler.setLevel(log_level)
        except (TypeError, ValueError) as e:
            handler.setLevel(default_log_level)
            log_level_exceptions[handler] = e

    error_strings = [
        f"Handler {handler}: Invalid log level '{log_level}' for {service_name}. "
        f"Defaulting to: {default_log_level}. Error: {exception}"
        for handler, exception in log_level_exceptions.items()
    ]
    for error_string in error_strings:
        root_logger.error(error_string)

    # The root logger must not filter out records that a handler is configured to accept
    if len(root_logger.handlers) > 0:
        root_logger.setLevel(min(handler.level for handler in root_logger.handlers))

    return error_strings

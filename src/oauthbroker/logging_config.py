#!/usr/bin/env python3
"""Logging configuration for the authorization broker."""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LEVEL_ENV_VAR = 'OAUTHBROKER_LOG_LEVEL'

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(level: Optional[str] = None, log_file: Optional[Path] = None,
                  default: str = 'INFO') -> None:
    """Route broker and CLI log records to stderr and an optional file.

    Stdout is left alone so `oauthbroker authorize` and `decode` output can
    be piped. The file, when given, always receives DEBUG records.

    Args:
        level: Console level name; falls back to OAUTHBROKER_LOG_LEVEL,
               then to default
        log_file: Optional log file, parent directories are created
        default: Level used when neither level nor the env var is set
    """
    level_name = (level or os.environ.get(LEVEL_ENV_VAR) or default).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    detailed = logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    if numeric_level == logging.DEBUG:
        console_handler.setFormatter(detailed)
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed)
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug(f"Console logging at {level_name}" + (f", file {log_file}" if log_file else ""))

"""
Logging utilities with security features.

This module provides logging setup with:
- Configurable log levels and output destinations
- Log rotation for file handlers
- Sensitive data masking (passwords, bearer tokens)
- Structured log format
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


def mask_token(token: str) -> str:
    """
    Mask a bearer token for safe logging, keeping the last 4 characters.

    Examples:
        >>> mask_token("eyJhbGciOiJIUzI1NiJ9.abcd")
        '****abcd'
        >>> mask_token("abc")
        '****'
    """
    if not token or len(token) <= 8:
        return "****"
    return "****" + token[-4:]


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that masks credentials before output.

    Catches ``password=...`` style pairs, ``Authorization: Bearer ...``
    headers and JWT-looking ``access``/``refresh`` values.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = str(record.msg)

        message = re.sub(
            r'password["\']?\s*[:=]\s*["\']?([^"\'\s,}]+)',
            r'password: ********',
            message,
            flags=re.IGNORECASE
        )

        message = re.sub(
            r'(Bearer)\s+[A-Za-z0-9\-_.=]+',
            r'\1 ********',
            message,
            flags=re.IGNORECASE
        )

        message = re.sub(
            r'(access|refresh|token)["\']?\s*[:=]\s*["\']?([A-Za-z0-9\-_.=]{8,})',
            r'\1: ********',
            message,
            flags=re.IGNORECASE
        )

        record.msg = message
        return True


def setup_logger(
    name: str = "onlineschool",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    The package logs under ``onlineschool.*``, so configuring the default
    name captures every module's output.

    Args:
        name: Logger name (default: "onlineschool")
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file for file output

    Returns:
        Configured logger instance

    Examples:
        >>> logger = setup_logger()
        >>> logger.info("Client started")

        >>> logger = setup_logger(
        ...     level=logging.DEBUG,
        ...     log_file="output/logs/onlineschool.log"
        ... )
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        logger.setLevel(level)
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    sensitive_filter = SensitiveDataFilter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(sensitive_filter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(sensitive_filter)
        logger.addHandler(file_handler)

    return logger

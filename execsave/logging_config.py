"""
Logging configuration utilities for the execsave Python core.

This module configures the structured logger from host (editor) settings
and environment variables.

Usage:
    from execsave.logging_config import configure_from_host_settings

    configure_from_host_settings({
        'loggingEnabled': True,
        'logLevel': 'DEBUG',
        'logDirectory': '/path/to/logs',
    })
"""

import os
from typing import Any, Dict, Optional

from .logger import configure_logger, get_logger


def configure_from_host_settings(settings: Dict[str, Any]) -> None:
    """Configure logger from a host settings dict.

    Args:
        settings: Dictionary with settings from the host
            Expected keys (all optional):
            - loggingEnabled: bool
            - logLevel: str ('ERROR', 'WARN', 'INFO', 'DEBUG', 'TRACE')
            - logDirectory: str (path to log directory)
            - logToConsole: bool
            - sessionId: str
    """
    configure_logger(
        enabled=settings.get("loggingEnabled", True),
        level=settings.get("logLevel", "INFO"),
        log_directory=settings.get("logDirectory") or None,
        session_id=settings.get("sessionId"),
        console_output=settings.get("logToConsole", False),
    )


def configure_from_environment() -> None:
    """Configure logger from environment variables.

    Environment variables:
        EXECSAVE_LOG_ENABLED: '0', '1', 'true', 'false'
        EXECSAVE_LOG_LEVEL: 'ERROR', 'WARN', 'INFO', 'DEBUG', 'TRACE'
        EXECSAVE_LOG_DIR: Path to log directory
        EXECSAVE_LOG_CONSOLE: '0', '1', 'true', 'false'
        EXECSAVE_SESSION_ID: Session ID for correlation
    """
    configure_logger(
        enabled=parse_bool(os.environ.get("EXECSAVE_LOG_ENABLED"), True),
        level=os.environ.get("EXECSAVE_LOG_LEVEL", "INFO"),
        log_directory=os.environ.get("EXECSAVE_LOG_DIR"),
        session_id=os.environ.get("EXECSAVE_SESSION_ID"),
        console_output=parse_bool(os.environ.get("EXECSAVE_LOG_CONSOLE"), False),
    )


TRUE_WORDS = ("1", "true", "yes", "on")
FALSE_WORDS = ("0", "false", "no", "off")


def is_bool_word(value: str) -> bool:
    """Whether parse_bool recognizes the string."""
    return value.strip().lower() in TRUE_WORDS + FALSE_WORDS


def parse_bool(value: Optional[str], default: bool) -> bool:
    """Parse string to boolean; unrecognized words mean ``default``."""
    if value is None:
        return default
    word = value.strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    return default


def get_session_id() -> str:
    """Get current session ID."""
    return get_logger().session_id


__all__ = [
    "configure_from_host_settings",
    "configure_from_environment",
    "parse_bool",
    "is_bool_word",
    "get_session_id",
]

# Path: certverify/core/logger/ipo_logging.py
"""
IPO-Aware Logging for Certificate Verification

Input-Process-Output separated logging.

This module sets up logging with separate files for:
- INPUT layer (repositories, ledger clients, dataset loaders)
- PROCESS layer (verification engine, checks)
- OUTPUT layer (report generator)
- Full activity (everything combined)
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from ...constants import (
    LOG_FORMAT,
    LOGGER_INPUT,
    LOGGER_PROCESS,
    LOGGER_OUTPUT,
)


class IPOFilter(logging.Filter):
    """Filter logs by IPO layer prefix."""

    def __init__(self, layer: str):
        """
        Initialize filter for specific IPO layer.

        Args:
            layer: 'input', 'process', or 'output'
        """
        super().__init__()
        self.layer = layer

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter records by logger name prefix."""
        return record.name.startswith(self.layer)


def setup_ipo_logging(
    log_dir: Optional[Path] = None,
    log_level: str = 'INFO',
    console_output: bool = True,
    console_handler: Optional[logging.Handler] = None,
) -> None:
    """
    Set up IPO-aware logging for certificate verification.

    Creates separate log files (when log_dir is given) for:
    - input_activity.log (INPUT layer)
    - process_activity.log (PROCESS layer)
    - output_activity.log (OUTPUT layer)
    - full_activity.log (all activities combined)

    Args:
        log_dir: Directory for log files; None logs to console only
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console_output: Whether to also output to console
        console_handler: Handler to use for console output
            (defaults to a stdout StreamHandler)

    Example:
        setup_ipo_logging(
            log_dir=Path('/var/log/certverify'),
            log_level='INFO',
            console_output=True
        )
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        # Full activity log (everything)
        full_handler = logging.FileHandler(log_dir / 'full_activity.log')
        full_handler.setLevel(logging.DEBUG)
        full_handler.setFormatter(formatter)
        root_logger.addHandler(full_handler)

        for layer in (LOGGER_INPUT, LOGGER_PROCESS, LOGGER_OUTPUT):
            handler = logging.FileHandler(log_dir / f'{layer}_activity.log')
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(formatter)
            handler.addFilter(IPOFilter(layer))
            root_logger.addHandler(handler)

    if console_output:
        if console_handler is None:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)


def get_input_logger(name: str) -> logging.Logger:
    """
    Get logger for INPUT layer.

    Args:
        name: Logger name (e.g., 'memory_repository', 'http_ledger')

    Returns:
        Logger configured for INPUT layer
    """
    return logging.getLogger(f'{LOGGER_INPUT}.{name}')


def get_process_logger(name: str) -> logging.Logger:
    """
    Get logger for PROCESS layer (verification engine).

    Args:
        name: Logger name (e.g., 'orchestrator', 'anomaly_detector')

    Returns:
        Logger configured for PROCESS layer
    """
    return logging.getLogger(f'{LOGGER_PROCESS}.{name}')


def get_output_logger(name: str) -> logging.Logger:
    """
    Get logger for OUTPUT layer.

    Args:
        name: Logger name (e.g., 'report_generator')

    Returns:
        Logger configured for OUTPUT layer
    """
    return logging.getLogger(f'{LOGGER_OUTPUT}.{name}')


__all__ = [
    'IPOFilter',
    'setup_ipo_logging',
    'get_input_logger',
    'get_process_logger',
    'get_output_logger',
]

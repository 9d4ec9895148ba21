"""
logging_config.py — Centralized Logging Configuration for the Checkout Service

This module configures unified logging behavior for the entire application.
It ensures that all modules log messages consistently to both console and file.

Features:
    • Combined console and file logging output
    • Process ID tagging for multi-process visibility
    • Standardized log format for all modules
    • Reduced verbosity for external dependencies (pika, httpx)
"""

import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(message)s'


def setup_logging(log_file: str = None, level: str = None):
    """
    Configures the global logging system for the application.

    The configuration includes:
        - Log level: LOG_LEVEL environment variable, INFO by default
        - Log format: timestamp, log level, process ID, and message
        - Output destinations:
            1. File: CHECKOUT_LOG_FILE, 'checkout.log' by default (persistent log)
            2. Console (stdout): real-time logs, Docker/Kubernetes compatible
        - Reduced verbosity for third-party libraries such as pika and httpx

    Args:
        log_file (str | None): Overrides the log file path.
        level (str | None): Overrides the log level name.
    """
    log_file = log_file or os.environ.get("CHECKOUT_LOG_FILE", "checkout.log")
    level = level or os.environ.get("LOG_LEVEL", "INFO")

    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=[
            # File output
            logging.FileHandler(log_file),
            # Console output (stdout, Docker-compatible)
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Reduce verbosity from external libraries
    logging.getLogger("pika").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name):
    """
    Returns a logger instance for a given module or component name.

    Args:
        name (str): The logger name, typically the module's __name__.

    Returns:
        logging.Logger: A logger that follows the global format and handlers.
    """
    return logging.getLogger(name)

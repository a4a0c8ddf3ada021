"""
Logging configuration for the shift rule engine.
"""

import logging
import os
import time
import functools
from contextlib import contextmanager
from datetime import datetime

# Log directory and file
LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
LOG_FILE = os.path.join(LOG_DIR, f"shiftrules_{datetime.now().strftime('%Y%m%d')}.log")

ROOT_LOGGER_NAME = 'shiftrules'


def setup_logging(level=logging.INFO, log_to_file=True):
    """
    Configure logging for the application.

    Args:
        level: Logging level (default: INFO)
        log_to_file: Whether to also log to a file (default: True)

    Returns:
        Logger instance
    """
    if log_to_file and not os.path.exists(LOG_DIR):
        os.makedirs(LOG_DIR)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        file_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name=None):
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (will be prefixed with 'shiftrules.')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
    return logging.getLogger(ROOT_LOGGER_NAME)


@contextmanager
def log_timing(operation_name: str, logger_instance=None):
    """
    Context manager to measure and log execution time of a code block.

    Usage:
        with log_timing("draft generation"):
            generate()
    """
    log = logger_instance or get_logger('perf')
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        log.info(f"⏱️ {operation_name}: {elapsed:.4f}s")


def timed(func=None, *, name=None):
    """
    Decorator form of log_timing.

    Usage:
        @timed
        def check():
            ...

        @timed(name="publish readiness check")
        def check():
            ...
    """
    def decorator(fn):
        op_name = name or fn.__qualname__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            with log_timing(op_name):
                return fn(*args, **kwargs)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


# Initialize console logging when module is imported; file logging is opted
# into by the CLI entry point.
logger = setup_logging(log_to_file=False)

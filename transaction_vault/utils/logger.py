"""
================================================================================
LOGGER - Unified Logging Configuration
================================================================================

Centralized logging infrastructure for all application contexts.

Logging Contexts:
    - 'cli' - Command-line interface operations
    - 'test' - Unit and integration tests
    - 'imported' - Library/module imports (minimal logging)

Log Destinations:
    1. File Logs - outputs/logs/{timestamp}.{context}.log
    2. Console Output - stdout
    3. Rotating Backups - 5MB max per file, 5 backup files

Log Format:
    {timestamp} {level} [{context}]: {message}
    Example: 2025-12-16 10:30:45 INFO [cli]: [EXPORT] Sealed 4 transactions

Features:
    - Context-aware record stamping
    - Rotating file handlers (prevents disk space issues)
    - UTF-8 encoding support (international characters)
    - Graceful fallback if log directory unavailable

Usage:
    from transaction_vault.utils.logger import set_run_context, logger

    set_run_context('cli')
    logger.info('[EXPORT] Starting export')

Never log passphrases or derived keys.

================================================================================
"""

import sys
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "transaction_vault"

logger = logging.getLogger(LOGGER_NAME)
logger.setLevel(logging.INFO)

# Global run context state
_RUN_CONTEXT = 'imported'

LOG_FORMAT = "%(asctime)s %(levelname)s [%(run_context)s]: %(message)s"


class RunContextFilter(logging.Filter):
    """
    Logging filter that adds run context to all log records
    Allows distinguishing between different execution contexts
    """

    def filter(self, record):
        record.run_context = _RUN_CONTEXT
        return True


def _level_from_name(level_name):
    level = logging.getLevelName(str(level_name).upper())
    return level if isinstance(level, int) else logging.INFO


def set_run_context(context: str, level: str = 'INFO', log_to_file: bool = True):
    """
    Set the execution context for logging

    Args:
        context: String identifier ('cli', 'test', etc)
        level: Log level name applied to logger and handlers
        log_to_file: Attach a rotating file handler under LOG_DIR
    """
    global _RUN_CONTEXT
    _RUN_CONTEXT = context
    numeric_level = _level_from_name(level)
    logger.setLevel(numeric_level)

    # Clear existing handlers
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    if log_to_file:
        try:
            from transaction_vault.utils.constants import LOG_DIR

            LOG_DIR.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            log_file = LOG_DIR / f"{timestamp}.{context}.log"

            file_handler = RotatingFileHandler(
                str(log_file),
                maxBytes=5_000_000,  # 5MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            file_handler.addFilter(RunContextFilter())
            logger.addHandler(file_handler)
        except OSError as e:
            # Console logging still works without a writable log dir
            sys.stderr.write(f"Log file unavailable: {e}\n")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler.addFilter(RunContextFilter())
    logger.addHandler(console_handler)


def get_run_context() -> str:
    return _RUN_CONTEXT


def setup_logging(context: str = 'imported', level: str = 'INFO', log_to_file: bool = True):
    """
    Initialize logging for the application

    Args:
        context: Execution context identifier
        level: Log level name
        log_to_file: Whether to write a rotating log file
    """
    set_run_context(context, level=level, log_to_file=log_to_file)
    return logger

"""
Logging configuration for Gitignore Guard.

Provides environment-aware logging that:
- Outputs JSON on stderr in Docker environments
- Provides human-readable output for local development
- Supports log rotation for file-based logging
- Includes custom TRACE level for per-path resolution detail
"""

import sys
import logging
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Any

# Define TRACE level (lower number = more detailed)
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)


logging.Logger.trace = trace


class DockerFormatter(logging.Formatter):
    """JSON formatter optimized for container logs"""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON for container environments"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        # Add any extra fields
        if hasattr(record, 'extra'):
            log_data.update(record.extra)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _resolve_level(level_str: str) -> int:
    if level_str.upper() == 'TRACE':
        return TRACE_LEVEL
    return getattr(logging, level_str.upper(), logging.INFO)


# Rotating log file limits
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 3

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _in_docker() -> bool:
    return (
        os.path.exists('/.dockerenv') or
        os.environ.get('DOCKER_CONTAINER', '').lower() == 'true'
    )


def configure_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging based on environment.

    Args:
        log_level: Override log level (defaults to IGNORE_GUARD_LOG_LEVEL, LOG_LEVEL or INFO)
        log_file: Path to log file (only used when not logging to stderr)
    """
    level_str = (
        log_level
        or os.environ.get('IGNORE_GUARD_LOG_LEVEL')
        or os.environ.get('LOG_LEVEL', 'INFO')
    )
    level = _resolve_level(level_str)
    in_docker = _in_docker()

    root_logger = logging.getLogger()
    root_logger.handlers = []

    if in_docker or os.environ.get('LOG_TO_STDERR', '').lower() == 'true':
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(DockerFormatter() if in_docker else logging.Formatter(LOG_FORMAT))
    else:
        if log_file:
            log_path = Path(log_file)
        else:
            log_dir = Path.home() / '.ignore-guard' / 'logs'
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / 'ignore-guard.log'
        handler = RotatingFileHandler(
            str(log_path),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        # Console handler only surfaces warnings; the file keeps the detail
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        console_handler.setLevel(max(level, logging.WARNING))
        root_logger.addHandler(console_handler)

    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    logging.getLogger('watchdog').setLevel(logging.WARNING)

    logging.getLogger('ignore-guard').debug(
        f"Logging configured - Level: {level_str.upper()}, Docker: {in_docker}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (e.g., logging.INFO)
        message: Log message
        **context: Additional fields to include in structured logs
    """
    extra = {'extra': context} if context else {}
    logger.log(level, message, extra=extra)

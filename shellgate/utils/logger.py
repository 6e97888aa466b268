"""
Logging configuration for the Shell Gateway.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import json
import logging
import os
import re
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from ..constants import LOG_DIR_PERMISSIONS, get_log_dir


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset_color = self.COLORS['RESET']

        # Color a copy so file handlers sharing the record stay plain
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{log_color}{record.levelname}{reset_color}"

        return super().format(record)


FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_LOG_FORMAT = '%(levelname)s - %(name)s - %(message)s'

# Global configuration for logging with thread synchronization
_global_config: Optional[Dict[str, Any]] = None
_log_file_path: Optional[str] = None
_security_log_path: Optional[str] = None
_logger_instances: Dict[str, logging.Logger] = {}
_global_state_lock = threading.RLock()

# Rate limiting for security events
_security_event_counts: Dict[str, Dict[str, Any]] = {}  # event_type -> {count, first_time, last_time}
_security_rate_limit_window = 60  # seconds
_security_rate_limit_max = 10  # max events per window


def _is_debug_enabled() -> bool:
    if not _global_config:
        return False
    return bool(_global_config.get('verbose_logging') or _global_config.get('debug_mode'))


def _console_level(default: int) -> int:
    # 'console_level' lets the CLI keep INFO records off stderr
    if _global_config and _global_config.get('console_level'):
        return logging.getLevelName(str(_global_config['console_level']).upper())
    return default


def _make_file_handler(path: str, level: int) -> logging.FileHandler:
    file_handler = logging.FileHandler(path)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    return file_handler


def set_global_config(config: Dict[str, Any]) -> None:
    """
    Set global configuration for logging with thread safety.

    File logging is enabled when ``log_file`` is set or when debug/verbose
    logging is requested; a JSON-lines security log is written next to it.

    Args:
        config: Configuration dictionary
    """
    global _global_config, _log_file_path, _security_log_path
    with _global_state_lock:
        _global_config = dict(config)

        log_file = config.get('log_file')
        if not log_file and (config.get('verbose_logging') or config.get('debug_mode')):
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            log_file = str(get_log_dir() / f'shellgate_{timestamp}.log')

        if log_file:
            log_dir = Path(log_file).parent
            try:
                log_dir.mkdir(parents=True, exist_ok=True)
                os.chmod(log_dir, LOG_DIR_PERMISSIONS)
                _log_file_path = str(log_file)
                _security_log_path = str(log_dir / 'security.log')
            except OSError:
                # Fall back to console-only logging
                _log_file_path = None
                _security_log_path = None
        else:
            _log_file_path = None
            _security_log_path = None

        _reconfigure_all_loggers()


def get_current_log_file() -> Optional[str]:
    """Get the current log file path if file logging is active."""
    with _global_state_lock:
        return _log_file_path


def _reconfigure_all_loggers() -> None:
    """Reconfigure all cached loggers with the current settings."""
    # Called from set_global_config, which already holds the lock
    level = logging.DEBUG if _is_debug_enabled() else logging.INFO

    for logger in _logger_instances.values():
        logger.setLevel(level)
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()
            else:
                handler.setLevel(_console_level(level))

        if _log_file_path:
            try:
                logger.addHandler(_make_file_handler(_log_file_path, level))
            except OSError:
                pass


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger instance with thread safety.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    with _global_state_lock:
        if name in _logger_instances:
            return _logger_instances[name]

        level = logging.DEBUG if _is_debug_enabled() else logging.INFO

        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers.clear()

        # Console handler (use stderr for logs)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_console_level(level))
        console_handler.setFormatter(ColoredFormatter(CONSOLE_LOG_FORMAT))
        logger.addHandler(console_handler)

        if _log_file_path:
            try:
                logger.addHandler(_make_file_handler(_log_file_path, level))
            except OSError:
                # Don't log this error to avoid recursion
                pass

        logger.propagate = False
        _logger_instances[name] = logger

        return logger


# Patterns redacted from every log line
_SENSITIVE_PATTERNS = [
    # Home directories
    (r'/home/[^/\s]+', '/home/[USER]'),
    (r'/Users/[^/\s]+', '/Users/[USER]'),

    # URLs with authentication
    (r'https?://[^:/\s]+:[^@/\s]+@', 'https://[CREDENTIALS]@'),

    # Credentials and secrets
    (r'(?i)password["\s]*[:=]["\s]*[^\s"\']+', 'password="[REDACTED]"'),
    (r'(?i)token["\s]*[:=]["\s]*[^\s"\']+', 'token="[REDACTED]"'),
    (r'(?i)api_?key["\s]*[:=]["\s]*[^\s"\']+', 'api_key="[REDACTED]"'),
    (r'(?i)secret["\s]*[:=]["\s]*[^\s"\']+', 'secret="[REDACTED]"'),
    (r'(?i)bearer["\s]+[^\s"\']+', 'bearer [REDACTED]'),

    # Cryptographic material
    (r'-----BEGIN [^-]+-----[^-]+-----END [^-]+-----', '[CERTIFICATE/KEY]'),
    (r'\beyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]*\.[A-Za-z0-9_-]*\b', '[JWT_TOKEN]'),
]

# Extra patterns applied to debug output, which may carry full command lines
_DEBUG_PATTERNS = [
    (r'(?i)environment:\s*\{[^}]*\}', 'environment: {[ENV_REDACTED]}'),
    (r'(?i)env_vars?:\s*\{[^}]*\}', 'env_vars: {[ENV_REDACTED]}'),
]


def sanitize_log_message(message: str, debug_level: bool = False) -> str:
    """
    Redact credentials and user paths from a log message.

    Args:
        message: Original log message
        debug_level: If True, also apply the debug-only patterns

    Returns:
        Sanitized log message
    """
    if not isinstance(message, str):
        message = str(message)

    patterns = list(_SENSITIVE_PATTERNS)
    if debug_level:
        patterns.extend(_DEBUG_PATTERNS)

    sanitized = message
    for pattern, replacement in patterns:
        sanitized = re.sub(pattern, replacement, sanitized)

    # Limit message length to prevent log flooding
    max_length = 2000 if debug_level else 1000
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + '... [TRUNCATED]'

    # Control characters (including newlines smuggled in through arguments)
    sanitized = re.sub(r'[\x00-\x08\x0A-\x0D\x0E-\x1F\x7F]', '[CTRL]', sanitized)

    return sanitized


def sanitize_debug_message(message: str) -> str:
    """Sanitize a message destined for debug output."""
    return sanitize_log_message(message, debug_level=True)


def reset_security_rate_limits() -> None:
    """Forget all security event counts."""
    with _global_state_lock:
        _security_event_counts.clear()


def log_security_event(event_type: str, details: Optional[dict[str, Any]] = None, severity: str = "warning") -> None:
    """
    Log a security event with rate limiting.

    Args:
        event_type: Type of security event
        details: Event details (will be sanitized)
        severity: Log severity level
    """
    with _global_state_lock:
        current_time = datetime.now()
        event_info = _security_event_counts.get(event_type, {})

        if event_info:
            time_since_first = (current_time - event_info['first_time']).total_seconds()

            # Reset window if expired
            if time_since_first > _security_rate_limit_window:
                event_info = {'count': 0, 'first_time': current_time, 'last_time': current_time}

            if event_info['count'] >= _security_rate_limit_max:
                if not event_info.get('rate_limit_logged', False):
                    get_logger("security").warning(
                        f"RATE_LIMIT: Suppressing further {event_type} events for {_security_rate_limit_window}s"
                    )
                    event_info['rate_limit_logged'] = True
                return
        else:
            event_info = {'count': 0, 'first_time': current_time, 'last_time': current_time}

        event_info['count'] += 1
        event_info['last_time'] = current_time
        _security_event_counts[event_type] = event_info
        security_log_path = _security_log_path

    security_logger = get_logger("security")

    context = {
        'timestamp': current_time.isoformat(),
        'event_type': event_type,
        'severity': severity,
        'pid': os.getpid(),
        'uid': os.getuid() if hasattr(os, 'getuid') else 'N/A',
    }

    current_thread = threading.current_thread()
    if current_thread.name != 'MainThread':
        context['thread'] = current_thread.name

    sanitized_details = {
        sanitize_log_message(str(key)): sanitize_log_message(str(value))
        for key, value in (details or {}).items()
    }

    log_msg = f"SECURITY_EVENT: {event_type}"
    if sanitized_details:
        detail_str = ", ".join(f"{k}={v}" for k, v in sanitized_details.items())
        log_msg += f" - {detail_str}"
    log_msg += f" [pid={context['pid']}, uid={context['uid']}]"

    if severity == "critical":
        security_logger.critical(log_msg)
    elif severity == "error":
        security_logger.error(log_msg)
    elif severity == "warning":
        security_logger.warning(log_msg)
    else:
        security_logger.info(log_msg)

    if security_log_path:
        try:
            with open(security_log_path, 'a', encoding='utf-8') as f:
                security_entry = {
                    **context,
                    'message': log_msg,
                    'details': sanitized_details
                }
                f.write(json.dumps(security_entry) + '\n')
        except OSError as e:
            security_logger.debug(f"Failed to write to security log: {e}")

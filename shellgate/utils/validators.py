"""
Input validation and security utilities.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import re
from typing import Any, Dict, Iterable, Optional, Tuple, Union
from urllib.parse import urlparse

from ..allowlist import base_command, is_allowlisted
from ..constants import DANGEROUS_CHARS_PATTERN, PACKAGE_NAME_PATTERN
from .logger import get_logger

logger = get_logger(__name__)

DANGEROUS_CHARS = re.compile(DANGEROUS_CHARS_PATTERN)
_PACKAGE_NAME_RE = re.compile(PACKAGE_NAME_PATTERN)


def contains_dangerous_characters(value: Optional[str]) -> bool:
    """
    Check a string for shell metacharacters.

    Args:
        value: String to check; None is treated as safe

    Returns:
        True if any dangerous character is present
    """
    if value is None:
        return False
    return DANGEROUS_CHARS.search(value) is not None


def is_command_allowed(command: Optional[str], privileged: bool = False) -> bool:
    """
    Validate that a command string is safe to execute.

    The first whitespace-delimited token must be allowlisted and the whole
    string must be free of shell metacharacters.

    Args:
        command: Command string as received from the caller
        privileged: Whether the command is headed for ``su``

    Returns:
        True if the command may run
    """
    if not command:
        return False

    program = base_command(command)
    if not program or not is_allowlisted(program, privileged=privileged):
        return False

    if contains_dangerous_characters(command):
        return False

    return True


def are_arguments_safe(args: Optional[Iterable[Optional[str]]]) -> bool:
    """
    Validate arguments for dangerous characters.

    Args:
        args: Argument list; None entries are skipped

    Returns:
        True if no argument carries a shell metacharacter
    """
    if not args:
        return True
    return not any(contains_dangerous_characters(arg) for arg in args)


def validate_package_name(name: Optional[str]) -> bool:
    """
    Validate a package name for the install policy.

    Args:
        name: Package name to validate

    Returns:
        True if the name matches ``^[A-Za-z0-9_-]+$``
    """
    if not name:
        return False
    # fullmatch: '$' alone would accept a trailing newline
    return _PACKAGE_NAME_RE.fullmatch(name) is not None


def has_path_traversal(path: Optional[str]) -> bool:
    """
    Check a raw, unresolved path for a literal '..'.

    Args:
        path: Path exactly as supplied by the caller

    Returns:
        True if the path contains '..'
    """
    return bool(path) and '..' in path


def validate_download_url(url: Optional[str]) -> bool:
    """
    Validate a download URL: HTTPS only, with a hostname.

    Args:
        url: URL to validate

    Returns:
        True if the URL may be fetched
    """
    if not url or not url.startswith('https://'):
        return False

    try:
        parsed = urlparse(url)
    except ValueError as e:
        logger.warning(f"Failed to parse URL {url}: {e}")
        return False

    if parsed.scheme != 'https' or not parsed.hostname:
        return False

    if re.search(r'[<>"\'\\\x00-\x1f\x7f]', parsed.hostname):
        logger.warning(f"Suspicious characters in hostname: {parsed.hostname}")
        return False

    return True


# Allowed configuration keys and their types
CONFIG_KEY_TYPES: Dict[str, Union[type, Tuple[type, ...]]] = {
    'root_directory': (str, type(None)),
    'path_resolution_mode': str,
    'download_timeout': int,
    'max_read_size': int,
    'debug_mode': bool,
    'verbose_logging': bool,
    'log_file': (str, type(None)),
    'terminal_type': str,
    'language': str,
    'linux_user': str,
}


def validate_config_json(data: Dict[str, Any]) -> bool:
    """
    Validate configuration JSON structure and content.

    Args:
        data: Parsed JSON data to validate

    Returns:
        True if data is valid

    Raises:
        ValueError: If data structure is invalid or unsafe
    """
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a JSON object")

    for key in data.keys():
        if key not in CONFIG_KEY_TYPES:
            logger.warning(f"Unknown configuration key ignored: {key}")

    for key, expected_type in CONFIG_KEY_TYPES.items():
        if key not in data:
            continue
        value = data[key]
        # bool is an int subclass
        if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
            expected_name = getattr(expected_type, '__name__', str(expected_type))
            raise ValueError(
                f"Invalid type for '{key}': expected {expected_name}, got {type(value).__name__}")

        if key == 'path_resolution_mode' and value not in ('strict', 'lenient'):
            raise ValueError(f"Invalid path resolution mode: {value}")

        elif key == 'download_timeout' and not 0 < value <= 300:
            raise ValueError(f"'{key}' must be between 1 and 300 seconds")

        elif key == 'max_read_size' and not 0 < value <= 100 * 1024 * 1024:
            raise ValueError(f"'{key}' must be between 1 byte and 100MB")

        elif key == 'linux_user' and not validate_package_name(value):
            raise ValueError(f"Invalid user name: {value}")

        elif key in ('terminal_type', 'language') and (not value or contains_dangerous_characters(value)):
            raise ValueError(f"Invalid value for '{key}': {value}")

        elif key in ('root_directory', 'log_file') and value is not None and '\x00' in value:
            raise ValueError(f"Null byte in '{key}'")

    return True


def sanitize_config_json(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keep only known configuration keys.

    Args:
        data: Validated configuration data

    Returns:
        Sanitized configuration data
    """
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a JSON object")
    return {key: data[key] for key in CONFIG_KEY_TYPES if key in data}

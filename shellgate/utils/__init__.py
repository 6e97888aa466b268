"""
Utils package for the Shell Gateway.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from .logger import get_logger, set_global_config, log_security_event
from .validators import (
    are_arguments_safe,
    contains_dangerous_characters,
    is_command_allowed,
    validate_download_url,
    validate_package_name,
)

__all__ = [
    "get_logger",
    "set_global_config",
    "log_security_event",
    "are_arguments_safe",
    "contains_dangerous_characters",
    "is_command_allowed",
    "validate_download_url",
    "validate_package_name",
]

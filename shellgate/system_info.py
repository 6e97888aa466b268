"""
Storage and host information for the UI layer.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import psutil

from .constants import APP_VERSION
from .models import ShellSession
from .utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StorageVolume:
    """Usage figures for one filesystem, in bytes."""
    path: str
    total: int
    free: int
    used: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"path": self.path, "total": self.total, "free": self.free, "used": self.used}


@dataclass(frozen=True)
class StorageInfo:
    """Storage behind the sandbox root and the session home."""
    internal: Optional[StorageVolume] = None
    home: Optional[StorageVolume] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data: Dict[str, Any] = {}
        if self.internal is not None:
            data["internal"] = self.internal.to_dict()
        if self.home is not None:
            data["home"] = self.home.to_dict()
        if self.error:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class SystemInfo:
    """Host, runtime and session details."""
    system: str
    release: str
    machine: str
    hostname: str
    python_version: str
    cpu_count: Optional[int]
    total_memory: int
    available_memory: int
    memory_percent: float
    home_directory: str
    current_directory: str
    app_version: str = APP_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "system": self.system,
            "release": self.release,
            "machine": self.machine,
            "hostname": self.hostname,
            "pythonVersion": self.python_version,
            "cpuCount": self.cpu_count,
            "totalMemory": self.total_memory,
            "availableMemory": self.available_memory,
            "memoryPercent": self.memory_percent,
            "homeDirectory": self.home_directory,
            "currentDirectory": self.current_directory,
            "appVersion": self.app_version,
        }


def _volume(path: str) -> StorageVolume:
    usage = psutil.disk_usage(path)
    return StorageVolume(path=os.path.abspath(path), total=usage.total, free=usage.free, used=usage.used)


def get_storage_info(session: ShellSession, root: Union[str, Path]) -> StorageInfo:
    """
    Report disk usage for the sandbox root and the session's home.

    Args:
        session: Current session
        root: App-private data directory

    Returns:
        StorageInfo; a volume is omitted when its path cannot be queried
    """
    internal = home = None
    errors = []

    try:
        internal = _volume(str(root))
    except OSError as e:
        logger.warning(f"Could not read storage for {root}: {e}")
        errors.append(f"Failed to get storage info: {e}")

    try:
        home = _volume(session.home)
    except OSError as e:
        logger.warning(f"Could not read storage for {session.home}: {e}")
        errors.append(f"Failed to get storage info: {e}")

    return StorageInfo(internal=internal, home=home, error="; ".join(errors) or None)


def get_system_info(session: ShellSession) -> SystemInfo:
    """
    Describe the host and the session.

    Args:
        session: Current session

    Returns:
        SystemInfo instance
    """
    memory = psutil.virtual_memory()
    uname = platform.uname()
    return SystemInfo(
        system=uname.system,
        release=uname.release,
        machine=uname.machine,
        hostname=uname.node,
        python_version=platform.python_version(),
        cpu_count=psutil.cpu_count(),
        total_memory=memory.total,
        available_memory=memory.available,
        memory_percent=memory.percent,
        home_directory=session.home,
        current_directory=session.cwd,
    )

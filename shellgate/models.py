"""
Data models for the Shell Gateway.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class CommandRequest:
    """A command as requested by the caller, before validation."""
    program: str
    arguments: Tuple[str, ...] = ()
    elevated: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], elevated: bool = False) -> 'CommandRequest':
        """Create from a request mapping with ``command`` and ``args`` keys."""
        args = data.get("args") or []
        return cls(
            program=data.get("command", ""),
            arguments=tuple(args),
            elevated=elevated
        )


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one command execution or policy decision."""
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        """True if the process exited with status zero."""
        return self.exit_code == 0

    @classmethod
    def failure(cls, message: str, exit_code: int = 1) -> 'ExecutionResult':
        """Build a result for a policy violation or spawn failure."""
        return cls(stdout="", stderr=message, exit_code=exit_code)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the shape the UI layer renders."""
        return {
            "output": self.stdout,
            "error": self.stderr,
            "exitCode": self.exit_code
        }


@dataclass(frozen=True)
class ShellSession:
    """
    Working directory and home directory for one caller.

    Sessions are values: changing directory produces a new session rather
    than mutating shared state.
    """
    cwd: str
    home: str

    def with_cwd(self, cwd: str) -> 'ShellSession':
        """Return a copy with a different working directory."""
        return replace(self, cwd=cwd)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"path": self.cwd, "home": self.home}


@dataclass(frozen=True)
class PrivilegeStatus:
    """Result of the root-access probe."""
    has_privilege: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"hasPrivilege": self.has_privilege}


@dataclass(frozen=True)
class DirectoryChange:
    """Successful directory change and the session it produced."""
    path: str
    session: ShellSession

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"path": self.path}


@dataclass
class FileInfo:
    """One entry of a directory listing."""
    name: str
    path: str
    is_directory: bool
    is_file: bool
    size: int
    modified: str
    readable: bool
    writable: bool
    executable: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "path": self.path,
            "isDirectory": self.is_directory,
            "isFile": self.is_file,
            "size": self.size,
            "modified": self.modified,
            "readable": self.readable,
            "writable": self.writable,
            "executable": self.executable
        }


@dataclass
class DirectoryListing:
    """Contents of a directory, or the reason it could not be listed."""
    path: str
    files: List[FileInfo] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data: Dict[str, Any] = {
            "path": self.path,
            "files": [f.to_dict() for f in self.files],
            "count": len(self.files)
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class FileOperationResult:
    """Outcome of a filesystem operation."""
    success: bool
    path: str = ""
    error: str = ""
    content: Optional[str] = None
    size: Optional[int] = None
    destination: Optional[str] = None

    @classmethod
    def failure(cls, message: str, path: str = "") -> 'FileOperationResult':
        """Build a failed result."""
        return cls(success=False, path=path, error=message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting fields that do not apply."""
        data: Dict[str, Any] = {"success": self.success}
        if self.destination is not None:
            data["source"] = self.path
            data["destination"] = self.destination
        else:
            data["path"] = self.path
        if self.content is not None:
            data["content"] = self.content
        if self.size is not None:
            data["size"] = self.size
        if self.error:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class DownloadResult:
    """Outcome of an HTTPS download."""
    result: ExecutionResult
    path: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = self.result.to_dict()
        if self.path is not None:
            data["path"] = self.path
            data["size"] = self.size
        return data


@dataclass(frozen=True)
class EnvironmentSetup:
    """Outcome of laying out the Linux directory tree."""
    result: ExecutionResult
    session: Optional[ShellSession] = None
    linux_root: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = self.result.to_dict()
        if self.linux_root is not None and self.session is not None:
            data["linuxRoot"] = self.linux_root
            data["home"] = self.session.home
        return data


@dataclass(frozen=True)
class Ok:
    """A request that was processed; the value may still describe a failure."""
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        """Convert the carried value to dictionary."""
        if hasattr(self.value, "to_dict"):
            return self.value.to_dict()
        return dict(self.value)


@dataclass(frozen=True)
class Rejected:
    """A malformed request, refused before any processing."""
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"rejected": True, "reason": self.reason}


Response = Union[Ok, Rejected]

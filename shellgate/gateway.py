"""
Gateway facade: the request-level operations the UI layer calls.

Every operation takes a request mapping (and the caller's session where it
matters) and returns ``Ok`` or ``Rejected``. ``Rejected`` means a required
field was missing or a field had the wrong type; every policy violation or
execution failure comes back inside ``Ok`` with a non-zero exit code or
``success: false``.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from typing import Any, Mapping, Optional

from .command import validate_command
from .config import Config
from .downloader import Downloader
from .exceptions import CommandRejectedError, RequestMalformedError
from .executor import ExecutionEngine
from .file_ops import FileOperations
from .models import (
    CommandRequest,
    EnvironmentSetup,
    ExecutionResult,
    Ok,
    PrivilegeStatus,
    Rejected,
    Response,
    ShellSession,
)
from .package_installer import PackageInstaller
from .session import create_session, setup_linux_environment
from .system_info import get_storage_info, get_system_info
from .utils.logger import get_logger
from .utils.validators import validate_package_name

logger = get_logger(__name__)

Request = Mapping[str, Any]


def _require(request: Request, *fields: str, message: Optional[str] = None) -> None:
    """Raise RequestMalformedError if any field is absent or empty."""
    for name in fields:
        value = request.get(name)
        if value is None or value == "":
            raise RequestMalformedError(name, message or "")


def _require_text(request: Request, *fields: str, message: str) -> None:
    """Raise RequestMalformedError if any present field is not a string."""
    for name in fields:
        value = request.get(name)
        if value is not None and not isinstance(value, str):
            raise RequestMalformedError(name, message)


class ShellGateway:
    """Transport-independent entry point for every shell operation."""

    def __init__(self,
                 config: Optional[Config] = None,
                 engine: Optional[ExecutionEngine] = None,
                 downloader: Optional[Downloader] = None) -> None:
        """
        Initialize the gateway.

        Args:
            config: Configuration; loaded from the default location if omitted
            engine: Execution engine
            downloader: Download helper
        """
        self.config = config or Config()
        mode = self.config.get_path_resolution_mode()

        self.root = self.config.get_root_directory()
        self.engine = engine or ExecutionEngine(
            term=self.config.get("terminal_type"),
            lang=self.config.get("language")
        )
        self.installer = PackageInstaller(self.engine)
        self.files = FileOperations(mode=mode, max_read_size=self.config.get_max_read_size())
        self.downloader = downloader or Downloader(timeout=self.config.get_download_timeout(), mode=mode)

    def create_session(self) -> ShellSession:
        """Create the initial session under the configured root."""
        return create_session(self.root)

    # Command execution

    def _run_command(self, request: Request, session: ShellSession, elevated: bool) -> Response:
        try:
            _require(request, "command", message="Command is required")
            _require_text(request, "command", message="Command must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))

        args = request.get("args")
        if args is not None and not isinstance(args, (list, tuple)):
            return Rejected("Arguments must be a list")
        if args and not all(arg is None or isinstance(arg, str) for arg in args):
            return Rejected("Arguments must be strings")

        try:
            command = validate_command(CommandRequest.from_dict(dict(request), elevated=elevated))
        except CommandRejectedError as e:
            return Ok(ExecutionResult.failure(str(e)))

        return Ok(self.engine.execute(command, session))

    def execute(self, request: Request, session: ShellSession) -> Response:
        """
        Run an allowlisted command as the current user.

        Args:
            request: Mapping with ``command`` and optional ``args``
            session: Caller's session; sets cwd and HOME

        Returns:
            Ok(ExecutionResult) or Rejected
        """
        return self._run_command(request, session, elevated=False)

    def execute_elevated(self, request: Request, session: ShellSession) -> Response:
        """
        Run an allowlisted, privilege-capable command through ``su -c``.

        Args:
            request: Mapping with ``command`` and optional ``args``
            session: Caller's session

        Returns:
            Ok(ExecutionResult) or Rejected
        """
        return self._run_command(request, session, elevated=True)

    def install_package(self, request: Request) -> Response:
        """
        Install a package as root.

        Args:
            request: Mapping with ``packageName`` and optional ``source``

        Returns:
            Ok(ExecutionResult) or Rejected
        """
        try:
            _require(request, "packageName", message="Package name is required")
            _require_text(request, "packageName", "source", message="Package name and source must be strings")
        except RequestMalformedError as e:
            return Rejected(str(e))

        return Ok(self.installer.install_package(request["packageName"], request.get("source") or "auto"))

    def check_privileged_access(self) -> Response:
        """Probe for root access."""
        return Ok(PrivilegeStatus(self.engine.check_privileged_access()))

    # Navigation and files

    def change_directory(self, request: Request, session: ShellSession) -> Response:
        """
        Resolve a directory; on success the value carries the new session.

        Args:
            request: Mapping with ``path``
            session: Caller's session, left untouched

        Returns:
            Ok(DirectoryChange | FileOperationResult) or Rejected
        """
        try:
            _require(request, "path", message="Path is required")
            _require_text(request, "path", message="Path must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.change_directory(session, request["path"]))

    def get_current_directory(self, session: ShellSession) -> Response:
        """Report the session's working and home directories."""
        return Ok(session)

    def list_directory(self, request: Request, session: ShellSession) -> Response:
        """List a directory; ``path`` defaults to the working directory."""
        try:
            _require_text(request, "path", message="Path must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.list_directory(session, request.get("path")))

    def read_file(self, request: Request, session: ShellSession) -> Response:
        """Read a text file named by ``path``."""
        try:
            _require(request, "path", message="Path is required")
            _require_text(request, "path", message="Path must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.read_file(session, request["path"]))

    def write_file(self, request: Request, session: ShellSession) -> Response:
        """Write ``content`` to ``path``, appending if ``append`` is set."""
        try:
            _require(request, "path", message="Path is required")
            _require_text(request, "path", message="Path must be a string")
            _require_text(request, "content", message="Content must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.write_file(
            session,
            request["path"],
            content=request.get("content") or "",
            append=bool(request.get("append", False))
        ))

    def delete_file(self, request: Request, session: ShellSession) -> Response:
        """Delete ``path``; directories need ``recursive`` unless empty."""
        try:
            _require(request, "path", message="Path is required")
            _require_text(request, "path", message="Path must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.delete(session, request["path"], recursive=bool(request.get("recursive", False))))

    def create_directory(self, request: Request, session: ShellSession) -> Response:
        """Create ``path``, with parents unless ``recursive`` is false."""
        try:
            _require(request, "path", message="Path is required")
            _require_text(request, "path", message="Path must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.create_directory(
            session, request["path"], recursive=bool(request.get("recursive", True))
        ))

    def copy_file(self, request: Request, session: ShellSession) -> Response:
        """Copy ``source`` to ``destination``."""
        try:
            _require(request, "source", "destination", message="Source and destination are required")
            _require_text(request, "source", "destination", message="Source and destination must be strings")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.copy_file(session, request["source"], request["destination"]))

    def move_file(self, request: Request, session: ShellSession) -> Response:
        """Move ``source`` to ``destination``."""
        try:
            _require(request, "source", "destination", message="Source and destination are required")
            _require_text(request, "source", "destination", message="Source and destination must be strings")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.files.move_file(session, request["source"], request["destination"]))

    def download_file(self, request: Request, session: ShellSession) -> Response:
        """
        Download ``url`` over HTTPS to ``destination``.

        Args:
            request: Mapping with ``url`` and ``destination``
            session: Caller's session

        Returns:
            Ok(DownloadResult) or Rejected
        """
        try:
            _require(request, "url", "destination", message="URL and destination are required")
            _require_text(request, "url", "destination", message="URL and destination must be strings")
        except RequestMalformedError as e:
            return Rejected(str(e))
        return Ok(self.downloader.download(session, request["url"], request["destination"]))

    # Environment

    def setup_linux_environment(self, request: Optional[Request] = None) -> Response:
        """Lay out the Linux tree; the value carries a session rooted in it."""
        request = request or {}
        try:
            _require_text(request, "user", message="User must be a string")
        except RequestMalformedError as e:
            return Rejected(str(e))

        user = request.get("user") or self.config.get("linux_user")
        if not validate_package_name(user):
            return Ok(EnvironmentSetup(ExecutionResult.failure(f"Invalid user name: {user}")))
        return Ok(setup_linux_environment(self.root, user=user))

    def get_storage_info(self, session: ShellSession) -> Response:
        """Disk usage for the root and the session home."""
        return Ok(get_storage_info(session, self.root))

    def get_system_info(self, session: ShellSession) -> Response:
        """Host and session details."""
        return Ok(get_system_info(session))

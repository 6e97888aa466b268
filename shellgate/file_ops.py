"""
Filesystem operations for the UI layer, all routed through the path guard.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import os
import shutil
from datetime import datetime
from typing import Optional, Tuple, Union

from .constants import MAX_READ_FILE_SIZE
from .exceptions import PathResolutionError, PathTraversalError
from .models import DirectoryChange, DirectoryListing, FileInfo, FileOperationResult, ShellSession
from .paths import PathResolutionMode, ensure_no_traversal, resolve_for_mutation, resolve_path
from .utils.logger import get_logger

logger = get_logger(__name__)

MODIFIED_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_info(path: str) -> FileInfo:
    stat_result = os.stat(path)
    return FileInfo(
        name=os.path.basename(path),
        path=os.path.abspath(path),
        is_directory=os.path.isdir(path),
        is_file=os.path.isfile(path),
        size=stat_result.st_size,
        modified=datetime.fromtimestamp(stat_result.st_mtime).strftime(MODIFIED_FORMAT),
        readable=os.access(path, os.R_OK),
        writable=os.access(path, os.W_OK),
        executable=os.access(path, os.X_OK)
    )


class FileOperations:
    """Plain I/O wrappers whose only security logic is the path guard."""

    def __init__(self,
                 mode: PathResolutionMode = PathResolutionMode.LENIENT,
                 max_read_size: int = MAX_READ_FILE_SIZE) -> None:
        """
        Initialize file operations.

        Args:
            mode: Path resolution mode
            max_read_size: Largest file read_file will return, in bytes
        """
        self.mode = mode
        self.max_read_size = max_read_size

    def list_directory(self, session: ShellSession, path: Optional[str] = None) -> Union[DirectoryListing, FileOperationResult]:
        """List a directory; a missing path is reported in the listing."""
        try:
            resolved = resolve_path(session, path, self.mode)
        except PathResolutionError as e:
            return FileOperationResult.failure(str(e), path or "")

        if not os.path.exists(resolved):
            return DirectoryListing(path=resolved, error=f"Directory not found: {resolved}")
        if not os.path.isdir(resolved):
            return DirectoryListing(path=resolved, error=f"Not a directory: {resolved}")

        try:
            files = []
            for name in sorted(os.listdir(resolved)):
                try:
                    files.append(_file_info(os.path.join(resolved, name)))
                except (OSError, ValueError) as e:
                    # Entry vanished or is a dangling link
                    logger.debug(f"Skipping {name}: {e}")
            return DirectoryListing(path=resolved, files=files)
        except (OSError, ValueError) as e:
            return FileOperationResult.failure(f"Failed to list directory: {e}", resolved)

    def read_file(self, session: ShellSession, path: str) -> FileOperationResult:
        """Read a UTF-8 text file of at most ``max_read_size`` bytes."""
        try:
            resolved = resolve_path(session, path, self.mode)
        except PathResolutionError as e:
            return FileOperationResult.failure(str(e), path)

        if not os.path.exists(resolved):
            return FileOperationResult.failure(f"File not found: {resolved}", resolved)
        if not os.access(resolved, os.R_OK):
            return FileOperationResult.failure(f"Cannot read file: {resolved}", resolved)

        try:
            size = os.path.getsize(resolved)
            if size > self.max_read_size:
                return FileOperationResult.failure(
                    f"File too large (max {self.max_read_size} bytes)", resolved
                )
            with open(resolved, "r", encoding="utf-8", errors="replace") as f:
                content = f.read()
        except (OSError, ValueError) as e:
            return FileOperationResult.failure(f"Failed to read file: {e}", resolved)

        return FileOperationResult(success=True, path=resolved, content=content, size=size)

    def write_file(self, session: ShellSession, path: str, content: str = "", append: bool = False) -> FileOperationResult:
        """Write or append text, creating parent directories as needed."""
        try:
            resolved = resolve_for_mutation(session, path, self.mode)
        except (PathTraversalError, PathResolutionError) as e:
            return FileOperationResult.failure(str(e), path)

        try:
            parent = os.path.dirname(resolved)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(resolved, "a" if append else "w", encoding="utf-8") as f:
                f.write(content)
            size = os.path.getsize(resolved)
        except (OSError, ValueError) as e:
            return FileOperationResult.failure(f"Failed to write file: {e}", resolved)

        logger.debug(f"Wrote {size} bytes to {resolved}")
        return FileOperationResult(success=True, path=resolved, size=size)

    def delete(self, session: ShellSession, path: str, recursive: bool = False) -> FileOperationResult:
        """Delete a file, an empty directory, or a tree when ``recursive``."""
        try:
            resolved = resolve_for_mutation(session, path, self.mode)
        except (PathTraversalError, PathResolutionError) as e:
            return FileOperationResult.failure(str(e), path)

        if not os.path.lexists(resolved):
            return FileOperationResult.failure(f"File not found: {resolved}", resolved)

        try:
            if os.path.isdir(resolved) and not os.path.islink(resolved):
                if recursive:
                    shutil.rmtree(resolved)
                else:
                    os.rmdir(resolved)
            else:
                os.unlink(resolved)
        except (OSError, ValueError) as e:
            return FileOperationResult.failure(f"Failed to delete: {e}", resolved)

        logger.info(f"Deleted {resolved}")
        return FileOperationResult(success=True, path=resolved)

    def create_directory(self, session: ShellSession, path: str, recursive: bool = True) -> FileOperationResult:
        """Create a directory; an existing directory counts as success."""
        try:
            resolved = resolve_for_mutation(session, path, self.mode)
        except (PathTraversalError, PathResolutionError) as e:
            return FileOperationResult.failure(str(e), path)

        try:
            if recursive:
                os.makedirs(resolved, exist_ok=True)
            elif not os.path.isdir(resolved):
                os.mkdir(resolved)
        except (OSError, ValueError) as e:
            return FileOperationResult.failure(f"Failed to create directory: {e}", resolved)

        return FileOperationResult(success=os.path.isdir(resolved), path=resolved)

    def _resolve_pair(self, session: ShellSession, source: str, destination: str) -> Tuple[str, str]:
        # Both raw paths are checked before either is resolved
        ensure_no_traversal(source)
        ensure_no_traversal(destination)
        return (resolve_path(session, source, self.mode),
                resolve_path(session, destination, self.mode))

    def copy_file(self, session: ShellSession, source: str, destination: str) -> FileOperationResult:
        """Copy a file's contents, creating the destination's parents."""
        try:
            resolved_source, resolved_dest = self._resolve_pair(session, source, destination)
        except (PathTraversalError, PathResolutionError) as e:
            return FileOperationResult(success=False, path=source, destination=destination, error=str(e))

        if not os.path.exists(resolved_source):
            return FileOperationResult(success=False, path=resolved_source, destination=resolved_dest,
                                       error=f"Source file not found: {resolved_source}")

        try:
            parent = os.path.dirname(resolved_dest)
            if parent:
                os.makedirs(parent, exist_ok=True)
            shutil.copyfile(resolved_source, resolved_dest)
        except (OSError, ValueError) as e:
            return FileOperationResult(success=False, path=resolved_source, destination=resolved_dest,
                                       error=f"Failed to copy file: {e}")

        return FileOperationResult(success=True, path=resolved_source, destination=resolved_dest)

    def move_file(self, session: ShellSession, source: str, destination: str) -> FileOperationResult:
        """Move or rename a file or directory."""
        try:
            resolved_source, resolved_dest = self._resolve_pair(session, source, destination)
        except (PathTraversalError, PathResolutionError) as e:
            return FileOperationResult(success=False, path=source, destination=destination, error=str(e))

        if not os.path.lexists(resolved_source):
            return FileOperationResult(success=False, path=resolved_source, destination=resolved_dest,
                                       error=f"Source file not found: {resolved_source}")

        try:
            parent = os.path.dirname(resolved_dest)
            if parent:
                os.makedirs(parent, exist_ok=True)
            shutil.move(resolved_source, resolved_dest)
        except (OSError, ValueError) as e:
            return FileOperationResult(success=False, path=resolved_source, destination=resolved_dest,
                                       error=f"Failed to move file: {e}")

        return FileOperationResult(success=True, path=resolved_source, destination=resolved_dest)

    def change_directory(self, session: ShellSession, path: str) -> Union[DirectoryChange, FileOperationResult]:
        """
        Resolve a path and return a session positioned there.

        Args:
            session: Current session, left untouched
            path: Target directory

        Returns:
            DirectoryChange carrying the new session, or a failed result
        """
        try:
            resolved = resolve_path(session, path, self.mode)
        except PathResolutionError as e:
            return FileOperationResult.failure(str(e), path)

        if not os.path.exists(resolved):
            return FileOperationResult.failure(f"Directory not found: {resolved}", resolved)
        if not os.path.isdir(resolved):
            return FileOperationResult.failure(f"Not a directory: {resolved}", resolved)

        canonical = os.path.realpath(resolved)
        return DirectoryChange(path=canonical, session=session.with_cwd(canonical))

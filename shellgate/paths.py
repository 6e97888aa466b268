"""
Path resolution against a shell session, with a traversal guard for
mutating operations.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from .exceptions import PathResolutionError, PathTraversalError
from .models import ShellSession
from .utils.logger import get_logger, log_security_event
from .utils.validators import has_path_traversal

logger = get_logger(__name__)


class PathResolutionMode(Enum):
    """What to do when a relative path cannot be canonicalized."""
    LENIENT = "lenient"  # fall back to the raw concatenation
    STRICT = "strict"    # refuse the path


def ensure_no_traversal(path: Optional[str]) -> None:
    """
    Reject a raw path containing '..' before it is ever resolved.

    Args:
        path: Path exactly as supplied by the caller

    Raises:
        PathTraversalError: If the path contains '..'
    """
    if has_path_traversal(path):
        log_security_event(
            "PATH_TRAVERSAL_BLOCKED",
            {"path": path},
            severity="warning"
        )
        raise PathTraversalError(path or "")


def resolve_path(session: ShellSession,
                 path: Optional[str],
                 mode: PathResolutionMode = PathResolutionMode.LENIENT) -> str:
    """
    Resolve a user-supplied path to an absolute path.

    Empty input is the working directory, absolute input is returned as-is,
    ``~`` expands against the session home and anything else is joined to
    the working directory and canonicalized.

    Args:
        session: Session providing the working and home directories
        path: Path to resolve
        mode: Behavior when canonicalization fails

    Returns:
        Absolute path

    Raises:
        PathResolutionError: In strict mode, if canonicalization fails
    """
    if not path:
        return session.cwd

    if path.startswith("/"):
        return path

    if path == "~" or path.startswith("~/"):
        return session.home + path[1:]

    resolved = session.cwd + "/" + path

    try:
        return str(Path(resolved).resolve(strict=False))
    except (OSError, RuntimeError, ValueError) as e:
        if mode is PathResolutionMode.STRICT:
            raise PathResolutionError(f"Cannot resolve path {path}: {e}") from e

        log_security_event(
            "PATH_RESOLUTION_FALLBACK",
            {"path": path, "reason": type(e).__name__},
            severity="info"
        )
        return resolved


def resolve_for_mutation(session: ShellSession,
                         path: Optional[str],
                         mode: PathResolutionMode = PathResolutionMode.LENIENT) -> str:
    """
    Traversal-check and then resolve a path that is about to be written.

    Raises:
        PathTraversalError: If the raw path contains '..'
        PathResolutionError: In strict mode, if canonicalization fails
    """
    ensure_no_traversal(path)
    return resolve_path(session, path, mode)

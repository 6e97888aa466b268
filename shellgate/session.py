"""
Shell session creation and the sandboxed directory tree behind it.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from .constants import (
    DEFAULT_HOSTNAME,
    DEFAULT_LANG,
    DEFAULT_LINUX_USER,
    DEFAULT_TERM,
    HOME_SUBDIRECTORIES,
    LINUX_SUBDIRECTORIES,
)
from .models import EnvironmentSetup, ExecutionResult, ShellSession
from .utils.logger import get_logger

logger = get_logger(__name__)


def create_session(root: Union[str, Path]) -> ShellSession:
    """
    Create the initial session inside an app-private root directory.

    Home is ``<root>/home``; it is created together with its ``bin``,
    ``tmp``, ``downloads`` and ``.config`` subdirectories. The session
    starts in home.

    Args:
        root: App-private data directory

    Returns:
        New ShellSession
    """
    home = os.path.abspath(os.path.join(str(root), "home"))
    for directory in (home, *(os.path.join(home, d) for d in HOME_SUBDIRECTORIES)):
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create {directory}: {e}")

    return ShellSession(cwd=home, home=home)


def _profile_content(linux_dir: str, home: str, user: str) -> str:
    return (
        f"export PATH={linux_dir}/bin:{linux_dir}/usr/bin:$PATH\n"
        f"export HOME={home}\n"
        f"export TERM={DEFAULT_TERM}\n"
        f"export LANG={DEFAULT_LANG}\n"
        f"export PS1='{user}@{DEFAULT_HOSTNAME}:\\w$ '\n"
    )


def setup_linux_environment(root: Union[str, Path], user: str = DEFAULT_LINUX_USER) -> EnvironmentSetup:
    """
    Lay out a minimal Linux filesystem tree under ``<root>/linux``.

    Writes ``etc/passwd`` and ``etc/profile`` and returns a session whose
    home and working directory are ``linux/home/<user>``.

    Args:
        root: App-private data directory
        user: Name of the unprivileged user account

    Returns:
        EnvironmentSetup with the result record and the new session
    """
    linux_dir = os.path.abspath(os.path.join(str(root), "linux"))
    home = f"{linux_dir}/home/{user}"

    try:
        for sub in LINUX_SUBDIRECTORIES:
            os.makedirs(os.path.join(linux_dir, sub), exist_ok=True)
        os.makedirs(home, exist_ok=True)

        passwd = (
            "root:x:0:0:root:/root:/bin/sh\n"
            f"{user}:x:1000:1000:{user.upper()}:/home/{user}:/bin/sh\n"
        )
        with open(os.path.join(linux_dir, "etc", "passwd"), "w", encoding="utf-8") as f:
            f.write(passwd)

        with open(os.path.join(linux_dir, "etc", "profile"), "w", encoding="utf-8") as f:
            f.write(_profile_content(linux_dir, home, user))

    except OSError as e:
        logger.error(f"Environment setup failed: {e}")
        return EnvironmentSetup(ExecutionResult.failure(f"Environment setup failed: {e}"))

    logger.info(f"Linux environment created at {linux_dir}")
    return EnvironmentSetup(
        result=ExecutionResult(stdout=f"Linux environment setup completed at: {linux_dir}"),
        session=ShellSession(cwd=home, home=home),
        linux_root=linux_dir
    )

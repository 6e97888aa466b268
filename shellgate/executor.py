"""
Execution engine: spawns validated commands and captures their output.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import os
import re
import subprocess
from typing import Dict, List, Optional, Sequence

from .command import ValidatedCommand
from .constants import DEFAULT_LANG, DEFAULT_TERM, ROOT_PROBE_COMMAND
from .elevation import build_elevated_argv, wrap_privileged
from .models import ExecutionResult, ShellSession
from .utils.logger import get_logger, log_security_event, sanitize_debug_message

logger = get_logger(__name__)

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def normalize_lines(text: Optional[str]) -> str:
    """
    Re-terminate every line of captured output with a single newline.

    Args:
        text: Raw stream contents

    Returns:
        Line-oriented text where each line ends in ``\\n``
    """
    if not text:
        return ""
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return "".join(line + "\n" for line in lines)


class ExecutionEngine:
    """Runs processes without a shell and never raises to its caller."""

    def __init__(self, term: str = DEFAULT_TERM, lang: str = DEFAULT_LANG) -> None:
        """
        Initialize the engine.

        Args:
            term: Value injected as TERM for unprivileged commands
            lang: Value injected as LANG for unprivileged commands
        """
        self.term = term
        self.lang = lang

    def build_environment(self, session: ShellSession) -> Dict[str, str]:
        """
        Environment for an unprivileged process.

        Args:
            session: Session whose home directory becomes HOME

        Returns:
            Copy of the current environment with HOME, TERM and LANG set
        """
        env = os.environ.copy()
        env['HOME'] = session.home
        env['TERM'] = self.term
        env['LANG'] = self.lang
        return env

    def run(
        self,
        argv: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        failure_prefix: str = "Execution failed: "
    ) -> ExecutionResult:
        """
        Spawn a process and wait for it, capturing both streams.

        Args:
            argv: Program and arguments as separate tokens
            cwd: Working directory
            env: Environment variables
            failure_prefix: Prepended to the error when spawning fails

        Returns:
            ExecutionResult; spawn failures are reported with exit code 1
        """
        cmd: List[str] = list(argv)
        logger.debug(sanitize_debug_message(f"Running command: {' '.join(cmd)}"))

        try:
            # Never use shell=True
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                env=env,
                text=True,
                errors='replace'
            )
            stdout, stderr = process.communicate()
        except Exception as e:
            logger.error(f"Failed to run {cmd[0] if cmd else '<empty>'}: {e}")
            return ExecutionResult.failure(f"{failure_prefix}{e}")

        if process.returncode != 0:
            logger.debug(f"Command returned non-zero: {process.returncode}")

        return ExecutionResult(
            stdout=normalize_lines(stdout),
            stderr=normalize_lines(stderr),
            exit_code=process.returncode
        )

    def execute(self, command: ValidatedCommand, session: ShellSession) -> ExecutionResult:
        """
        Run a validated command, through ``su -c`` if it is elevated.

        Unprivileged commands run in the session's working directory with
        HOME, TERM and LANG injected. Privileged commands get the privileged
        shell's own environment.

        Args:
            command: Command produced by ``validate_command``
            session: Current shell session

        Returns:
            ExecutionResult instance
        """
        if not isinstance(command, ValidatedCommand):
            raise TypeError("execute requires a ValidatedCommand")

        if command.elevated:
            log_security_event(
                "PRIVILEGED_COMMAND_EXECUTION",
                {"command": command.program, "args_count": len(command.arguments)},
                severity="info"
            )
            return self.run(build_elevated_argv(command), failure_prefix="Root execution failed: ")

        return self.run(
            command.argv,
            cwd=session.cwd,
            env=self.build_environment(session)
        )

    def run_privileged(self, inner_command: str, failure_prefix: str = "Root execution failed: ") -> ExecutionResult:
        """
        Run an internally generated command string through ``su -c``.

        Args:
            inner_command: Command string built from constants and validated values
            failure_prefix: Prepended to the error when spawning fails

        Returns:
            ExecutionResult instance
        """
        return self.run(wrap_privileged(inner_command), failure_prefix=failure_prefix)

    def check_privileged_access(self) -> bool:
        """
        Probe for root by running ``su -c "echo test"``.

        Returns:
            True iff the probe exits with status zero
        """
        try:
            process = subprocess.Popen(
                wrap_privileged(ROOT_PROBE_COMMAND),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL
            )
            return process.wait() == 0
        except Exception as e:
            logger.debug(f"Root probe could not run: {e}")
            return False

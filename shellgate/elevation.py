"""
Builds the argv for running a validated command through ``su -c``.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from typing import Iterable, List

from .command import ValidatedCommand
from .constants import PRIVILEGE_COMMAND, PRIVILEGE_FLAG


def quote_argument(arg: str) -> str:
    """
    Single-quote an argument for a POSIX shell.

    Embedded single quotes become ``'\\''``: close the quote, emit an
    escaped quote, reopen.

    Args:
        arg: Argument to quote

    Returns:
        The argument as one opaque shell word
    """
    return "'" + arg.replace("'", "'\\''") + "'"


def build_inner_command(program: str, args: Iterable[str]) -> str:
    """
    Compose the string the privileged shell will interpret.

    Args:
        program: Allowlisted program name, emitted bare
        args: Every further token, each single-quoted

    Returns:
        Inner command string
    """
    parts = [program]
    parts.extend(quote_argument(arg) for arg in args)
    return " ".join(parts)


def wrap_privileged(inner_command: str) -> List[str]:
    """
    Wrap an internally generated command string for ``su -c``.

    Callers must only pass strings built from constants and values that
    already passed validation.
    """
    return [PRIVILEGE_COMMAND, PRIVILEGE_FLAG, inner_command]


def build_elevated_argv(command: ValidatedCommand) -> List[str]:
    """
    Build the three-token ``su -c <inner>`` argv for a validated command.

    Tokens that followed the program in the command string are quoted
    like the arguments, so quotes or globs in them stay literal.

    Args:
        command: Command produced by ``validate_command``

    Returns:
        ``["su", "-c", inner_command]``

    Raises:
        TypeError: If given anything other than a ValidatedCommand
    """
    if not isinstance(command, ValidatedCommand):
        raise TypeError("build_elevated_argv requires a ValidatedCommand")
    tail = command.command.split()[1:]
    return wrap_privileged(build_inner_command(command.program, [*tail, *command.arguments]))

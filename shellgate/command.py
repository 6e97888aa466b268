"""
Validated commands: the only command type the execution engine accepts.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .allowlist import base_command, get_entry
from .exceptions import CommandRejectedError
from .models import CommandRequest
from .utils.logger import get_logger, log_security_event
from .utils.validators import are_arguments_safe, is_command_allowed

logger = get_logger(__name__)

_CONSTRUCTION_TOKEN = object()

COMMAND_NOT_ALLOWED = "Command not allowed. Only safe commands are permitted."
ROOT_COMMAND_NOT_ALLOWED = "Root command not allowed. Only safe commands are permitted."
INVALID_ARGUMENTS = "Invalid arguments. Arguments contain forbidden characters."


@dataclass(frozen=True)
class ValidatedCommand:
    """
    A command that passed the allowlist and the dangerous-character checks.

    Instances can only be produced by :func:`validate_command`; calling the
    constructor directly raises ``TypeError``.

    ``command`` is the caller's command string, which may carry extra
    whitespace-separated tokens after ``program``.
    """
    command: str
    program: str
    arguments: Tuple[str, ...]
    elevated: bool
    _token: object = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._token is not _CONSTRUCTION_TOKEN:
            raise TypeError("ValidatedCommand must be created with validate_command()")

    @property
    def argv(self) -> list[str]:
        """Command tokens followed by the arguments, one token each."""
        return [*self.command.split(), *self.arguments]


def validate_command(request: CommandRequest) -> ValidatedCommand:
    """
    Run every command check and produce a :class:`ValidatedCommand`.

    Privileged requests are checked against the same allowlist as
    unprivileged ones and must also carry the privileged capability.

    Args:
        request: Command request from the caller

    Returns:
        ValidatedCommand instance

    Raises:
        CommandRejectedError: If the program or any argument is not permitted
    """
    command = request.program
    program = base_command(command)
    rejected_message = ROOT_COMMAND_NOT_ALLOWED if request.elevated else COMMAND_NOT_ALLOWED

    if not is_command_allowed(command, privileged=request.elevated):
        # The predicate decides; the entry only picks the event to record
        entry = get_entry(program) if program else None
        if entry is None:
            log_security_event(
                "UNAUTHORIZED_COMMAND",
                {"command": program or "<empty>", "elevated": request.elevated},
                severity="warning"
            )
        elif request.elevated and not entry.privileged:
            log_security_event(
                "UNAUTHORIZED_PRIVILEGED_COMMAND",
                {"command": program},
                severity="warning"
            )
        else:
            log_security_event(
                "DANGEROUS_CHARACTERS",
                {"field": "command", "command": program},
                severity="warning"
            )
        raise CommandRejectedError(rejected_message)

    arguments = tuple(arg for arg in request.arguments if arg is not None)
    if not are_arguments_safe(arguments):
        log_security_event(
            "DANGEROUS_CHARACTERS",
            {"field": "args", "command": program, "args_count": len(arguments)},
            severity="warning"
        )
        raise CommandRejectedError(INVALID_ARGUMENTS)

    logger.debug(f"Validated command {program} with {len(arguments)} argument(s)")
    return ValidatedCommand(
        command=command,
        program=program,
        arguments=arguments,
        elevated=request.elevated,
        _token=_CONSTRUCTION_TOKEN
    )

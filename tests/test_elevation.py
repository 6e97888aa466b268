"""
Tests for the su -c command builder.
"""

import shlex

import pytest

from shellgate.command import validate_command
from shellgate.elevation import (
    build_elevated_argv,
    build_inner_command,
    quote_argument,
    wrap_privileged,
)
from shellgate.models import CommandRequest


class TestQuoting:
    """Test POSIX single-quote escaping."""

    @pytest.mark.parametrize("arg", [
        "plain",
        "with space",
        "it's",
        "''",
        "'",
        "a'b'c",
        "*",
        "~/file",
        "\\backslash",
        "",
        "--flag=value",
        "\"double\"",
    ])
    def test_quoted_argument_reparses_to_original(self, arg):
        """A POSIX shell parses the quoted form back to exactly the argument."""
        assert shlex.split(quote_argument(arg)) == [arg]

    def test_single_quote_escape_form(self):
        """Embedded quotes use the close-escape-reopen form."""
        assert quote_argument("it's") == "'it'\\''s'"


class TestInnerCommand:
    """Test inner command composition."""

    def test_program_bare_and_args_quoted(self):
        """The program is a bare word and each arg is its own quoted word."""
        inner = build_inner_command("ls", ["-la", "/root", "my file"])
        assert inner == "ls '-la' '/root' 'my file'"
        assert shlex.split(inner) == ["ls", "-la", "/root", "my file"]

    def test_no_args(self):
        """Without arguments the inner command is just the command."""
        assert build_inner_command("whoami", []) == "whoami"


class TestElevatedArgv:
    """Test the three-token su argv."""

    def test_exactly_three_tokens(self):
        """su, -c and one inner command string."""
        command = validate_command(CommandRequest("cat", ("/etc/hosts", "it's"), elevated=True))
        argv = build_elevated_argv(command)
        assert len(argv) == 3
        assert argv[:2] == ["su", "-c"]
        assert shlex.split(argv[2]) == ["cat", "/etc/hosts", "it's"]

    def test_command_string_tail_is_quoted(self):
        """A stray quote after the program cannot regroup the arguments."""
        command = validate_command(CommandRequest("echo '", (" a b * ", "c"), elevated=True))
        inner = build_elevated_argv(command)[2]
        assert shlex.split(inner) == ["echo", "'", " a b * ", "c"]

    def test_command_string_flags_kept(self):
        """Flags written into the command string survive as their own words."""
        command = validate_command(CommandRequest("ls  -la", ("/root",), elevated=True))
        assert shlex.split(build_elevated_argv(command)[2]) == ["ls", "-la", "/root"]

    def test_requires_validated_command(self):
        """Raw strings or requests are refused."""
        with pytest.raises(TypeError):
            build_elevated_argv("cat /etc/shadow")
        with pytest.raises(TypeError):
            build_elevated_argv(CommandRequest("cat", (), elevated=True))

    def test_wrap_privileged(self):
        """Internally built strings are passed as one token."""
        assert wrap_privileged("apt-get install -y curl") == ["su", "-c", "apt-get install -y curl"]

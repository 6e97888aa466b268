"""
Main entry point for the shellgate command-line tool.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import argparse
import sys
from typing import List, Optional

from ..allowlist import commands_by_category
from ..config import Config
from ..constants import APP_NAME, APP_VERSION
from ..exceptions import ConfigurationError
from ..gateway import ShellGateway
from ..models import DirectoryChange, Ok, Response, ShellSession
from ..utils.logger import set_global_config
from .output import OutputFormatter, format_size

# Exit status for a request refused before processing
EXIT_REJECTED = 2


class ShellGateCLI:
    """Main CLI application class."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize CLI with configuration."""
        self.config = Config(config_path)
        self.gateway = ShellGateway(self.config)
        self.formatter: Optional[OutputFormatter] = None

    def _session(self, args: argparse.Namespace) -> ShellSession:
        """Initial session, moved to ``--cwd`` when one is given."""
        session = self.gateway.create_session()
        if getattr(args, 'cwd', None):
            response = self.gateway.change_directory({"path": args.cwd}, session)
            if isinstance(response, Ok) and isinstance(response.value, DirectoryChange):
                return response.value.session
            self.formatter.warning(f"Cannot change to {args.cwd}, staying in {session.cwd}")
        return session

    def _emit_rejected(self, response: Response) -> Optional[int]:
        """Report a rejected request; returns an exit status if it was one."""
        if isinstance(response, Ok):
            return None
        if self.formatter.json_output:
            self.formatter.output_json(response.to_dict())
        else:
            self.formatter.error(response.reason)
        return EXIT_REJECTED

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the CLI with given arguments.

        Args:
            args: Parsed command line arguments

        Returns:
            Exit code
        """
        self.formatter = OutputFormatter(
            use_color=not args.no_color,
            json_output=args.json
        )

        handlers = {
            'exec': self.cmd_exec,
            'sudo': self.cmd_exec,
            'install': self.cmd_install,
            'root-check': self.cmd_root_check,
            'ls': self.cmd_ls,
            'cat': self.cmd_cat,
            'download': self.cmd_download,
            'setup': self.cmd_setup,
            'info': self.cmd_info,
            'commands': self.cmd_commands,
            'config': self.cmd_config,
        }

        handler = handlers.get(args.command)
        if handler is None:
            self.formatter.error(f"Unknown command: {args.command}")
            return 1
        return handler(args)

    def _print_execution(self, response: Ok) -> int:
        """Print an ExecutionResult-shaped response and return its exit code."""
        data = response.to_dict()
        if self.formatter.json_output:
            self.formatter.output_json(data)
        else:
            if data.get("output"):
                sys.stdout.write(data["output"])
            if data.get("error"):
                sys.stderr.write(data["error"] if data["error"].endswith("\n") else data["error"] + "\n")
        return int(data.get("exitCode", 1))

    def cmd_exec(self, args: argparse.Namespace) -> int:
        """Handle 'exec' and 'sudo' - run an allowlisted command."""
        session = self._session(args)
        request = {"command": args.program, "args": list(args.args)}

        if args.command == 'sudo':
            response = self.gateway.execute_elevated(request, session)
        else:
            response = self.gateway.execute(request, session)

        rejected = self._emit_rejected(response)
        if rejected is not None:
            return rejected
        return self._print_execution(response)

    def cmd_install(self, args: argparse.Namespace) -> int:
        """Handle 'install' - install a package as root."""
        response = self.gateway.install_package({"packageName": args.package, "source": args.source})
        rejected = self._emit_rejected(response)
        if rejected is not None:
            return rejected
        return self._print_execution(response)

    def cmd_root_check(self, args: argparse.Namespace) -> int:
        """Handle 'root-check' - probe for root access."""
        status = self.gateway.check_privileged_access().value
        if self.formatter.json_output:
            self.formatter.output_json(status.to_dict())
        elif status.has_privilege:
            self.formatter.success("Root access is available")
        else:
            self.formatter.warning("Root access is not available")
        return 0 if status.has_privilege else 1

    def cmd_ls(self, args: argparse.Namespace) -> int:
        """Handle 'ls' - list a directory."""
        session = self._session(args)
        data = self.gateway.list_directory({"path": args.path}, session).to_dict()

        if self.formatter.json_output:
            self.formatter.output_json(data)
        elif data.get("error"):
            self.formatter.error(data["error"])
        else:
            self.formatter.header(data["path"])
            print(self.formatter.format_listing(data["files"]))

        return 1 if data.get("error") else 0

    def cmd_cat(self, args: argparse.Namespace) -> int:
        """Handle 'cat' - print a text file."""
        session = self._session(args)
        response = self.gateway.read_file({"path": args.path}, session)
        rejected = self._emit_rejected(response)
        if rejected is not None:
            return rejected

        data = response.to_dict()
        if self.formatter.json_output:
            self.formatter.output_json(data)
        elif data["success"]:
            sys.stdout.write(data["content"])
        else:
            self.formatter.error(data["error"])
        return 0 if data["success"] else 1

    def cmd_download(self, args: argparse.Namespace) -> int:
        """Handle 'download' - fetch a file over HTTPS."""
        session = self._session(args)
        response = self.gateway.download_file({"url": args.url, "destination": args.destination}, session)
        rejected = self._emit_rejected(response)
        if rejected is not None:
            return rejected

        data = response.to_dict()
        if self.formatter.json_output:
            self.formatter.output_json(data)
        elif data["exitCode"] == 0:
            self.formatter.success(data["output"])
        else:
            self.formatter.error(data["error"])
        return int(data["exitCode"])

    def cmd_setup(self, args: argparse.Namespace) -> int:
        """Handle 'setup' - lay out the Linux environment."""
        response = self.gateway.setup_linux_environment({"user": args.user})
        data = response.to_dict()
        if self.formatter.json_output:
            self.formatter.output_json(data)
        elif data["exitCode"] == 0:
            self.formatter.success(data["output"])
            self.formatter.info(f"Home: {data['home']}")
        else:
            self.formatter.error(data["error"])
        return int(data["exitCode"])

    def cmd_info(self, args: argparse.Namespace) -> int:
        """Handle 'info' - show system or storage information."""
        session = self._session(args)
        if args.storage:
            data = self.gateway.get_storage_info(session).to_dict()
        else:
            data = self.gateway.get_system_info(session).to_dict()

        if self.formatter.json_output:
            self.formatter.output_json(data)
            return 1 if data.get("error") else 0

        if args.storage:
            self.formatter.header("Storage")
            for name in ("internal", "home"):
                volume = data.get(name)
                if volume:
                    print(f"  {name:<8}  {volume['path']}")
                    print(f"  {'':<8}  {format_size(volume['used'])} used, "
                          f"{format_size(volume['free'])} free of {format_size(volume['total'])}")
            if data.get("error"):
                self.formatter.error(data["error"])
                return 1
        else:
            self.formatter.header(f"{APP_NAME} {APP_VERSION}")
            print(self.formatter.format_mapping(data))
        return 0

    def cmd_commands(self, args: argparse.Namespace) -> int:
        """Handle 'commands' - show the allowlist."""
        grouped = commands_by_category()
        if self.formatter.json_output:
            self.formatter.output_json(grouped)
            return 0

        self.formatter.header("Allowed commands")
        print(self.formatter.format_mapping({name: ' '.join(names) for name, names in grouped.items()}))
        return 0

    def cmd_config(self, args: argparse.Namespace) -> int:
        """Handle 'config' - view/modify configuration."""
        if args.action == 'path':
            print(self.config.config_file)
            return 0

        if args.action == 'init':
            try:
                self.config.init_config()
            except ConfigurationError as e:
                self.formatter.error(str(e))
                return 1
            self.formatter.success(f"Configuration at {self.config.config_file}")
            return 0

        if args.action == 'get':
            if not args.key:
                if args.json:
                    self.formatter.output_json(self.config.get_all_settings())
                else:
                    self.formatter.header("Configuration")
                    print(self.formatter.format_mapping(self.config.get_all_settings()))
            elif args.json:
                self.formatter.output_json({args.key: self.config.get(args.key)})
            else:
                print(self.config.get(args.key))
            return 0

        # set
        if not args.key or args.value is None:
            self.formatter.error("Both key and value are required for 'set'")
            self.formatter.info("Available keys:")
            for key in self.config.get_all_settings():
                print(f"  • {key}")
            return 1

        value = args.value
        if value.lower() in ('true', 'false'):
            value = value.lower() == 'true'
        elif value.lower() in ('none', 'null'):
            value = None
        elif value.isdigit():
            value = int(value)

        try:
            self.config.set(args.key, value)
        except ConfigurationError as e:
            self.formatter.error(str(e))
            return 1

        self.formatter.success(f"Set {args.key} = {value}")
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='shellgate',
        description=f'{APP_NAME} - allowlisted command execution',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global options
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {APP_VERSION}'
    )
    parser.add_argument(
        '--config',
        metavar='PATH',
        help='Alternative config file path'
    )
    parser.add_argument(
        '--cwd',
        metavar='DIR',
        help='Working directory for the session (default: home)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Output in JSON format'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable ANSI colors'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Only log errors'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    subparsers.required = True

    for name, help_text in (('exec', 'Run an allowlisted command'),
                            ('sudo', 'Run an allowlisted command as root via su')):
        exec_parser = subparsers.add_parser(name, help=help_text)
        exec_parser.add_argument('program', help='Command name, e.g. ls')
        exec_parser.add_argument('args', nargs=argparse.REMAINDER, help='Arguments passed through unchanged')

    install_parser = subparsers.add_parser('install', help='Install a package as root')
    install_parser.add_argument('package', help='Package name')
    install_parser.add_argument(
        '--source',
        default='auto',
        help='Package source: apt, debian, ubuntu, pacman, arch, yum, rpm (default: pkg)'
    )

    subparsers.add_parser('root-check', help='Check whether su grants root')
    subparsers.add_parser('commands', help='List allowlisted commands by category')

    ls_parser = subparsers.add_parser('ls', help='List a directory')
    ls_parser.add_argument('path', nargs='?', help='Directory (default: working directory)')

    cat_parser = subparsers.add_parser('cat', help='Print a text file')
    cat_parser.add_argument('path', help='File to read')

    download_parser = subparsers.add_parser('download', help='Download a file over HTTPS')
    download_parser.add_argument('url', help='HTTPS URL')
    download_parser.add_argument('destination', help='Destination path')

    setup_parser = subparsers.add_parser('setup', help='Create the Linux environment tree')
    setup_parser.add_argument('--user', help='Unprivileged user name')

    info_parser = subparsers.add_parser('info', help='Show system information')
    info_parser.add_argument('--storage', action='store_true', help='Show storage usage instead')

    config_parser = subparsers.add_parser(
        'config',
        help='View/modify configuration',
        description='Manage configuration settings. Examples:\n'
        '  shellgate config get                       # Show all settings\n'
        '  shellgate config get path_resolution_mode  # Show specific setting\n'
        '  shellgate config set download_timeout 60   # Set a value\n'
        '  shellgate config path                      # Show config file location\n'
        '  shellgate config init                      # Write defaults',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    config_parser.add_argument(
        'action',
        choices=['get', 'set', 'path', 'init'],
        help='Config action'
    )
    config_parser.add_argument('key', nargs='?', help='Config key')
    config_parser.add_argument('value', nargs='?', help='Config value to set')

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.debug:
        console_level = 'debug'
    else:
        console_level = 'error' if args.quiet else 'warning'

    try:
        set_global_config({'debug_mode': args.debug, 'console_level': console_level})
        cli = ShellGateCLI(args.config)

        log_config = cli.config.get_all_settings()
        log_config['debug_mode'] = log_config.get('debug_mode') or args.debug
        log_config['console_level'] = console_level
        set_global_config(log_config)

        exit_code = cli.run(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Fatal error: {str(e)}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()

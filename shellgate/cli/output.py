"""
Output formatting utilities for the CLI.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import json
import sys
from typing import Any, Dict, List

from colorama import init, Fore, Style

# Initialize colorama for cross-platform color support
init(autoreset=True)


def format_size(size_bytes: int) -> str:
    """Human-readable byte count."""
    size = float(size_bytes)
    for unit in ('B', 'KB', 'MB', 'GB', 'TB'):
        if size < 1024 or unit == 'TB':
            return f"{size:.0f} {unit}" if unit == 'B' else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


class OutputFormatter:
    """Handles output formatting for the CLI."""

    def __init__(self, use_color: bool = True, json_output: bool = False):
        """
        Initialize output formatter.

        Args:
            use_color: Whether to use ANSI colors
            json_output: Whether to output JSON
        """
        self.use_color = use_color
        self.json_output = json_output

        # Color shortcuts
        self.green = Fore.GREEN if use_color else ''
        self.yellow = Fore.YELLOW if use_color else ''
        self.red = Fore.RED if use_color else ''
        self.cyan = Fore.CYAN if use_color else ''
        self.blue = Fore.BLUE if use_color else ''
        self.reset = Style.RESET_ALL if use_color else ''
        self.bright = Style.BRIGHT if use_color else ''

    def success(self, message: str) -> None:
        """Print success message."""
        if not self.json_output:
            print(f"{self.green}✅ {message}{self.reset}")

    def warning(self, message: str) -> None:
        """Print warning message."""
        if not self.json_output:
            print(f"{self.yellow}⚠️  {message}{self.reset}")

    def error(self, message: str) -> None:
        """Print error message."""
        if not self.json_output:
            print(f"{self.red}❌ {message}{self.reset}", file=sys.stderr)

    def info(self, message: str) -> None:
        """Print info message."""
        if not self.json_output:
            print(f"{self.cyan}ℹ️  {message}{self.reset}")

    def header(self, message: str) -> None:
        """Print header message."""
        if not self.json_output:
            print(f"\n{self.cyan}{self.bright}{message}{self.reset}")
            print(f"{self.cyan}{'─' * len(message)}{self.reset}")

    def format_listing(self, files: List[Dict[str, Any]]) -> str:
        """
        Format directory entries as a table.

        Args:
            files: Entry dictionaries as produced by ``FileInfo.to_dict``

        Returns:
            Formatted table string
        """
        if not files:
            return "Directory is empty"

        max_size = max(len(format_size(f.get('size', 0))) for f in files)
        lines = []

        for entry in files:
            flags = ''.join((
                'd' if entry.get('isDirectory') else '-',
                'r' if entry.get('readable') else '-',
                'w' if entry.get('writable') else '-',
                'x' if entry.get('executable') else '-',
            ))
            size = format_size(entry.get('size', 0))
            name = entry.get('name', '')
            if entry.get('isDirectory'):
                name = f"{self.blue}{self.bright}{name}/{self.reset}"
            lines.append(f"  {flags}  {size:>{max_size}}  {entry.get('modified', '')}  {name}")

        return '\n'.join(lines)

    def format_mapping(self, data: Dict[str, Any]) -> str:
        """Format a flat mapping as aligned ``key: value`` lines."""
        if not data:
            return ""
        width = max(len(str(k)) for k in data)
        return '\n'.join(f"  {str(key):<{width}}  {value}" for key, value in data.items())

    def output_json(self, data: Any) -> None:
        """
        Output data as JSON.

        Args:
            data: Data to output
        """
        print(json.dumps(data, indent=2, default=str))

"""
Shell Gateway - Modular Package

A command-execution gateway that decides whether, and how safely, to run
requests from an untrusted UI layer against the operating system: a fixed
program allowlist, a shell-metacharacter detector, a traversal-checked path
resolver and an ``su -c`` builder feeding one execution engine.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

__version__ = "1.3.0"
__author__ = "NeatCode Labs"
__email__ = "neatcodelabs@gmail.com"

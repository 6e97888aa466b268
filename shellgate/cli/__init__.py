"""
Command-line interface for the Shell Gateway.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

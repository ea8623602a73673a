# SPDX-License-Identifier: MPL-2.0
"""
Moltbot - Main entry point for the CLI.

This module provides the command-line interface for the Moltbot package.
"""

from moltbot.cli.main import cli

if __name__ == "__main__":
    cli()

# SPDX-License-Identifier: MPL-2.0
"""Command-line interface for Moltbot."""
from moltbot.cli.main import cli

__all__ = ["cli"]

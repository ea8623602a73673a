# SPDX-License-Identifier: MPL-2.0
"""HTTP API for Moltbot."""
from moltbot.api.main import create_app

__all__ = ["create_app"]

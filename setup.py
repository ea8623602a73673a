# SPDX-License-Identifier: MPL-2.0
"""Setuptools shim for tools that cannot build from pyproject.toml.

All metadata for moltbot-attest lives in pyproject.toml.
"""
from setuptools import setup

if __name__ == "__main__":
    setup()

# SPDX-License-Identifier: MPL-2.0
"""
Centralized configuration for Moltbot.

All configurable values are read from environment variables with sensible
defaults, so the CLI, the API and tests can point at different key
directories and feeds without code changes.

Environment Variables:
    MOLTBOT_KEY_DIR: Directory holding the bot key pair (default: ./.keys)
    MOLTBOOK_FEED_PATH: Feed file (default: ./moltbook_feed.json)
    MOLTBOT_LOG_LEVEL: Logging level name (default: INFO)
    MOLTBOT_EMBED_PUBLIC_KEY: Embed the public key in attestations (default: true)
    ALLOWED_ORIGINS: Comma-separated CORS origins for the API
    TRUSTED_HOSTS: Comma-separated hosts accepted by the API
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from moltbot.core.exceptions import ConfigurationError
from moltbot.core.feed import Feed
from moltbot.core.keystore import FileKeyStorage, KeyStore

DEFAULT_KEY_DIR = ".keys"
DEFAULT_FEED_PATH = "moltbook_feed.json"
DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://localhost:8000"
DEFAULT_TRUSTED_HOSTS = "localhost,127.0.0.1,testserver"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}", details={"variable": name})


def _parse_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level {value!r}", details={"variable": "MOLTBOT_LOG_LEVEL"})
    return level


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime settings for the bot, the feed and the API."""

    key_dir: Path = field(default_factory=lambda: Path(DEFAULT_KEY_DIR))
    feed_path: Path = field(default_factory=lambda: Path(DEFAULT_FEED_PATH))
    log_level: int = logging.INFO
    embed_public_key: bool = True
    allowed_origins: List[str] = field(default_factory=lambda: _split(DEFAULT_ALLOWED_ORIGINS))
    trusted_hosts: List[str] = field(default_factory=lambda: _split(DEFAULT_TRUSTED_HOSTS))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ConfigurationError: If a variable has an invalid value.
        """
        env = os.environ if environ is None else environ
        return cls(
            key_dir=Path(env.get("MOLTBOT_KEY_DIR", DEFAULT_KEY_DIR)),
            feed_path=Path(env.get("MOLTBOOK_FEED_PATH", DEFAULT_FEED_PATH)),
            log_level=_parse_level(env.get("MOLTBOT_LOG_LEVEL", "INFO")),
            embed_public_key=_parse_bool(
                "MOLTBOT_EMBED_PUBLIC_KEY", env.get("MOLTBOT_EMBED_PUBLIC_KEY", "true")
            ),
            allowed_origins=_split(env.get("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)),
            trusted_hosts=_split(env.get("TRUSTED_HOSTS", DEFAULT_TRUSTED_HOSTS)),
        )

    def key_store(self) -> KeyStore:
        return KeyStore(FileKeyStorage(self.key_dir))

    def feed(self) -> Feed:
        return Feed(self.feed_path)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for CLI and API entry points."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("moltbot").setLevel(level)

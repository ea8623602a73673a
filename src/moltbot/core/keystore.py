# SPDX-License-Identifier: MPL-2.0
"""Persistent key management for the bot identity.

:class:`KeyStore` loads, generates and persists the bot's Ed25519 key pair
through an injected :class:`KeyStorage`. It never regenerates a key pair
once one exists.

``get_or_create`` is not safe against concurrent first-time initialization
from several processes: two processes racing on an empty storage can each
generate and persist a different pair. Run initialization once (for example
``moltbot keys``) before starting concurrent workers, or hold an external
file lock around it.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple, Union

from moltbot.core.crypto import KeyPair, export_public_key_pem
from moltbot.core.exceptions import KeyStoreError

logger = logging.getLogger(__name__)

PRIVATE_KEY_FILENAME = "moltbot_ed25519.pem"
PUBLIC_KEY_FILENAME = "moltbot_ed25519.pub.pem"


class KeyStorage(ABC):
    """Where the PEM halves of a key pair live."""

    @abstractmethod
    def read(self) -> Optional[Tuple[bytes, bytes]]:
        """Return ``(private_pem, public_pem)`` or None if nothing is stored."""

    @abstractmethod
    def write(self, private_pem: bytes, public_pem: bytes) -> None:
        """Store both PEM halves, replacing anything already stored."""


class MemoryKeyStorage(KeyStorage):
    """In-process storage, used for tests and ephemeral bots."""

    def __init__(self) -> None:
        self._pems: Optional[Tuple[bytes, bytes]] = None

    def read(self) -> Optional[Tuple[bytes, bytes]]:
        return self._pems

    def write(self, private_pem: bytes, public_pem: bytes) -> None:
        self._pems = (private_pem, public_pem)


class FileKeyStorage(KeyStorage):
    """Stores the pair as two PEM files in ``directory``.

    The private key is written with mode ``0o600``.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    @property
    def private_key_path(self) -> Path:
        return self.directory / PRIVATE_KEY_FILENAME

    @property
    def public_key_path(self) -> Path:
        return self.directory / PUBLIC_KEY_FILENAME

    def _read_file(self, path: Path) -> Optional[bytes]:
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise KeyStoreError(f"Error reading key file {path}: {exc}", details={"directory": str(self.directory)}) from exc

    def read(self) -> Optional[Tuple[bytes, bytes]]:
        """Return both PEM halves, or None if neither file exists.

        A missing public half (for example after a crash between the two
        writes) is derived from the private key and written back.

        Raises:
            KeyStoreError: If only the public half exists, or a file cannot be read.
            InvalidKeyError: If a public half has to be derived from a corrupt private key.
        """
        private_pem = self._read_file(self.private_key_path)
        public_pem = self._read_file(self.public_key_path)
        if private_pem is None and public_pem is None:
            return None
        if private_pem is None:
            raise KeyStoreError(
                "Public key file exists but the private key is missing",
                details={"directory": str(self.directory), "missing": PRIVATE_KEY_FILENAME},
            )
        if public_pem is None:
            logger.warning("Public key file missing in %s, deriving it from the private key", self.directory)
            public_pem = KeyPair.from_private_pem(private_pem).public_pem()
            self._write_public(public_pem)
        return private_pem, public_pem

    def _write_public(self, public_pem: bytes) -> None:
        try:
            with open(self.public_key_path, "wb") as f:
                f.write(public_pem)
        except OSError as exc:
            raise KeyStoreError(f"Error writing key files: {exc}", details={"directory": str(self.directory)}) from exc

    def write(self, private_pem: bytes, public_pem: bytes) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.private_key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "wb") as f:
                # O_CREAT only applies the mode to new files
                os.chmod(self.private_key_path, 0o600)
                f.write(private_pem)
            with open(self.public_key_path, "wb") as f:
                f.write(public_pem)
        except OSError as exc:
            raise KeyStoreError(f"Error writing key files: {exc}", details={"directory": str(self.directory)}) from exc


class KeyStore:
    """Loads, generates and persists the bot key pair.

    Example:
        >>> store = KeyStore(FileKeyStorage(".keys"))
        >>> pair = store.get_or_create()
    """

    def __init__(self, storage: KeyStorage) -> None:
        self.storage = storage

    def load(self) -> Optional[KeyPair]:
        """Load the stored key pair.

        Returns:
            The key pair, or None if storage is empty.

        Raises:
            InvalidKeyError: If the stored material is corrupt or mismatched.
            KeyStoreError: If storage cannot be read.
        """
        pems = self.storage.read()
        if pems is None:
            return None
        private_pem, public_pem = pems
        return KeyPair.from_pem(private_pem, public_pem)

    def generate(self) -> KeyPair:
        """Generate a new key pair without persisting it."""
        return KeyPair.generate()

    def persist(self, pair: KeyPair) -> None:
        """Write ``pair`` to storage."""
        self.storage.write(pair.private_pem(), pair.public_pem())
        logger.info("Persisted bot key pair")

    def get_or_create(self) -> KeyPair:
        """Return the stored pair, generating and persisting one if needed."""
        existing = self.load()
        if existing is not None:
            return existing
        logger.info("No bot key pair found, generating a new one")
        pair = self.generate()
        self.persist(pair)
        return pair

    def public_key_pem(self) -> str:
        """Return the bot public key PEM, creating the pair if needed."""
        return export_public_key_pem(self.get_or_create().public_key)

# SPDX-License-Identifier: MPL-2.0
"""Shared pytest fixtures for Moltbot tests."""

import pytest

from moltbot.core.crypto import KeyPair
from moltbot.core.keystore import FileKeyStorage, KeyStore, MemoryKeyStorage


@pytest.fixture
def keypair() -> KeyPair:
    """Generate a fresh keypair for testing."""
    return KeyPair.generate()


@pytest.fixture
def other_keypair() -> KeyPair:
    """An unrelated keypair, for mismatch tests."""
    return KeyPair.generate()


@pytest.fixture
def memory_store() -> KeyStore:
    return KeyStore(MemoryKeyStorage())


@pytest.fixture
def file_store(tmp_path) -> KeyStore:
    return KeyStore(FileKeyStorage(tmp_path / "keys"))

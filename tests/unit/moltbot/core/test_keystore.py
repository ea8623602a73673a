# SPDX-License-Identifier: MPL-2.0
"""Tests for the key store."""

import os
import stat
import sys

import pytest

from moltbot.core.exceptions import InvalidKeyError, KeyStoreError
from moltbot.core.keystore import (
    PRIVATE_KEY_FILENAME,
    PUBLIC_KEY_FILENAME,
    FileKeyStorage,
    KeyStore,
    MemoryKeyStorage,
)


def test_load_empty(memory_store, file_store):
    assert memory_store.load() is None
    assert file_store.load() is None


def test_get_or_create_is_idempotent(memory_store):
    first = memory_store.get_or_create()
    second = memory_store.get_or_create()
    assert first.public_bytes() == second.public_bytes()
    assert first.private_pem() == second.private_pem()


def test_get_or_create_persists_to_files(tmp_path):
    storage = FileKeyStorage(tmp_path / "nested" / "keys")
    pair = KeyStore(storage).get_or_create()

    assert storage.private_key_path.name == PRIVATE_KEY_FILENAME
    assert storage.public_key_path.name == PUBLIC_KEY_FILENAME
    assert storage.private_key_path.read_bytes() == pair.private_pem()
    assert storage.public_key_path.read_bytes() == pair.public_pem()

    # A second store over the same directory sees the same identity
    again = KeyStore(FileKeyStorage(storage.directory)).get_or_create()
    assert again.public_bytes() == pair.public_bytes()


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_private_key_permissions(file_store):
    file_store.get_or_create()
    mode = stat.S_IMODE(os.stat(file_store.storage.private_key_path).st_mode)
    assert mode & 0o077 == 0


def test_generate_does_not_persist(memory_store):
    memory_store.generate()
    assert memory_store.load() is None


def test_persist_then_load(memory_store, keypair):
    memory_store.persist(keypair)
    assert memory_store.load().public_bytes() == keypair.public_bytes()


def test_corrupt_storage_is_loud(file_store):
    file_store.get_or_create()
    file_store.storage.private_key_path.write_text("corrupt")
    with pytest.raises(InvalidKeyError):
        file_store.load()
    # Corrupt material is never silently replaced
    with pytest.raises(InvalidKeyError):
        file_store.get_or_create()


def test_mismatched_storage_is_loud(keypair, other_keypair):
    storage = MemoryKeyStorage()
    storage.write(keypair.private_pem(), other_keypair.public_pem())
    with pytest.raises(InvalidKeyError):
        KeyStore(storage).load()


def test_public_key_pem(memory_store):
    pem = memory_store.public_key_pem()
    assert pem.startswith("-----BEGIN PUBLIC KEY-----")
    assert pem == memory_store.public_key_pem()


def test_missing_public_half_keeps_identity(file_store):
    pair = file_store.get_or_create()
    private_pem = file_store.storage.private_key_path.read_bytes()
    file_store.storage.public_key_path.unlink()

    again = file_store.get_or_create()
    assert again.public_bytes() == pair.public_bytes()
    assert file_store.storage.private_key_path.read_bytes() == private_pem
    # The public half is restored on disk
    assert file_store.storage.public_key_path.read_bytes() == pair.public_pem()


def test_missing_private_half_is_loud(file_store):
    file_store.get_or_create()
    public_pem = file_store.storage.public_key_path.read_bytes()
    file_store.storage.private_key_path.unlink()

    with pytest.raises(KeyStoreError):
        file_store.load()
    with pytest.raises(KeyStoreError):
        file_store.get_or_create()
    assert not file_store.storage.private_key_path.exists()
    assert file_store.storage.public_key_path.read_bytes() == public_pem


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_overwritten_private_key_is_restricted(tmp_path, keypair):
    storage = FileKeyStorage(tmp_path / "keys")
    storage.directory.mkdir()
    storage.private_key_path.write_bytes(b"old")
    os.chmod(storage.private_key_path, 0o644)

    storage.write(keypair.private_pem(), keypair.public_pem())
    mode = stat.S_IMODE(os.stat(storage.private_key_path).st_mode)
    assert mode == 0o600
    assert storage.private_key_path.read_bytes() == keypair.private_pem()

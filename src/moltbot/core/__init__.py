# SPDX-License-Identifier: MPL-2.0
"""Core functionality for Moltbot."""
from moltbot.core.attestation import sign, sign_with_embedded_key
from moltbot.core.canonicalization import MESSAGE_SEPARATOR, canonicalize
from moltbot.core.crypto import KeyPair, export_public_key_pem
from moltbot.core.feed import Feed, verify_post
from moltbot.core.keystore import FileKeyStorage, KeyStore, MemoryKeyStorage
from moltbot.core.models import Attestation, Post, VerifiedPost
from moltbot.core.verification import (
    Embedded,
    Fallback,
    KeySource,
    NoKey,
    embedded_key_matches,
    resolve_key_source,
    verify,
    verify_attestation_object,
)

__all__ = [
    "MESSAGE_SEPARATOR",
    "canonicalize",
    "KeyPair",
    "export_public_key_pem",
    "sign",
    "sign_with_embedded_key",
    "verify",
    "verify_attestation_object",
    "resolve_key_source",
    "embedded_key_matches",
    "KeySource",
    "Embedded",
    "Fallback",
    "NoKey",
    "Attestation",
    "Post",
    "VerifiedPost",
    "KeyStore",
    "FileKeyStorage",
    "MemoryKeyStorage",
    "Feed",
    "verify_post",
]

# SPDX-License-Identifier: MPL-2.0
"""
Verification Module for Moltbot

This module checks attestations against the canonical (prompt, output)
message and decides which public key an attestation is checked against.

Verification is meant to run on untrusted, possibly corrupted third-party
data, so none of the functions here raise: malformed signatures, malformed
keys, keys of another algorithm and invalid signatures all yield ``False``.

Trust resolution
----------------
An attestation may embed the signer's public key. When it does, that key is
used and any fallback key is ignored. When it does not, the caller's
fallback key is used. With neither, verification fails.

A successful check against an embedded key only proves that the post is
internally consistent: anyone can sign a post with their own key and embed
it. To tie a post to a particular bot, compare the embedded key with a key
obtained out-of-band using :func:`embedded_key_matches`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from .canonicalization import canonicalize
from .crypto import PublicKeyLike, as_public_key, b64d, public_keys_equal, verify_message
from .exceptions import MoltbotError
from .models import Attestation

logger = logging.getLogger(__name__)

AttestationLike = Union[Attestation, Mapping[str, Any]]


@dataclass(frozen=True)
class Embedded:
    """The attestation carries its own public key."""

    key: str


@dataclass(frozen=True)
class Fallback:
    """The caller supplied the key out-of-band."""

    key: PublicKeyLike


@dataclass(frozen=True)
class NoKey:
    """No key is available; verification must fail."""


KeySource = Union[Embedded, Fallback, NoKey]


def resolve_key_source(
    attestation: Attestation,
    fallback_public_key: Optional[PublicKeyLike] = None,
) -> KeySource:
    """Pick the key an attestation is checked against.

    Priority: embedded key, then ``fallback_public_key``, then nothing.
    """
    if attestation.public_key is not None:
        return Embedded(attestation.public_key)
    if fallback_public_key is not None:
        return Fallback(fallback_public_key)
    return NoKey()


def verify(prompt: str, output: str, signature: str, public_key: PublicKeyLike) -> bool:
    """Check that ``signature`` is valid for ``(prompt, output)`` under ``public_key``.

    Args:
        prompt: The prompt text
        output: The output text
        signature: Base64 text of the raw Ed25519 signature
        public_key: Key object, KeyPair or SPKI PEM text/bytes

    Returns:
        True only if the signature verifies; False for every failure.
    """
    try:
        message = canonicalize(prompt, output)
        raw_signature = b64d(signature)
        key = as_public_key(public_key)
    except MoltbotError as exc:
        logger.debug("Verification failed: %s", exc)
        return False

    if not verify_message(key, raw_signature, message):
        logger.debug("Verification failed: invalid signature")
        return False
    return True


def _coerce_attestation(attestation: AttestationLike) -> Optional[Attestation]:
    if isinstance(attestation, Attestation):
        return attestation
    if not isinstance(attestation, Mapping):
        return None
    try:
        return Attestation.model_validate(attestation)
    except ValidationError as exc:
        logger.debug("Malformed attestation: %s", exc)
        return None


def verify_attestation_object(
    prompt: str,
    output: str,
    attestation: AttestationLike,
    fallback_public_key: Optional[PublicKeyLike] = None,
) -> bool:
    """Verify an attestation using the embedded key or the fallback key.

    A present but malformed embedded key fails verification; it never falls
    through to ``fallback_public_key``.
    """
    att = _coerce_attestation(attestation)
    if att is None:
        return False

    source = resolve_key_source(att, fallback_public_key)
    if isinstance(source, NoKey):
        logger.debug("Verification failed: no public key available")
        return False
    logger.debug("Verifying against %s key", type(source).__name__.lower())
    return verify(prompt, output, att.signature, source.key)


def embedded_key_matches(attestation: AttestationLike, known_public_key: PublicKeyLike) -> bool:
    """Return True if the attestation embeds exactly ``known_public_key``."""
    att = _coerce_attestation(attestation)
    if att is None or att.public_key is None:
        return False
    try:
        embedded = as_public_key(att.public_key)
        known = as_public_key(known_public_key)
    except MoltbotError as exc:
        logger.debug("Key comparison failed: %s", exc)
        return False
    return public_keys_equal(embedded, known)

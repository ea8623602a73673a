# SPDX-License-Identifier: MPL-2.0
"""Cryptographic primitives and helpers for Moltbot.

This module wraps the Ed25519 implementation from ``cryptography`` and the
PEM encodings used to share keys: PKCS#8 for private keys and
SubjectPublicKeyInfo for public keys. Every loader raises
:class:`~moltbot.core.exceptions.InvalidKeyError` for material that is
malformed or belongs to another algorithm.
"""

from __future__ import annotations

import base64
import binascii
import hmac
from dataclasses import dataclass
from typing import Union, cast

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from moltbot.core.exceptions import EncodingError, InvalidKeyError

SIGNATURE_LENGTH = 64

PrivateKeyLike = Union["KeyPair", ed25519.Ed25519PrivateKey, str, bytes]
PublicKeyLike = Union["KeyPair", ed25519.Ed25519PublicKey, str, bytes]


@dataclass(frozen=True)
class KeyPair:
    """Represents an Ed25519 public/private key pair.

    The public key is always derived from the private key when a pair is
    generated or loaded from a single private PEM, so the two halves cannot
    drift apart.
    """

    private_key: ed25519.Ed25519PrivateKey
    public_key: ed25519.Ed25519PublicKey

    @classmethod
    def generate(cls) -> KeyPair:
        """Generate a new key pair."""

        private_key = ed25519.Ed25519PrivateKey.generate()
        return cls(private_key=private_key, public_key=private_key.public_key())

    @classmethod
    def from_private_pem(cls, private_pem: Union[str, bytes]) -> KeyPair:
        """Create a KeyPair from a PKCS#8 PEM private key."""

        private_key = load_private_key(private_pem)
        return cls(private_key=private_key, public_key=private_key.public_key())

    @classmethod
    def from_pem(cls, private_pem: Union[str, bytes], public_pem: Union[str, bytes]) -> KeyPair:
        """Create a KeyPair from separately stored PEM halves.

        Raises:
            InvalidKeyError: If either half is invalid or they do not match.
        """

        private_key = load_private_key(private_pem)
        public_key = load_public_key(public_pem)
        if not public_keys_equal(private_key.public_key(), public_key):
            raise InvalidKeyError("Public key does not match private key")
        return cls(private_key=private_key, public_key=public_key)

    def private_pem(self) -> bytes:
        """Get the private key as unencrypted PKCS#8 PEM."""
        return cast(
            "bytes",
            self.private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            ),
        )

    def public_pem(self) -> bytes:
        """Get the public key as SubjectPublicKeyInfo PEM."""
        return export_public_key_pem(self.public_key).encode("ascii")

    def public_bytes(self) -> bytes:
        """Get the public key as raw bytes."""
        return raw_public_bytes(self.public_key)


def _to_bytes(data: Union[str, bytes], what: str) -> bytes:
    if isinstance(data, str):
        try:
            return data.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidKeyError(f"{what} PEM must be ASCII text") from exc
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    raise InvalidKeyError(f"Unsupported {what} key type: {type(data).__name__}")


def load_private_key(private_pem: Union[str, bytes]) -> ed25519.Ed25519PrivateKey:
    """Load an Ed25519 private key from PKCS#8 PEM."""

    try:
        key = serialization.load_pem_private_key(_to_bytes(private_pem, "private"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyError(f"Failed to load private key: {exc}") from exc

    if not isinstance(key, ed25519.Ed25519PrivateKey):
        raise InvalidKeyError(
            "The provided key is not an Ed25519 private key",
            details={"key_type": type(key).__name__},
        )
    return key


def load_public_key(public_pem: Union[str, bytes]) -> ed25519.Ed25519PublicKey:
    """Load an Ed25519 public key from SubjectPublicKeyInfo PEM."""

    try:
        key = serialization.load_pem_public_key(_to_bytes(public_pem, "public"))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyError(f"Failed to load public key: {exc}") from exc

    if not isinstance(key, ed25519.Ed25519PublicKey):
        raise InvalidKeyError(
            "Unsupported public key type. Must be Ed25519.",
            details={"key_type": type(key).__name__},
        )
    return key


def as_private_key(key: PrivateKeyLike) -> ed25519.Ed25519PrivateKey:
    """Coerce a KeyPair, key object or PEM into an Ed25519 private key."""

    if isinstance(key, KeyPair):
        return key.private_key
    if isinstance(key, ed25519.Ed25519PrivateKey):
        return key
    if isinstance(key, (str, bytes, bytearray)):
        return load_private_key(key)
    raise InvalidKeyError(f"Unsupported private key type: {type(key).__name__}")


def as_public_key(key: PublicKeyLike) -> ed25519.Ed25519PublicKey:
    """Coerce a KeyPair, key object or PEM into an Ed25519 public key."""

    if isinstance(key, KeyPair):
        return key.public_key
    if isinstance(key, ed25519.Ed25519PublicKey):
        return key
    if isinstance(key, (str, bytes, bytearray)):
        return load_public_key(key)
    raise InvalidKeyError(f"Unsupported public key type: {type(key).__name__}")


def export_public_key_pem(public_key: PublicKeyLike) -> str:
    """Export a public key as SubjectPublicKeyInfo PEM text."""

    key = as_public_key(public_key)
    return key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


def raw_public_bytes(public_key: ed25519.Ed25519PublicKey) -> bytes:
    """Return the 32 raw bytes of an Ed25519 public key."""
    return cast(
        "bytes",
        public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        ),
    )


def public_keys_equal(a: ed25519.Ed25519PublicKey, b: ed25519.Ed25519PublicKey) -> bool:
    """Compare two public keys by their raw bytes in constant time."""
    return hmac.compare_digest(raw_public_bytes(a), raw_public_bytes(b))


def b64e(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64d(data: str) -> bytes:
    """Strictly decode standard base64 text.

    Raises:
        EncodingError: If ``data`` is not text or not valid base64.
    """

    if not isinstance(data, str):
        raise EncodingError(f"Expected base64 text, not {type(data).__name__}")
    try:
        return base64.b64decode(data.encode("ascii"), validate=True)
    except (UnicodeEncodeError, binascii.Error) as exc:
        raise EncodingError(f"Invalid base64 data: {exc}") from exc


def sign_message(private_key: ed25519.Ed25519PrivateKey, message: bytes) -> bytes:
    """Sign ``message`` directly with Ed25519 (no pre-hash)."""
    return cast("bytes", private_key.sign(message))


def verify_message(public_key: ed25519.Ed25519PublicKey, signature: bytes, message: bytes) -> bool:
    """Return True if ``signature`` is valid for ``message``."""
    if len(signature) != SIGNATURE_LENGTH:
        return False
    try:
        public_key.verify(signature, message)
    except InvalidSignature:
        return False
    else:
        return True

# SPDX-License-Identifier: MPL-2.0
"""Attestation creation."""
import logging

from .canonicalization import canonicalize
from .crypto import (
    PrivateKeyLike,
    PublicKeyLike,
    as_private_key,
    as_public_key,
    b64e,
    export_public_key_pem,
    public_keys_equal,
    sign_message,
)
from .exceptions import InvalidKeyError
from .models import Attestation

logger = logging.getLogger(__name__)


def sign(prompt: str, output: str, private_key: PrivateKeyLike) -> Attestation:
    """Create an attestation over ``(prompt, output)``.

    Only the holder of ``private_key`` can produce a signature that verifies
    for this exact pair. Ed25519 is deterministic, so signing the same pair
    twice with the same key yields the same signature.

    Raises:
        InvalidKeyError: If ``private_key`` is not an Ed25519 private key.
        EncodingError: If the pair has no canonical message.
    """
    key = as_private_key(private_key)
    message = canonicalize(prompt, output)
    signature = sign_message(key, message)
    logger.debug("Signed %d byte message", len(message))
    return Attestation(signature=b64e(signature))


def sign_with_embedded_key(
    prompt: str,
    output: str,
    private_key: PrivateKeyLike,
    public_key: PublicKeyLike,
) -> Attestation:
    """Create an attestation that also carries the signer's public key PEM.

    Useful when several bot identities share one feed.

    Raises:
        InvalidKeyError: If either key is invalid or they are not a pair.
    """
    priv = as_private_key(private_key)
    pub = as_public_key(public_key)
    if not public_keys_equal(priv.public_key(), pub):
        raise InvalidKeyError("Public key does not match private key")

    attestation = sign(prompt, output, priv)
    return attestation.model_copy(update={"public_key": export_public_key_pem(pub)})

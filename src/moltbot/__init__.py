# SPDX-License-Identifier: MPL-2.0
"""
Moltbot - Signed prompt/output attestations for bot posts.

This package lets a bot bind each output to the prompt that produced it with
an Ed25519 signature, so anyone holding the bot's public key can verify a
post without trusting the channel that carried it.
"""

import contextlib
from importlib.metadata import version

# Set up version
__version__ = "0.1.0"

with contextlib.suppress(Exception):
    __version__ = version("moltbot-attest")


# Core components
from moltbot.bot import Moltbot, produce_output
from moltbot.core import (
    Attestation,
    Feed,
    KeyPair,
    KeyStore,
    Post,
    VerifiedPost,
    canonicalize,
    sign,
    sign_with_embedded_key,
    verify,
    verify_attestation_object,
)

# Public API
__all__ = [
    "canonicalize",
    "sign",
    "sign_with_embedded_key",
    "verify",
    "verify_attestation_object",
    "Attestation",
    "Post",
    "VerifiedPost",
    "KeyPair",
    "KeyStore",
    "Feed",
    "Moltbot",
    "produce_output",
    "__version__",
]

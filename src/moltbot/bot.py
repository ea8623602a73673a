# SPDX-License-Identifier: MPL-2.0
"""The bot: produce an output for a prompt and attest to it."""

from __future__ import annotations

import logging
from typing import Callable

from moltbot.core.attestation import sign, sign_with_embedded_key
from moltbot.core.keystore import KeyStore
from moltbot.core.models import Post

logger = logging.getLogger(__name__)

OutputProducer = Callable[[str], str]


def produce_output(prompt: str) -> str:
    """Stub content generation. Replace with real model inference."""
    return f'[moltbot] You said: "{prompt}"'


class Moltbot:
    """Runs an output producer and signs every result with the bot key.

    Example:
        >>> bot = Moltbot(KeyStore(MemoryKeyStorage()))
        >>> post = bot.run("Hello")
    """

    def __init__(
        self,
        key_store: KeyStore,
        producer: OutputProducer = produce_output,
        embed_public_key: bool = True,
    ) -> None:
        """
        Args:
            key_store: Source of the bot identity.
            producer: Computes an output from a prompt.
            embed_public_key: Embed the public key PEM in each attestation.
        """
        self.key_store = key_store
        self.producer = producer
        self.embed_public_key = embed_public_key

    def run(self, prompt: str) -> Post:
        """Produce and attest an output for ``prompt``.

        Raises:
            InvalidKeyError: If the stored key pair is unusable.
            EncodingError: If the prompt or output has no canonical message.
        """
        pair = self.key_store.get_or_create()
        output = self.producer(prompt)
        if self.embed_public_key:
            attestation = sign_with_embedded_key(prompt, output, pair.private_key, pair.public_key)
        else:
            attestation = sign(prompt, output, pair.private_key)
        logger.info("Attested output for prompt of %d characters", len(prompt))
        return Post(prompt=prompt, output=output, attestation=attestation)

    def public_key_pem(self) -> str:
        """Return the bot's public key for sharing with verifiers."""
        return self.key_store.public_key_pem()

# SPDX-License-Identifier: MPL-2.0
"""Data models for Moltbot.

The wire format uses camelCase (``publicKey``) to stay compatible with
existing feeds; Python code uses the snake_case attribute names.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Attestation(BaseModel):
    """A signature over a canonical (prompt, output) message.

    ``public_key``, when present, is the SPKI PEM of the signing key. It only
    proves that a post is internally consistent; it says nothing about who
    owns the key unless it is compared with a key known in advance.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    signature: str
    public_key: Optional[str] = Field(default=None, alias="publicKey")

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-ready dict, omitting ``publicKey`` when absent."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Post(BaseModel):
    """A prompt, the bot's output for it, and the attestation binding them.

    Only ``prompt`` and ``output`` are covered by the signature.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompt: str
    output: str
    attestation: Attestation

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-ready dict persisted in the feed."""
        return {
            "prompt": self.prompt,
            "output": self.output,
            "attestation": self.attestation.to_wire(),
        }

    def as_post(self) -> "Post":
        """Strip any derived fields, returning a plain :class:`Post`."""
        return Post(prompt=self.prompt, output=self.output, attestation=self.attestation)


class VerifiedPost(Post):
    """A post annotated with its verification outcome at read time."""

    verified: bool

    def to_wire(self) -> Dict[str, Any]:
        data = super().to_wire()
        data["verified"] = self.verified
        return data

    @property
    def badge(self) -> str:
        return "Verified by moltbot" if self.verified else "Unverified"

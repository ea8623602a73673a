# SPDX-License-Identifier: MPL-2.0
"""Canonical message construction for (prompt, output) attestations.

The signed message is ``utf8(prompt) + NUL + utf8(output)``. There is no
version byte: any change to this layout is a new, incompatible scheme and
producers and verifiers must move together.

Because the NUL separator is only unambiguous when it never appears inside
either field, text containing it is rejected instead of being signed.
"""

from __future__ import annotations

from moltbot.core.exceptions import CanonicalizationError, EncodingError

MESSAGE_SEPARATOR = "\0"
_SEPARATOR_BYTES = MESSAGE_SEPARATOR.encode("utf-8")


def _encode(value: object, field: str) -> bytes:
    if not isinstance(value, str):
        raise EncodingError(
            f"{field} must be text, not {type(value).__name__}",
            details={"field": field},
        )
    if MESSAGE_SEPARATOR in value:
        raise CanonicalizationError(
            f"{field} contains the reserved NUL separator",
            details={"field": field, "position": value.index(MESSAGE_SEPARATOR)},
        )
    try:
        return value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(f"{field} is not encodable as UTF-8: {exc}", details={"field": field}) from exc


def canonicalize(prompt: str, output: str) -> bytes:
    """Return the exact bytes that are signed for ``(prompt, output)``.

    No Unicode normalisation, trimming or case folding is applied, so
    ``"World"`` and ``"world"`` produce different messages.

    Raises:
        CanonicalizationError: If either field contains the NUL separator.
        EncodingError: If either field is not text or is not valid UTF-8.
    """

    return _encode(prompt, "prompt") + _SEPARATOR_BYTES + _encode(output, "output")

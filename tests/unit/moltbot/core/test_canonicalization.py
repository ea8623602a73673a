# SPDX-License-Identifier: MPL-2.0
import pytest

from moltbot.core.canonicalization import MESSAGE_SEPARATOR, canonicalize
from moltbot.core.exceptions import CanonicalizationError, EncodingError


def test_canonicalize_layout():
    assert canonicalize("Hello", "World") == b"Hello\x00World"
    assert canonicalize("", "") == b"\x00"
    assert MESSAGE_SEPARATOR == "\0"


def test_canonicalize_is_utf8():
    assert canonicalize("café", "☃") == "café".encode("utf-8") + b"\x00" + "☃".encode("utf-8")


def test_no_normalization():
    # Composed and decomposed forms must stay distinct
    composed = "\u00e9"
    decomposed = "e\u0301"
    assert canonicalize(composed, "x") != canonicalize(decomposed, "x")
    assert canonicalize(" a ", "b") == b" a \x00b"
    assert canonicalize("Hello", "World") != canonicalize("Hello", "world")


def test_deterministic():
    assert canonicalize("p", "o") == canonicalize("p", "o")


@pytest.mark.parametrize("prompt,output", [("a\0b", "c"), ("a", "b\0c")])
def test_separator_rejected(prompt, output):
    # "a\0b" + "c" would otherwise collide with "a" + "b\0c"
    with pytest.raises(CanonicalizationError) as exc_info:
        canonicalize(prompt, output)
    assert exc_info.value.details["field"] in ("prompt", "output")


def test_non_text_rejected():
    with pytest.raises(EncodingError):
        canonicalize(b"bytes", "x")  # type: ignore[arg-type]
    with pytest.raises(EncodingError):
        canonicalize("x", None)  # type: ignore[arg-type]


def test_lone_surrogate_rejected():
    with pytest.raises(EncodingError):
        canonicalize("\ud800", "x")

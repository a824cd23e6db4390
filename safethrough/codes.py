"""Random codes used for application authorisation."""

from __future__ import annotations

import random
import string

__all__ = ["CODE_LENGTH", "ORIGIN_LENGTH", "generate_code", "generate_origin"]

CODE_LENGTH = 16
ORIGIN_LENGTH = 6

_CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
_ORIGIN_ALPHABET = string.digits


def _draw(alphabet: str, length: int, rng: random.Random | None) -> str:
    source = rng if rng is not None else random
    return "".join(source.choice(alphabet) for _ in range(length))


def generate_code(rng: random.Random | None = None) -> str:
    """Return a 16-character dynamic code of letters and digits."""
    return _draw(_CODE_ALPHABET, CODE_LENGTH, rng)


def generate_origin(rng: random.Random | None = None) -> str:
    """Return a 6-digit origin string for certificate authentication."""
    return _draw(_ORIGIN_ALPHABET, ORIGIN_LENGTH, rng)
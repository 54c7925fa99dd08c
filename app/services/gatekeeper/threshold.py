"""Decoding of rule thresholds, which are persisted as text."""

import re

from app.services.gatekeeper.errors import InvalidThreshold

_DIGITS = re.compile(r"[0-9]+")


def parse_threshold(raw: str) -> int:
    """
    Parse a persisted threshold into an int.

    Only base-10 non-negative integers are accepted. Surrounding whitespace is
    tolerated; signs, decimals and non-ASCII digits are not.

    Raises:
        InvalidThreshold: if ``raw`` is not a plain digit string.
    """
    if not isinstance(raw, str):
        raise InvalidThreshold(raw)

    value = raw.strip()
    if not _DIGITS.fullmatch(value):
        raise InvalidThreshold(raw)
    return int(value)

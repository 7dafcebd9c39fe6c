"""Split raw query text into tokens."""

from __future__ import annotations

import re

DELIMITERS: frozenset[str] = frozenset("=><()")

_DELIMITER_RE = re.compile(r"([=><()])")


def tokenize(text: str) -> list[str]:
    """Split *text* on whitespace, then split out delimiter characters.

    Each of ``= > < ( )`` becomes a token of its own; runs of other
    characters are kept intact. Never fails.

    >>> tokenize("cpu>=50 and (name)")
    ['cpu', '>', '=', '50', 'and', '(', 'name', ')']
    """
    tokens: list[str] = []
    for chunk in text.split():
        tokens.extend(part for part in _DELIMITER_RE.split(chunk) if part)
    return tokens

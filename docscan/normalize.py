"""
Deterministic normalization helpers for recognized course codes.

Only exact matching on normalized keys is performed; there is no fuzzy
matching anywhere in the pipeline.
"""

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def normalize_code(code: Optional[str]) -> str:
    """
    Map a free-text course code to its catalog lookup key.

    Uppercases and removes every whitespace character, including internal
    ones, so "CS 101", "cs101" and "C S 1 0 1" share the key "CS101".

    Args:
        code: Code as transcribed by the recognizer (may be None)

    Returns:
        Lookup key ("" for None)
    """
    if code is None:
        return ""
    return _WHITESPACE.sub("", str(code)).upper()


def dedupe_key(code: Optional[str]) -> str:
    """Key used when merging images: lowercase with all whitespace removed."""
    if code is None:
        return ""
    return _WHITESPACE.sub("", str(code)).lower()

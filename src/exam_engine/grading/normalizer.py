"""
Module: grading.normalizer

Purpose:
    Canonicalise raw answer text so that "A. Paris", " paris " and "PARIS"
    compare equal.

Key Functions:
    - normalize_answer: Trim, strip option-letter prefix, case-fold

Dependencies:
    - re (std)

Used By:
    - grading.grader
"""

from __future__ import annotations

import re
from typing import Optional

# Leading single-letter option label such as "A. " or "c."
_OPTION_PREFIX = re.compile(r"^[a-zA-Z]\.\s*")


def normalize_answer(text: Optional[str]) -> str:
    """
    Canonicalise an answer for comparison.

    Args:
        text: Raw answer; None is treated as empty

    Returns:
        Lower-cased text with surrounding whitespace and any leading
        option-letter prefix removed

    Example:
        >>> normalize_answer("A. Paris")
        'paris'
        >>> normalize_answer("  paris ")
        'paris'
    """
    if not text:
        return ""
    stripped = _OPTION_PREFIX.sub("", text.strip(), count=1)
    return stripped.strip().lower()

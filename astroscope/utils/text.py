"""
Text helpers shared by search and context building.

Markup rules are stated as data so they can be tested on their own:
- MARKUP_TAG: a complete `<...>` span is replaced by a space
- UNCLOSED_TAG: a `<` with no closing `>` swallows the rest of the field
- STRAY_BRACKET: any `>` left over after the two rules above
"""

import html
import re
from typing import List

MARKUP_TAG = re.compile(r"<[^>]*>")
UNCLOSED_TAG = re.compile(r"<[^>]*$")
STRAY_BRACKET = re.compile(r">")
WHITESPACE = re.compile(r"\s+")

# Everything that is not a word character or whitespace, plus underscore
PUNCTUATION = re.compile(r"[^\w\s]|_")


def strip_markup(text: str) -> str:
    """Remove markup and collapse whitespace. Never raises on malformed input."""
    if not text:
        return ""
    cleaned = html.unescape(text)
    cleaned = MARKUP_TAG.sub(" ", cleaned)
    cleaned = UNCLOSED_TAG.sub(" ", cleaned)
    cleaned = STRAY_BRACKET.sub(" ", cleaned)
    return WHITESPACE.sub(" ", cleaned).strip()


def truncate(text: str, max_chars: int) -> str:
    """Hard-truncate to max_chars code points (str slicing never splits a character)."""
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip()


def normalize_terms(text: str) -> List[str]:
    """Lower-case, delete punctuation, split on whitespace."""
    if not text:
        return []
    return PUNCTUATION.sub("", text.lower()).split()


def tokenize_field(text: str) -> List[str]:
    """Terms of a corpus field; markup is stripped before normalizing."""
    return normalize_terms(strip_markup(text))

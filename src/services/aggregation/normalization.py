"""
Key normalization for cigar records.

Every recognition of the same product has to land on the same record, no
matter how the recognizer spaced, cased or punctuated the brand and name.
"""

import re
import unicodedata

_NON_KEY_CHARS = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")


def normalize_product_name(text: str) -> str:
    """Lowercase, fold fullwidth forms, and drop everything outside [a-z0-9]."""
    if not text:
        return ""
    folded = unicodedata.normalize("NFKC", text).lower()
    folded = _WHITESPACE.sub("", folded)
    return _NON_KEY_CHARS.sub("", folded)


def product_display_name(brand: str, name: str) -> str:
    return f"{brand or ''} {name or ''}".strip()


def entity_key(brand: str, name: str) -> str:
    return normalize_product_name(product_display_name(brand, name))

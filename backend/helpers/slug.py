"""
Slug derivation for question titles.

The slug is the stable external identifier of a question, so the mapping
must be deterministic: the same title always yields the same slug and
titles that differ only in case, accents or punctuation collide.
Letters from any script are kept; only Latin accents are folded away.
"""

import hashlib
import re
import unicodedata

MAX_SLUG_LENGTH = 80

_DASH_RUNS = re.compile(r"-{2,}")


def _fold_latin_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    kept: list[str] = []
    for char in decomposed:
        # Drop accents sitting on ASCII letters (é -> e); keep marks elsewhere
        if unicodedata.combining(char) and kept and kept[-1].isascii():
            continue
        kept.append(char)
    return unicodedata.normalize("NFC", "".join(kept))


def _is_word_char(char: str) -> bool:
    return char.isalnum() or unicodedata.category(char).startswith("M")


def slugify(title: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """
    Derive a URL slug from a title.

    Args:
        title: Question title
        max_length: Upper bound on slug length

    Returns:
        Lower-case slug of dash-separated words. A title without any letters
        or digits maps to ``q-`` plus a short hash of the title.

    Examples:
        >>> slugify("Calculus help")
        'calculus-help'
        >>> slugify("  Équations   différentielles ?! ")
        'equations-differentielles'
        >>> slugify("Математика помощь")
        'математика-помощь'
    """
    folded = _fold_latin_accents(title).lower()
    dashed = "".join(char if _is_word_char(char) else "-" for char in folded)
    slug = _DASH_RUNS.sub("-", dashed).strip("-")

    if not slug:
        digest = hashlib.sha256(title.strip().encode("utf-8")).hexdigest()
        slug = f"q-{digest[:12]}"

    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")
    return slug

"""
Card name normalization for fuzzy matching against marketplace listings.

Catalog names ("Pikachu ex") and marketplace names ("Pikachu EX -
Illustration Rare") differ in variant suffixes, rarity labels and
punctuation. Both sides are reduced to bare lowercase alphanumerics.
"""

import re

# Applied in order. Suffix tokens are only stripped at the end of the
# string, label tokens wherever they first occur.
_NORMALIZATION_STEPS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\s*ex\s*$"),
    re.compile(r"\s*v\s*$"),
    re.compile(r"\s*vmax\s*$"),
    re.compile(r"\s*vstar\s*$"),
    re.compile(r"\s*gx\s*$"),
    re.compile(r"\s*alt art\s*"),
    re.compile(r"\s*special art\s*"),
    re.compile(r"\s*full art\s*"),
    re.compile(r"\s*illustration rare\s*"),
    re.compile(r"\s*special illustration rare\s*"),
    re.compile(r"\s*trainer gallery\s*"),
    re.compile(r"\s*pokemon\s*"),
)

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def _normalize_once(name: str) -> str:
    result = name.lower()
    for pattern in _NORMALIZATION_STEPS:
        result = pattern.sub("", result, count=1)
    return _NON_ALPHANUMERIC.sub("", result).strip()


def normalize_card_name(name: str) -> str:
    """
    Reduce a card name to a comparable key.

    The step chain is repeated until the result stops changing, so
    normalizing an already normalized name is a no-op.

    Examples:
        >>> normalize_card_name("Pikachu VMAX")
        'pikachu'
        >>> normalize_card_name("Pikachu - Illustration Rare")
        'pikachu'
    """
    previous = None
    result = name
    while result != previous:
        previous = result
        result = _normalize_once(result)
    return result


def names_match(first: str, second: str) -> bool:
    """
    True if either normalized name contains the other.

    A name that normalizes to nothing matches nothing.
    """
    a = normalize_card_name(first)
    b = normalize_card_name(second)
    if not a or not b:
        return False
    return a in b or b in a

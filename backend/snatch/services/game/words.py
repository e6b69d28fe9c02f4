"""Letter-bag arithmetic and the variation rule shared by claims and snatches."""

from collections import Counter
from typing import Iterable, List, Sequence

VARIATION_SUFFIXES = ('S', 'ED', 'ING', 'ER', 'EST', 'LY', 'Y')
MAX_PREFIX_EXTENSION = 3


def tiles_spell_word(tiles: Iterable[str], word: str) -> bool:
    """True when the tiles are exactly the letters of word, none left over."""
    return Counter(tiles) == Counter(word)


def tiles_available(tiles: Iterable[str], pool: Sequence[str]) -> bool:
    """Multiset containment: each tile consumes one matching pool entry."""
    return not (Counter(tiles) - Counter(pool))


def remove_tiles(tiles: Iterable[str], pool: List[str]) -> None:
    for tile in tiles:
        if tile in pool:
            pool.remove(tile)


def are_words_similar(a: str, b: str) -> bool:
    """Coarse anti-gaming check for plurals, tenses and short extensions.

    Not a morphological analyzer: a fixed suffix list plus a prefix rule
    allowing up to three extra letters.
    """
    if a == b:
        return True
    for suffix in VARIATION_SUFFIXES:
        if a == b + suffix or b == a + suffix:
            return True
    shorter, longer = (a, b) if len(a) < len(b) else (b, a)
    return longer.startswith(shorter) and len(longer) - len(shorter) <= MAX_PREFIX_EXTENSION

import random
from enum import Enum
from typing import Dict, List, Optional


class TileVariant(str, Enum):
    STANDARD = 'standard'
    REDUCED_VOWEL = 'reduced_vowel'


# Bananagrams distribution, 144 tiles
STANDARD_DISTRIBUTION: Dict[str, int] = {
    'A': 13, 'B': 3, 'C': 3, 'D': 6, 'E': 18, 'F': 3, 'G': 4, 'H': 3,
    'I': 12, 'J': 2, 'K': 2, 'L': 5, 'M': 3, 'N': 8, 'O': 11, 'P': 3,
    'Q': 2, 'R': 9, 'S': 6, 'T': 9, 'U': 6, 'V': 3, 'W': 3, 'X': 2,
    'Y': 3, 'Z': 2,
}

# Twelve fewer vowels than standard (A-3 E-3 I-2 O-2 U-2)
REDUCED_VOWEL_DISTRIBUTION: Dict[str, int] = dict(
    STANDARD_DISTRIBUTION, A=10, E=15, I=10, O=9, U=4,
)

DISTRIBUTIONS = {
    TileVariant.STANDARD: STANDARD_DISTRIBUTION,
    TileVariant.REDUCED_VOWEL: REDUCED_VOWEL_DISTRIBUTION,
}


def resolve_variant(variant=None, reduce_vowels: bool = False) -> TileVariant:
    """Map a client-supplied variant name or legacy vowel flag to a TileVariant.

    Raises ValueError for unknown names.
    """
    if variant is None or variant == '':
        return TileVariant.REDUCED_VOWEL if reduce_vowels else TileVariant.STANDARD
    if isinstance(variant, TileVariant):
        return variant
    return TileVariant(str(variant).strip().lower().replace('-', '_'))


class TileSupply:
    """Builds shuffled tile bags. The random source is injectable for tests."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def generate(self, variant: TileVariant = TileVariant.STANDARD) -> List[str]:
        tiles = []
        for letter, count in DISTRIBUTIONS[variant].items():
            tiles.extend([letter] * count)
        # Fisher-Yates; the end of the list is the top of the draw stack
        for i in range(len(tiles) - 1, 0, -1):
            j = self._rng.randint(0, i)
            tiles[i], tiles[j] = tiles[j], tiles[i]
        return tiles

    @staticmethod
    def total_count(variant: TileVariant = TileVariant.STANDARD) -> int:
        return sum(DISTRIBUTIONS[variant].values())

"""Game domain services: tiles, dictionary, the per-room state machine and the room registry.

Socket handlers and HTTP routes import from here, keeping transport
concerns separated from core game mechanics.
"""

from .lexicon import WordLexicon
from .registry import Departure, JoinResult, SessionRegistry
from .session import GameSession
from .tiles import TileSupply, TileVariant, resolve_variant

__all__ = [
    'Departure',
    'GameSession',
    'JoinResult',
    'SessionRegistry',
    'TileSupply',
    'TileVariant',
    'WordLexicon',
    'resolve_variant',
]

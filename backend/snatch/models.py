import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class GameStatus(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'


class Player:
    """A participant in one room, keyed by its socket session id."""

    def __init__(self, id: str, name: str, is_host: bool = False):
        self.id = id
        self.name = name
        self.is_host = is_host
        self.words: List[str] = []
        self.joined_at = time.time()

    @property
    def score(self) -> int:
        # One point per tile held; always derived from the word list
        return sum(len(w) for w in self.words)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'is_host': self.is_host,
            'words': list(self.words),
            'score': self.score,
            'joined_at': self.joined_at,
        }


@dataclass
class ActionResult:
    """Outcome of a session command. Failures carry a human-readable reason."""

    success: bool
    error: Optional[str] = None
    tile: Optional[str] = None

    @classmethod
    def ok(cls, tile: Optional[str] = None) -> 'ActionResult':
        return cls(success=True, tile=tile)

    @classmethod
    def fail(cls, error: str) -> 'ActionResult':
        return cls(success=False, error=error)

    def to_dict(self):
        payload = {'success': self.success}
        if self.error is not None:
            payload['error'] = self.error
        if self.tile is not None:
            payload['tile'] = self.tile
        return payload

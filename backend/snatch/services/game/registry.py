from __future__ import annotations

import logging
import random
import threading
from typing import Dict, List, NamedTuple, Optional

from snatch.models import ActionResult, GameStatus
from .lexicon import WordLexicon
from .session import GameSession
from .tiles import TileSupply, TileVariant

logger = logging.getLogger(__name__)

# No I, O, 0 or 1
ROOM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


class JoinResult(NamedTuple):
    result: ActionResult
    session: Optional[GameSession] = None


class Departure(NamedTuple):
    room_code: str
    session: GameSession
    was_host: bool
    new_host_id: Optional[str]


class SessionRegistry:
    """In-memory registry of live rooms and of which room each participant is in."""

    def __init__(
        self,
        lexicon: WordLexicon,
        rng: Optional[random.Random] = None,
        tile_supply: Optional[TileSupply] = None,
        code_length: int = 6,
        min_players: int = 2,
        max_players: int = 8,
    ):
        self.lexicon = lexicon
        self._rng = rng or random.Random()
        self.tile_supply = tile_supply or TileSupply(self._rng)
        self.code_length = code_length
        self.min_players = min_players
        self.max_players = max_players
        self._sessions: Dict[str, GameSession] = {}
        self._participant_rooms: Dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _generate_room_code(self) -> str:
        # Caller holds self._lock
        while True:
            code = ''.join(self._rng.choice(ROOM_CODE_ALPHABET) for _ in range(self.code_length))
            if code not in self._sessions:
                return code

    def create_room(
        self, host_name: str, participant_id: str, variant: TileVariant = TileVariant.STANDARD
    ) -> tuple[str, GameSession]:
        with self._lock:
            room_code = self._generate_room_code()
            session = GameSession(
                room_code,
                self.lexicon,
                tile_supply=self.tile_supply,
                variant=variant,
                min_players=self.min_players,
            )
            session.add_player(participant_id, host_name, is_host=True)
            self._sessions[room_code] = session
            self._participant_rooms[participant_id] = room_code
        logger.info(f"[room-created] room={room_code} host={host_name} variant={variant.value}")
        return room_code, session

    def join_room(self, room_code: str, name: str, participant_id: str) -> JoinResult:
        room_code = room_code.strip().upper()
        with self._lock:
            session = self._sessions.get(room_code)
            if not session:
                return JoinResult(ActionResult.fail('Room not found'))
            with session.lock:
                if session.status != GameStatus.WAITING:
                    return JoinResult(ActionResult.fail('Game already in progress'))
                if len(session.players) >= self.max_players:
                    return JoinResult(ActionResult.fail('Room is full'))
                session.add_player(participant_id, name, is_host=False)
            self._participant_rooms[participant_id] = room_code
        logger.info(f"[room-joined] room={room_code} player={name} count={len(session.players)}")
        return JoinResult(ActionResult.ok(), session)

    def lookup_by_code(self, room_code: str) -> Optional[GameSession]:
        return self._sessions.get(room_code.strip().upper())

    def lookup_by_participant(self, participant_id: str) -> Optional[GameSession]:
        room_code = self._participant_rooms.get(participant_id)
        return self._sessions.get(room_code) if room_code else None

    def remove_participant(self, participant_id: str) -> Optional[Departure]:
        """Drop a participant, deleting the room if it empties or handing host on."""
        with self._lock:
            room_code = self._participant_rooms.pop(participant_id, None)
            session = self._sessions.get(room_code) if room_code else None
            if not session:
                return None
            new_host_id = None
            with session.lock:
                player = session.remove_player(participant_id)
                was_host = bool(player and player.is_host)
                closed = not session.players
                if closed:
                    del self._sessions[room_code]
                elif was_host:
                    successor = next(iter(session.players.values()))
                    successor.is_host = True
                    new_host_id = successor.id
        if closed:
            logger.info(f"[room-closed] room={room_code}")
        elif was_host:
            logger.info(f"[host-changed] room={room_code} host={new_host_id}")
        return Departure(room_code, session, was_host, new_host_id)

    def active_games(self) -> List[dict]:
        with self._lock:
            sessions = list(self._sessions.values())
        return [
            {'room_code': s.room_code, 'player_count': len(s.players), 'status': s.status.value}
            for s in sessions
        ]

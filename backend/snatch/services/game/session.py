import functools
import logging
import threading
import time
from typing import Dict, List, Optional, Sequence

from snatch.models import ActionResult, GameStatus, Player
from .lexicon import MIN_WORD_LENGTH, WordLexicon, normalize
from .tiles import TileSupply, TileVariant
from .words import are_words_similar, remove_tiles, tiles_available, tiles_spell_word

logger = logging.getLogger(__name__)


def serialized(method):
    """Run the method while holding the session's lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class GameSession:
    """State machine for one room: waiting -> playing -> finished.

    Every command validates fully before mutating anything, so a failed
    command leaves the session exactly as it was. Commands against one
    session are serialized on ``lock``; separate sessions share nothing.
    """

    def __init__(
        self,
        room_code: str,
        lexicon: WordLexicon,
        tile_supply: Optional[TileSupply] = None,
        variant: TileVariant = TileVariant.STANDARD,
        min_players: int = 2,
    ):
        self.room_code = room_code
        self.lexicon = lexicon
        self.tile_supply = tile_supply or TileSupply()
        self.variant = variant
        self.min_players = min_players
        self.status = GameStatus.WAITING
        self.players: Dict[str, Player] = {}
        self.tile_pool: List[str] = []
        self.flipped_tiles: List[str] = []
        self.turn_order: List[str] = []
        self.current_turn: Optional[str] = None
        self.created_at = time.time()
        self.lock = threading.RLock()

    @property
    def tiles_remaining(self) -> int:
        return len(self.tile_pool)

    @property
    def total_tiles(self) -> int:
        return self.tile_supply.total_count(self.variant)

    @property
    def host(self) -> Optional[Player]:
        return next((p for p in self.players.values() if p.is_host), None)

    def _reject(self, action: str, reason: str) -> ActionResult:
        logger.debug(f"[{action}-rejected] room={self.room_code} reason={reason}")
        return ActionResult.fail(reason)

    # ---- Membership ----

    @serialized
    def add_player(self, player_id: str, name: str, is_host: bool = False) -> Player:
        # Late joiners are not added to turn_order until the next start_game
        player = Player(player_id, name, is_host)
        self.players[player_id] = player
        return player

    @serialized
    def remove_player(self, player_id: str) -> Optional[Player]:
        player = self.players.pop(player_id, None)
        if player_id in self.turn_order:
            idx = self.turn_order.index(player_id)
            self.turn_order.remove(player_id)
            if self.current_turn == player_id:
                # The next player in rotation slid into the removed slot
                self.current_turn = self.turn_order[idx % len(self.turn_order)] if self.turn_order else None
        return player

    # ---- Lifecycle ----

    @serialized
    def start_game(self) -> ActionResult:
        if self.status != GameStatus.WAITING:
            return self._reject('start', 'Game already started')
        if len(self.players) < self.min_players:
            return self._reject('start', f'Need at least {self.min_players} players')

        self.status = GameStatus.PLAYING
        self.tile_pool = self.tile_supply.generate(self.variant)
        self.flipped_tiles = []
        self.turn_order = list(self.players)
        self.current_turn = self.turn_order[0]
        logger.info(f"[game-started] room={self.room_code} players={len(self.players)} tiles={len(self.tile_pool)}")
        return ActionResult.ok()

    @serialized
    def end_game(self) -> ActionResult:
        self.status = GameStatus.FINISHED
        logger.info(f"[game-ended] room={self.room_code}")
        return ActionResult.ok()

    # ---- Turns ----

    def _advance_turn(self) -> None:
        idx = self.turn_order.index(self.current_turn)
        self.current_turn = self.turn_order[(idx + 1) % len(self.turn_order)]

    @serialized
    def flip_tile(self, requester_id: str) -> ActionResult:
        if self.status != GameStatus.PLAYING:
            return self._reject('flip', 'Game not in progress')
        if self.current_turn != requester_id:
            return self._reject('flip', 'Not your turn')
        if not self.tile_pool:
            return self._reject('flip', 'No tiles remaining')

        tile = self.tile_pool.pop()
        self.flipped_tiles.append(tile)
        self._advance_turn()
        logger.info(f"[tile-flipped] room={self.room_code} tile={tile} remaining={len(self.tile_pool)}")
        return ActionResult.ok(tile=tile)

    # ---- Words ----

    def is_word_variation(self, word: str, exclude: Sequence[str] = ()) -> bool:
        """True if word is too close to any word held in this room."""
        for player in self.players.values():
            for existing in player.words:
                if existing not in exclude and are_words_similar(word, existing):
                    return True
        return False

    @serialized
    def claim_word(self, player_id: str, word: str, tiles: Sequence[str]) -> ActionResult:
        if self.status != GameStatus.PLAYING:
            return self._reject('claim', 'Game not in progress')
        player = self.players.get(player_id)
        if not player:
            return self._reject('claim', 'Player not found')

        word = normalize(word)
        tiles = [normalize(t) for t in tiles]
        if len(word) < MIN_WORD_LENGTH:
            return self._reject('claim', f'Word must be at least {MIN_WORD_LENGTH} letters')
        if not self.lexicon.is_valid(word):
            return self._reject('claim', 'Not a valid word')
        if not tiles_spell_word(tiles, word):
            return self._reject('claim', 'Tiles do not spell the word')
        if not tiles_available(tiles, self.flipped_tiles):
            return self._reject('claim', 'Some tiles are not available')
        if self.is_word_variation(word):
            return self._reject('claim', 'Cannot use variations of existing words')

        remove_tiles(tiles, self.flipped_tiles)
        player.words.append(word)
        logger.info(f"[claim] room={self.room_code} player={player.name} word={word} score={player.score}")
        return ActionResult.ok()

    @serialized
    def snatch_word(
        self,
        snatcher_id: str,
        target_id: str,
        old_words: Sequence[str],
        table_tiles: Sequence[str],
        new_word: str,
    ) -> ActionResult:
        if self.status != GameStatus.PLAYING:
            return self._reject('snatch', 'Game not in progress')
        snatcher = self.players.get(snatcher_id)
        target = self.players.get(target_id)
        if not snatcher:
            return self._reject('snatch', 'Snatcher not found')
        if not target:
            return self._reject('snatch', 'Target player not found')

        new_word = normalize(new_word)
        old_words = [normalize(w) for w in old_words]
        table_tiles = [normalize(t) for t in table_tiles]
        if len(new_word) < MIN_WORD_LENGTH:
            return self._reject('snatch', f'Word must be at least {MIN_WORD_LENGTH} letters')
        if not self.lexicon.is_valid(new_word):
            return self._reject('snatch', 'Not a valid word')
        # Membership per entry, so a repeated entry can match one held word twice
        for old in old_words:
            if old not in target.words:
                return self._reject('snatch', f'Target does not have word: {old}')
        if not tiles_available(table_tiles, self.flipped_tiles):
            return self._reject('snatch', 'Some table tiles are not available')
        if not tiles_spell_word(''.join(old_words) + ''.join(table_tiles), new_word):
            return self._reject('snatch', 'Tiles do not spell the new word')
        if any(are_words_similar(old, new_word) for old in old_words):
            return self._reject('snatch', 'New word cannot be a variation of old word')
        if self.is_word_variation(new_word, exclude=old_words):
            return self._reject('snatch', 'Cannot use variations of existing words')

        for old in old_words:
            if old in target.words:
                target.words.remove(old)
        remove_tiles(table_tiles, self.flipped_tiles)
        # snatcher is target on a self-snatch, so the new word lands on the same list
        snatcher.words.append(new_word)
        logger.info(
            f"[snatch] room={self.room_code} snatcher={snatcher.name} target={target.name} "
            f"old={','.join(old_words)} new={new_word}"
        )
        return ActionResult.ok()

    # ---- Views ----

    def get_final_scores(self) -> List[dict]:
        ranked = sorted(self.players.values(), key=lambda p: p.score, reverse=True)
        return [{'id': p.id, 'name': p.name, 'score': p.score, 'words': list(p.words)} for p in ranked]

    def get_state(self) -> dict:
        return {
            'room_code': self.room_code,
            'variant': self.variant.value,
            'status': self.status.value,
            'players': [p.to_dict() for p in self.players.values()],
            'flipped_tiles': list(self.flipped_tiles),
            'tiles_remaining': self.tiles_remaining,
            'total_tiles': self.total_tiles,
            'current_turn': self.current_turn,
            'turn_order': list(self.turn_order),
            'created_at': self.created_at,
        }

import os
import random
import sys
import pytest

# Ensure the backend root (containing the `snatch` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from snatch import create_app, socketio
from snatch.models import Player
from snatch.services.game import GameSession, TileSupply, WordLexicon

TEST_WORDS = [
    'CAT', 'DOG', 'SEE', 'TONE', 'TONED', 'TONES', 'STONE', 'STONES', 'STONED',
    'NOTE', 'NOTES', 'ONSET', 'TACTAC', 'DOTE', 'TOE', 'TEN', 'NET', 'SET',
]


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    MIN_PLAYERS = 2
    MAX_PLAYERS = 8
    ROOM_CODE_LENGTH = 6
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


def assert_invariants(session: GameSession) -> None:
    held = sum(len(w) for p in session.players.values() for w in p.words)
    assert len(session.tile_pool) + len(session.flipped_tiles) + held == session.total_tiles
    for p in session.players.values():
        assert p.score == sum(len(w) for w in p.words)
    assert len(set(session.turn_order)) == len(session.turn_order)
    assert session.current_turn in session.turn_order


@pytest.fixture()
def lexicon():
    return WordLexicon(TEST_WORDS)


@pytest.fixture()
def session(lexicon):
    """Waiting room with Alice (host) and Bob."""
    s = GameSession('ROOM42', lexicon, tile_supply=TileSupply(random.Random(42)))
    s.add_player('alice', 'Alice', is_host=True)
    s.add_player('bob', 'Bob')
    return s


@pytest.fixture()
def playing(session):
    """Started game between Alice and Bob; Alice flips first."""
    assert session.start_game().success
    return session


def set_table(session: GameSession, letters: str) -> None:
    """Move the given letters from the pool onto the table."""
    for letter in letters:
        session.tile_pool.remove(letter)
        session.flipped_tiles.append(letter)


def give_words(player: Player, session: GameSession, *words: str) -> None:
    """Hand a player words built from pool tiles."""
    for word in words:
        for letter in word:
            session.tile_pool.remove(letter)
        player.words.append(word)


@pytest.fixture()
def words_file(tmp_path):
    path = tmp_path / 'words.txt'
    path.write_text('\n'.join(TEST_WORDS + ['ab', '  tonic  ']) + '\n', encoding='utf-8')
    return path


@pytest.fixture()
def flask_app(words_file):
    class Config(TestConfig):
        DICTIONARY_PATH = str(words_file)

    application = create_app(Config)
    with application.app_context():
        yield application


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['session_registry']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass

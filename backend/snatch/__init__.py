from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def get_registry():
    """Return the room registry owned by the current app."""
    return current_app.extensions['session_registry']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One registry per app; rooms live only in memory
    from snatch.services.game import SessionRegistry, WordLexicon
    lexicon = WordLexicon.from_file(flask_app.config['DICTIONARY_PATH'])
    flask_app.extensions['session_registry'] = SessionRegistry(
        lexicon,
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6),
        min_players=flask_app.config.get('MIN_PLAYERS', 2),
        max_players=flask_app.config.get('MAX_PLAYERS', 8),
    )

    from snatch.main import main
    flask_app.register_blueprint(main)

    from snatch.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers against the initialized socketio instance
    from snatch.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('check-words')
    @click.argument('words', nargs=-1, required=True)
    def check_words_command(words):
        """Checks words against the loaded dictionary."""
        valid, invalid = lexicon.validate_many(words)
        click.echo(f'Dictionary size: {lexicon.word_count()}')
        click.echo(f"Valid: {', '.join(valid) or '-'}")
        click.echo(f"Invalid: {', '.join(invalid) or '-'}")

    flask_app.cli.add_command(check_words_command)

    return flask_app

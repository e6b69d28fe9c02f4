from flask import Blueprint, jsonify

from snatch import get_registry

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Snatch game server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'games': get_registry().active_games()})

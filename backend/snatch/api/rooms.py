from flask import Blueprint, jsonify

from snatch import get_registry

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Returns a summary of every live room.
    """
    return jsonify(get_registry().active_games())


@rooms.route('/<string:room_code>/state', methods=['GET'])
def get_room_state(room_code):
    """
    Returns the full state of a room, as sent to its players.
    """
    session = get_registry().lookup_by_code(room_code)
    if not session:
        return jsonify({'error': 'Room not found'}), 404
    with session.lock:
        return jsonify(session.get_state())


@rooms.route('/<string:room_code>/scores', methods=['GET'])
def get_room_scores(room_code):
    """
    Returns players ranked by score.
    """
    session = get_registry().lookup_by_code(room_code)
    if not session:
        return jsonify({'error': 'Room not found'}), 404
    with session.lock:
        return jsonify({'status': session.status.value, 'scores': session.get_final_scores()})

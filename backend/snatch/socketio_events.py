from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from typing import Any, Dict, Optional

from snatch import get_registry, socketio
from snatch.services.game import GameSession, resolve_variant
from snatch.services.game.lexicon import normalize

Ack = Dict[str, Any]


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room(room_code: str) -> str:
    return f"room:{room_code}"


def _fail(error: str) -> Ack:
    return {'success': False, 'error': error}


def _text(value) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _text_list(value):
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return None
    return value


def _broadcast(session: GameSession, event: str, payload: Ack, skip_self: bool = False) -> None:
    socketio.emit(
        event,
        payload,
        to=_room(session.room_code),
        namespace=request.namespace,
        skip_sid=_get_sid() if skip_self else None,
    )


def _session_or_none() -> Optional[GameSession]:
    return get_registry().lookup_by_participant(_get_sid())


def handle_connect(auth=None):
    emit('connected', {'participant_id': _get_sid()})


def handle_create_room(data=None):
    data = data or {}
    name = _text(data.get('player_name'))
    if not name:
        return _fail('player_name is required')
    try:
        variant = resolve_variant(data.get('variant'), bool(data.get('reduce_vowels')))
    except ValueError:
        return _fail('Unknown tile variant')

    registry = get_registry()
    sid = _get_sid()
    if registry.lookup_by_participant(sid):
        return _fail('Already in a room')
    room_code, session = registry.create_room(name, sid, variant)
    join_room(_room(room_code))
    with session.lock:
        state = session.get_state()
    return {'success': True, 'room_code': room_code, 'participant_id': sid, 'game_state': state}


def handle_join_room(data=None):
    data = data or {}
    room_code = _text(data.get('room_code'))
    name = _text(data.get('player_name'))
    if not all([room_code, name]):
        return _fail('room_code and player_name are required')

    registry = get_registry()
    sid = _get_sid()
    if registry.lookup_by_participant(sid):
        return _fail('Already in a room')
    joined = registry.join_room(room_code, name, sid)
    if not joined.result.success:
        return joined.result.to_dict()

    session = joined.session
    join_room(_room(session.room_code))
    with session.lock:
        _broadcast(session, 'player_joined', {'player': session.players[sid].to_dict()}, skip_self=True)
        state = session.get_state()
    return {'success': True, 'participant_id': sid, 'game_state': state}


def handle_start_game(data=None):
    session = _session_or_none()
    if not session:
        return _fail('Game not found')
    with session.lock:
        player = session.players.get(_get_sid())
        if not (player and player.is_host):
            return _fail('Only host can start game')
        result = session.start_game()
        if not result.success:
            return result.to_dict()
        _broadcast(session, 'game_started', {'game_state': session.get_state()})
    return {'success': True}


def handle_flip_tile(data=None):
    session = _session_or_none()
    if not session:
        return _fail('Game not found')
    with session.lock:
        result = session.flip_tile(_get_sid())
        if not result.success:
            return result.to_dict()
        _broadcast(session, 'tile_flipped', {
            'tile': result.tile,
            'flipped_tiles': list(session.flipped_tiles),
            'tiles_remaining': session.tiles_remaining,
            'current_turn': session.current_turn,
        })
    return result.to_dict()


def handle_claim_word(data=None):
    data = data or {}
    word = _text(data.get('word'))
    tiles = _text_list(data.get('tiles'))
    if word is None or tiles is None:
        return _fail('word and tiles are required')
    session = _session_or_none()
    if not session:
        return _fail('Game not found')

    sid = _get_sid()
    with session.lock:
        result = session.claim_word(sid, word, tiles)
        if not result.success:
            return result.to_dict()
        _broadcast(session, 'word_claimed', {
            'player_id': sid,
            'player_name': session.players[sid].name,
            'word': word.upper(),
            'tiles': [normalize(t) for t in tiles],
            'flipped_tiles': list(session.flipped_tiles),
        })
    return {'success': True}


def handle_snatch_word(data=None):
    data = data or {}
    target_id = _text(data.get('target_player_id'))
    old_words = _text_list(data.get('old_words'))
    table_tiles = _text_list(data.get('table_tiles', []))
    new_word = _text(data.get('new_word'))
    if target_id is None or old_words is None or table_tiles is None or new_word is None:
        return _fail('target_player_id, old_words and new_word are required')
    session = _session_or_none()
    if not session:
        return _fail('Game not found')

    sid = _get_sid()
    with session.lock:
        result = session.snatch_word(sid, target_id, old_words, table_tiles, new_word)
        if not result.success:
            return result.to_dict()
        _broadcast(session, 'word_snatched', {
            'snatcher_id': sid,
            'snatcher_name': session.players[sid].name,
            'target_id': target_id,
            'target_name': session.players[target_id].name,
            'old_words': [normalize(w) for w in old_words],
            'new_word': new_word.upper(),
            'flipped_tiles': list(session.flipped_tiles),
        })
    return {'success': True}


def handle_end_game(data=None):
    session = _session_or_none()
    if not session:
        return _fail('Game not found')
    with session.lock:
        player = session.players.get(_get_sid())
        if not (player and player.is_host):
            return _fail('Only host can end game')
        session.end_game()
        scores = session.get_final_scores()
        _broadcast(session, 'game_ended', {'final_scores': scores})
    return {'success': True, 'final_scores': scores}


def _depart(sid: str) -> Optional[str]:
    """Remove the participant from its room and tell whoever is left."""
    departure = get_registry().remove_participant(sid)
    if not departure:
        return None
    session = departure.session
    with session.lock:
        if session.players:
            _broadcast(session, 'player_left', {
                'player_id': sid,
                'was_host': departure.was_host,
                'new_host': departure.new_host_id,
            }, skip_self=True)
    return departure.room_code


def handle_leave_room(data=None):
    room_code = _depart(_get_sid())
    if not room_code:
        return _fail('Not in a room')
    leave_room(_room(room_code))
    return {'success': True}


def handle_disconnect(reason=None):
    room_code = _depart(_get_sid())
    if room_code:
        current_app.logger.info(f"[disconnect] sid={_get_sid()} room={room_code} reason={reason}")


def handle_error(exc):
    current_app.logger.error(f"[socket-error] sid={_get_sid()} error={exc}", exc_info=exc)
    return _fail(str(exc))


_EVENTS = (
    ('connect', handle_connect),
    ('disconnect', handle_disconnect),
    ('create_room', handle_create_room),
    ('join_room', handle_join_room),
    ('start_game', handle_start_game),
    ('flip_tile', handle_flip_tile),
    ('claim_word', handle_claim_word),
    ('snatch_word', handle_snatch_word),
    ('end_game', handle_end_game),
    ('leave_room', handle_leave_room),
)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in _EVENTS:
            socketio.on_event(event, handler, namespace=namespace)
    socketio.on_error_default(handle_error)

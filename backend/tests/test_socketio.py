NS = '/ws'


def _events(sio, name):
    return [pkt['args'][0] for pkt in sio.get_received(NS) if pkt['name'] == name]


def _create(sio, name='Alice', **extra):
    return sio.emit('create_room', {'player_name': name, **extra}, namespace=NS, callback=True)


def _room_with_two(make_sio_client):
    host, guest = make_sio_client(), make_sio_client()
    created = _create(host)
    joined = guest.emit('join_room', {'room_code': created['room_code'], 'player_name': 'Bob'},
                        namespace=NS, callback=True)
    assert joined['success']
    host.get_received(NS)
    guest.get_received(NS)
    return host, guest, created, joined


def test_socket_connect(make_sio_client):
    sio = make_sio_client()
    assert sio.is_connected(NS)
    connected = _events(sio, 'connected')
    assert connected and connected[0]['participant_id']


def test_create_room_ack(make_sio_client):
    sio = make_sio_client()
    ack = _create(sio, reduce_vowels=True)
    assert ack['success']
    assert len(ack['room_code']) == 6
    state = ack['game_state']
    assert state['status'] == 'waiting'
    assert state['variant'] == 'reduced_vowel'
    assert state['players'][0]['id'] == ack['participant_id']
    assert state['players'][0]['is_host'] is True


def test_create_room_validation(make_sio_client):
    sio = make_sio_client()
    assert _create(sio, name='  ')['error'] == 'player_name is required'
    assert _create(sio, variant='scrabble')['error'] == 'Unknown tile variant'
    assert _create(sio)['success']
    assert _create(sio)['error'] == 'Already in a room'


def test_join_room_notifies_others(make_sio_client):
    host, guest = make_sio_client(), make_sio_client()
    created = _create(host)
    host.get_received(NS)
    ack = guest.emit('join_room', {'room_code': created['room_code'].lower(), 'player_name': 'Bob'},
                     namespace=NS, callback=True)
    assert ack['success']
    assert [p['name'] for p in ack['game_state']['players']] == ['Alice', 'Bob']
    joined = _events(host, 'player_joined')
    assert joined[0]['player']['name'] == 'Bob'
    assert joined[0]['player']['id'] == ack['participant_id']
    assert not _events(guest, 'player_joined')


def test_join_unknown_room(make_sio_client):
    sio = make_sio_client()
    ack = sio.emit('join_room', {'room_code': 'ZZZZZZ', 'player_name': 'Bob'}, namespace=NS, callback=True)
    assert ack == {'success': False, 'error': 'Room not found'}


def test_start_game_is_host_only(make_sio_client):
    host, guest, created, _ = _room_with_two(make_sio_client)
    assert guest.emit('start_game', namespace=NS, callback=True)['error'] == 'Only host can start game'
    assert host.emit('start_game', namespace=NS, callback=True) == {'success': True}
    started = _events(guest, 'game_started')
    assert started[0]['game_state']['status'] == 'playing'
    assert started[0]['game_state']['current_turn'] == created['participant_id']
    assert host.emit('start_game', namespace=NS, callback=True)['error'] == 'Game already started'


def test_start_game_needs_two_players(make_sio_client):
    host = make_sio_client()
    _create(host)
    assert host.emit('start_game', namespace=NS, callback=True)['error'] == 'Need at least 2 players'


def test_commands_outside_a_room(make_sio_client):
    sio = make_sio_client()
    assert sio.emit('flip_tile', namespace=NS, callback=True)['error'] == 'Game not found'
    assert sio.emit('end_game', namespace=NS, callback=True)['error'] == 'Game not found'
    assert sio.emit('leave_room', namespace=NS, callback=True)['error'] == 'Not in a room'


def test_flip_tile_broadcast(make_sio_client):
    host, guest, created, joined = _room_with_two(make_sio_client)
    host.emit('start_game', namespace=NS, callback=True)
    guest.get_received(NS)
    assert guest.emit('flip_tile', namespace=NS, callback=True)['error'] == 'Not your turn'
    ack = host.emit('flip_tile', namespace=NS, callback=True)
    assert ack['success']
    flipped = _events(guest, 'tile_flipped')
    assert flipped[0]['tile'] == ack['tile']
    assert flipped[0]['flipped_tiles'] == [ack['tile']]
    assert flipped[0]['tiles_remaining'] == 143
    assert flipped[0]['current_turn'] == joined['participant_id']


def test_claim_and_snatch_flow(make_sio_client, registry):
    host, guest, created, joined = _room_with_two(make_sio_client)
    host.emit('start_game', namespace=NS, callback=True)
    session = registry.lookup_by_code(created['room_code'])
    for letter in 'TONES':
        session.tile_pool.remove(letter)
        session.flipped_tiles.append(letter)
    host.get_received(NS)
    guest.get_received(NS)

    ack = host.emit('claim_word', {'word': 'tone', 'tiles': ['t', 'o', 'n', 'e']}, namespace=NS, callback=True)
    assert ack == {'success': True}
    claimed = _events(guest, 'word_claimed')[0]
    assert claimed['player_id'] == created['participant_id']
    assert claimed['word'] == 'TONE'
    assert claimed['flipped_tiles'] == ['S']

    ack = guest.emit('snatch_word', {
        'target_player_id': created['participant_id'],
        'old_words': ['TONE'],
        'table_tiles': ['S'],
        'new_word': 'STONE',
    }, namespace=NS, callback=True)
    assert ack == {'success': True}
    snatched = _events(host, 'word_snatched')[0]
    assert snatched['snatcher_name'] == 'Bob'
    assert snatched['target_name'] == 'Alice'
    assert snatched['old_words'] == ['TONE']
    assert snatched['new_word'] == 'STONE'
    assert snatched['flipped_tiles'] == []
    assert session.players[joined['participant_id']].score == 5
    assert session.players[created['participant_id']].score == 0


def test_claim_failures_are_acked(make_sio_client):
    host, guest, _, _ = _room_with_two(make_sio_client)
    host.emit('start_game', namespace=NS, callback=True)
    assert host.emit('claim_word', {'word': 'TONE'}, namespace=NS, callback=True)['error'] == 'word and tiles are required'
    assert host.emit('claim_word', {'word': 'TONE', 'tiles': 'TONE'}, namespace=NS, callback=True)['success'] is False
    ack = host.emit('claim_word', {'word': 'TONE', 'tiles': list('TONE')}, namespace=NS, callback=True)
    assert ack == {'success': False, 'error': 'Some tiles are not available'}
    assert not _events(guest, 'word_claimed')


def test_end_game_is_host_only(make_sio_client):
    host, guest, created, _ = _room_with_two(make_sio_client)
    host.emit('start_game', namespace=NS, callback=True)
    assert guest.emit('end_game', namespace=NS, callback=True)['error'] == 'Only host can end game'
    ack = host.emit('end_game', namespace=NS, callback=True)
    assert ack['success']
    assert [s['name'] for s in ack['final_scores']] == ['Alice', 'Bob']
    ended = _events(guest, 'game_ended')
    assert ended[0]['final_scores'] == ack['final_scores']


def test_host_disconnect_promotes_next_player(make_sio_client, registry):
    host, guest, created, joined = _room_with_two(make_sio_client)
    host.disconnect(namespace=NS)
    left = _events(guest, 'player_left')
    assert left == [{'player_id': created['participant_id'], 'was_host': True, 'new_host': joined['participant_id']}]
    session = registry.lookup_by_code(created['room_code'])
    assert session.players[joined['participant_id']].is_host


def test_leave_room_and_close(make_sio_client, registry):
    host, guest, created, _ = _room_with_two(make_sio_client)
    assert guest.emit('leave_room', namespace=NS, callback=True) == {'success': True}
    left = _events(host, 'player_left')
    assert left[0]['was_host'] is False
    assert left[0]['new_host'] is None
    host.emit('leave_room', namespace=NS, callback=True)
    assert registry.lookup_by_code(created['room_code']) is None


def test_broadcasts_carry_normalized_tiles_and_words(make_sio_client, registry):
    host, guest, created, joined = _room_with_two(make_sio_client)
    host.emit('start_game', namespace=NS, callback=True)
    session = registry.lookup_by_code(created['room_code'])
    for letter in 'TONES':
        session.tile_pool.remove(letter)
        session.flipped_tiles.append(letter)
    guest.get_received(NS)
    host.get_received(NS)

    ack = host.emit('claim_word', {'word': 'tone', 'tiles': [' t', 'o ', ' n ', 'e']}, namespace=NS, callback=True)
    assert ack == {'success': True}
    assert _events(guest, 'word_claimed')[0]['tiles'] == ['T', 'O', 'N', 'E']

    ack = guest.emit('snatch_word', {
        'target_player_id': created['participant_id'],
        'old_words': [' tone '],
        'table_tiles': [' s'],
        'new_word': 'stone',
    }, namespace=NS, callback=True)
    assert ack == {'success': True}
    assert _events(host, 'word_snatched')[0]['old_words'] == ['TONE']

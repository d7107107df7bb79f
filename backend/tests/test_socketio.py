from conftest import received

from livetimer import socketio, WS_NAMESPACE
from livetimer.models import User


def test_connect_without_session_is_refused(client, ws_connect, channels):
    ws = ws_connect(client)
    assert not ws.is_connected(WS_NAMESPACE)
    assert len(channels.registry) == 0


def test_connect_with_unknown_token_is_refused(client, ws_connect, channels):
    client.set_cookie('sessionId', 'forged-token')
    ws = ws_connect(client)
    assert not ws.is_connected(WS_NAMESPACE)
    assert len(channels.registry) == 0


def test_connect_pushes_only_own_timers(login_as, ws_connect, channels):
    alice = login_as('alice')
    bob = login_as('bob')
    mine = alice.post('/api/timers', json={'description': 'alice work'}).get_json()
    bob.post('/api/timers', json={'description': 'bob work'})

    ws = ws_connect(alice)
    assert ws.is_connected(WS_NAMESPACE)
    events = received(ws)
    assert len(events['all_timers']) == 1
    snapshot = events['all_timers'][0]
    assert snapshot['type'] == 'all_timers'
    assert [t['id'] for t in snapshot['timers']] == [mine['id']]
    assert all(t['name'] == 'alice' for t in snapshot['timers'])
    assert 'active_timers' not in events

    alice_id = User.query.filter_by(username='alice').first().id
    assert alice_id in channels.registry


def test_tick_broadcast_is_scoped_per_user(login_as, ws_connect, ticker):
    alice = login_as('alice')
    bob = login_as('bob')
    running = alice.post('/api/timers', json={'description': 'running'}).get_json()
    done = alice.post('/api/timers', json={'description': 'done'}).get_json()
    alice.post(f"/api/timers/{done['id']}/stop")

    alice_ws = ws_connect(alice)
    bob_ws = ws_connect(bob)
    received(alice_ws)
    received(bob_ws)

    ticker.tick()

    alice_events = received(alice_ws)
    all_ids = {t['id'] for t in alice_events['all_timers'][0]['timers']}
    assert all_ids == {running['id'], done['id']}
    active = alice_events['active_timers'][0]['timers']
    assert [t['id'] for t in active] == [running['id']]
    assert active[0]['progress'] == 1000

    bob_events = received(bob_ws)
    assert bob_events['all_timers'] == [{'type': 'all_timers', 'timers': []}]
    assert bob_events['active_timers'] == [{'type': 'active_timers', 'timers': []}]


def test_new_connection_replaces_previous_one(login_as, ws_connect, channels, ticker):
    alice = login_as('alice')
    old_ws = ws_connect(alice)
    new_ws = ws_connect(alice)
    assert len(channels.registry) == 1
    received(old_ws)
    received(new_ws)

    ticker.tick()
    assert received(old_ws) == {}
    assert set(received(new_ws)) == {'all_timers', 'active_timers'}

    # The superseded socket closing must not drop its replacement
    old_ws.disconnect(namespace=WS_NAMESPACE)
    assert len(channels.registry) == 1


def test_disconnect_unregisters(login_as, ws_connect, channels):
    alice = login_as('alice')
    ws = ws_connect(alice)
    assert len(channels.registry) == 1
    ws.disconnect(namespace=WS_NAMESPACE)
    assert len(channels.registry) == 0


def test_relay_echoes_to_every_connection(login_as, ws_connect):
    alice = login_as('alice')
    bob = login_as('bob')
    alice_ws = ws_connect(alice)
    bob_ws = ws_connect(bob)
    received(alice_ws)
    received(bob_ws)

    alice_ws.emit('active_timers', {'message': {'refresh': True}}, namespace=WS_NAMESPACE)

    expected = {'type': 'active_timers', 'message': {'refresh': True}, 'name': 'alice'}
    assert received(alice_ws) == {'active_timers': [expected]}
    assert received(bob_ws) == {'active_timers': [expected]}


def test_failed_push_does_not_block_other_users(login_as, ws_connect, channels, ticker, monkeypatch):
    alice = login_as('alice')
    bob = login_as('bob')
    ws_connect(alice)
    bob_ws = ws_connect(bob)
    received(bob_ws)
    alice_sid = channels.registry.get(User.query.filter_by(username='alice').first().id)

    real_emit = socketio.emit

    def broken_for_alice(event, *args, **kwargs):
        if kwargs.get('to') == alice_sid:
            raise ConnectionError('socket gone')
        return real_emit(event, *args, **kwargs)

    monkeypatch.setattr(socketio, 'emit', broken_for_alice)
    ticker.tick()
    assert set(received(bob_ws)) == {'all_timers', 'active_timers'}


def test_unknown_registered_user_is_skipped(login_as, ws_connect, channels):
    alice = login_as('alice')
    ws = ws_connect(alice)
    received(ws)
    channels.registry.register(987654, 'ghost-sid')

    assert channels.broadcast_all() == 1
    assert set(received(ws)) == {'all_timers', 'active_timers'}


def test_logged_out_session_cannot_connect(login_as, ws_connect):
    alice = login_as('alice')
    alice.get('/logout')
    ws = ws_connect(alice)
    assert not ws.is_connected(WS_NAMESPACE)

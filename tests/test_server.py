import time

import pytest

from live_roulette.server import create_app

from .conftest import fast_settings


def payloads(client):
    out = []
    for packet in client.get_received():
        if packet['name'] != 'message':
            continue
        args = packet['args']
        out.append(args[0] if isinstance(args, list) else args)
    return out


def wait_for(client, predicate, timeout=5.0):
    seen = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        seen.extend(payloads(client))
        if any(predicate(m) for m in seen):
            return seen
        time.sleep(0.02)
    pytest.fail(f"message never arrived, got {seen[-3:]}")


@pytest.fixture
def app_and_socketio():
    settings = fast_settings(tick_interval=0.005, wheel_friction=100.0, ball_friction=50.0)
    return create_app(settings)


def test_connect_receives_snapshot(app_and_socketio):
    app, socketio = app_and_socketio
    client = socketio.test_client(app)
    assert client.is_connected()
    [hello] = payloads(client)
    assert hello['message'] == 'Simulation state'
    assert hello['running'] is False
    client.disconnect()


def test_status_route(app_and_socketio):
    app, socketio = app_and_socketio
    response = app.test_client().get('/status')
    assert response.status_code == 200
    assert response.get_json() == {'running': False, 'roundId': 0, 'pendingBets': 0,
                                   'rouletteAngle': 0.0, 'angle': 0.0, 'relativeSpeed': 0.0}


def test_bet_ack_goes_only_to_sender(app_and_socketio):
    app, socketio = app_and_socketio
    alice = socketio.test_client(app)
    bob = socketio.test_client(app)
    payloads(alice), payloads(bob)

    alice.send({'type': 'placeBet', 'betType': 'color', 'betValue': 'red', 'amount': 5})
    [ack] = payloads(alice)
    assert ack == {'message': 'Bet placed', 'bet': {'kind': 'color', 'target': 'red', 'amount': 5}}
    assert payloads(bob) == []

    bob.send({'type': 'placeBet', 'betType': 'color', 'betValue': 'purple', 'amount': 5})
    assert payloads(bob)[0]['message'] == 'Bet rejected'
    assert len(app.extensions['roulette'].ledger) == 1


def test_disconnect_drops_bet(app_and_socketio):
    app, socketio = app_and_socketio
    controller = app.extensions['roulette']
    client = socketio.test_client(app)
    client.send({'type': 'placeBet', 'betType': 'number', 'betValue': 7, 'amount': 1})
    assert len(controller.ledger) == 1
    client.disconnect()
    assert len(controller.ledger) == 0


def test_reset_clears_bets(app_and_socketio):
    app, socketio = app_and_socketio
    controller = app.extensions['roulette']
    client = socketio.test_client(app)
    client.send({'type': 'placeBet', 'betType': 'even-odd', 'betValue': 'odd', 'amount': 1})
    client.send({'type': 'resetSimulation'})
    assert len(controller.ledger) == 0
    assert not controller.running


def test_full_round_over_socketio(app_and_socketio):
    app, socketio = app_and_socketio
    player = socketio.test_client(app)
    watcher = socketio.test_client(app)
    payloads(player), payloads(watcher)

    player.send({'type': 'placeBet', 'betType': 'color', 'betValue': 'black', 'amount': 10})
    player.send({'type': 'startSimulation'})

    seen = wait_for(player, lambda m: m.get('message') == 'Bet result')
    [final] = [m for m in seen if m.get('message') == 'Ball has stopped']
    [result] = [m for m in seen if m.get('message') == 'Bet result']
    assert result['winnings'] == (20 if final['color'] == 'black' else -10)
    assert any('rouletteAngle' in m for m in seen)

    watched = wait_for(watcher, lambda m: m.get('message') == 'Ball has stopped')
    assert not [m for m in watched if m.get('message') == 'Bet result']
    assert not app.extensions['roulette'].running

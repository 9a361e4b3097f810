import random

import pytest

from live_roulette.config import Settings
from live_roulette.controller import SimulationController


class FakeTransport:
    """Records what the controller publishes instead of talking to sockets."""

    def __init__(self):
        self.broadcasts = []
        self.sent = []
        self.tasks = []

    def broadcast(self, message):
        self.broadcasts.append(message)

    def send(self, handle, message):
        self.sent.append((handle, message))

    def start_task(self, fn, *args):
        self.tasks.append((fn, args))

    def sleep(self, seconds):
        pass

    def sent_to(self, handle):
        return [m for h, m in self.sent if h == handle]


def fast_settings(**overrides):
    values = dict(
        async_mode='threading',
        tick_interval=0.01,
        wheel_friction=20.0,
        ball_friction=5.0,
        wheel_speed_min=2.0,
        wheel_speed_max=4.0,
        ball_speed_min=8.0,
        ball_speed_max=12.0,
    )
    values.update(overrides)
    return Settings(**values)


def run_round(controller, limit=10000):
    ticks = 0
    while controller.tick():
        ticks += 1
        assert ticks < limit, "round never finished"
    return ticks


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def controller(transport):
    return SimulationController(
        fast_settings(),
        broadcast=transport.broadcast,
        send=transport.send,
        start_task=transport.start_task,
        sleep=transport.sleep,
        rng=random.Random(7),
    )

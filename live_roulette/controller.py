"""
The shared simulation: one wheel, one ball and one bet ledger per process.

Every mutation of the wheel, ball and ledger happens under ``self._lock``,
whether it comes from the tick loop or from a command handler. Messages
produced while holding the lock are delivered after it is released, and a
delivery failure never stops the loop.
"""
import json
import logging
import random
import threading

from .ledger import BetLedger, InvalidWager, parse_wager
from .physics import Ball, Wheel, resolve

logger = logging.getLogger(__name__)

IDLE, RUNNING = 'idle', 'running'


class SimulationController:
    def __init__(self, settings, broadcast, send, start_task, sleep, rng=None):
        """
        ``broadcast(message)`` reaches every connection, ``send(handle, message)``
        one connection. ``start_task(fn, *args)`` runs the tick loop in the
        background and ``sleep(seconds)`` paces it.
        """
        self.settings = settings
        self.wheel = Wheel(settings.wheel_friction)
        self.ball = Ball(settings.ball_friction)
        self.ledger = BetLedger()
        self.state = IDLE
        self.round_id = 0
        self._broadcast = broadcast
        self._send = send
        self._start_task = start_task
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._loop_token = None

    @property
    def running(self):
        return self.state == RUNNING

    # --- Commands ---
    def handle_command(self, handle, data):
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except ValueError:
                logger.warning("Ignoring non-JSON message from %s", handle)
                return
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed message from %s: %r", handle, data)
            return
        command = data.get('type')
        if command == 'startSimulation':
            self.start()
        elif command == 'resetSimulation':
            self.reset()
        elif command == 'placeBet':
            self.place_bet(handle, data)
        else:
            logger.warning("Ignoring unknown command %r from %s", command, handle)

    def start(self):
        """Begin a round. Ignored while a round is already running."""
        with self._lock:
            if self.state == RUNNING:
                logger.warning("Start ignored, round %d is still running", self.round_id)
                return False
            wheel_speed = self._rng.uniform(self.settings.wheel_speed_min, self.settings.wheel_speed_max)
            ball_speed = self._rng.uniform(self.settings.ball_speed_min, self.settings.ball_speed_max)
            self.wheel.start(wheel_speed)
            self.ball.start(ball_speed)
            self.round_id += 1
            self.state = RUNNING
            token = self._loop_token = object()
            round_id = self.round_id
        logger.info("Round %d started (wheel %.2f rad/s, ball %.2f rad/s)", round_id, wheel_speed, ball_speed)
        self._start_task(self._run, token)
        return True

    def reset(self):
        """Stop any running round and drop pending bets without settling them."""
        with self._lock:
            was_running = self.state == RUNNING
            self.state = IDLE
            self._loop_token = None
            dropped = len(self.ledger)
            self.ledger.clear()
        logger.info("Simulation reset (was %s, %d bets dropped)", RUNNING if was_running else IDLE, dropped)

    def place_bet(self, handle, data):
        try:
            wager = parse_wager(data, self.settings.min_bet, self.settings.max_bet)
        except InvalidWager as e:
            logger.warning("Rejected bet from %s: %s", handle, e)
            self._deliver([(handle, {'message': 'Bet rejected', 'reason': str(e)})])
            return None
        with self._lock:
            self.ledger.place(handle, wager)
        logger.info("Bet placed by %s: %s on %s %s", handle, wager.amount, wager.kind, wager.target)
        self._deliver([(handle, {'message': 'Bet placed', 'bet': wager.to_dict()})])
        return wager

    def disconnect(self, handle):
        with self._lock:
            wager = self.ledger.remove(handle)
        if wager is not None:
            logger.info("Dropped pending bet of disconnected %s", handle)

    def snapshot(self):
        with self._lock:
            return {
                'running': self.state == RUNNING,
                'roundId': self.round_id,
                'pendingBets': len(self.ledger),
                'rouletteAngle': round(self.wheel.angle, 2),
                'angle': round(self.ball.final_angle(self.wheel), 2),
                'relativeSpeed': round(self.ball.relative_speed(self.wheel), 2),
            }

    # --- Tick Loop ---
    def _run(self, token):
        while True:
            self._sleep(self.settings.tick_interval)
            try:
                if not self.tick(token):
                    return
            except Exception:
                logger.exception("Tick failed, aborting round %d", self.round_id)
                self._abort(token)
                return

    def _abort(self, token):
        with self._lock:
            if token is not self._loop_token:
                return
            self.state = IDLE
            self._loop_token = None
            self.ledger.clear()

    def tick(self, token=None):
        """
        Advance one timestep and publish the result. Returns False once the
        round is over or when ``token`` belongs to a loop that was reset.
        """
        with self._lock:
            if self.state != RUNNING or (token is not None and token is not self._loop_token):
                return False
            dt = self.settings.tick_interval
            self.wheel.advance(dt)
            self.ball.advance(dt)
            segment = resolve(self.wheel, self.ball)
            outbox = [(None, {
                'rouletteAngle': round(self.wheel.angle, 2),
                'angle': round(self.ball.final_angle(self.wheel), 2),
                'velocity': round(self.ball.velocity, 2),
                'segment': segment.number,
                'color': segment.color,
            })]
            finished = self.wheel.is_stopped() and self.ball.is_stopped()
            if finished:
                outbox.append((None, {
                    'message': 'Ball has stopped',
                    'finalSegment': segment.number,
                    'color': segment.color,
                }))
                results = self.ledger.settle(segment)
                for handle, wager, winnings in results:
                    outbox.append((handle, {'message': 'Bet result', 'bet': wager.to_dict(), 'winnings': winnings}))
                self.state = IDLE
                self._loop_token = None
                logger.info("Round %d finished on %d %s, %d bets settled",
                            self.round_id, segment.number, segment.color, len(results))
        self._deliver(outbox)
        return not finished

    def _deliver(self, outbox):
        for handle, message in outbox:
            try:
                if handle is None:
                    self._broadcast(message)
                else:
                    self._send(handle, message)
            except Exception:
                logger.exception("Failed to deliver message to %s", handle or 'all')

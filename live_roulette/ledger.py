import logging
import math
from dataclasses import asdict, dataclass

from .segments import BLACK, RED, SEGMENT_COUNT

logger = logging.getLogger(__name__)

# --- Bet Types & Payouts ---
NUMBER, COLOR, PARITY = 'number', 'color', 'even-odd'
EVEN, ODD = 'even', 'odd'
PAYOUTS = {NUMBER: 35, COLOR: 2, PARITY: 2}
TARGETS = {COLOR: (RED, BLACK), PARITY: (EVEN, ODD)}


class InvalidWager(ValueError):
    pass


@dataclass(frozen=True)
class Wager:
    kind: str
    target: object
    amount: float

    def to_dict(self):
        return asdict(self)


def _parse_number(value):
    if isinstance(value, bool):
        raise InvalidWager("betValue must be a pocket number")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidWager("betValue must be a pocket number") from None
    if isinstance(value, float) and value != number:
        raise InvalidWager("betValue must be a whole number")
    if not 0 <= number < SEGMENT_COUNT:
        raise InvalidWager(f"no pocket numbered {number}")
    return number


def _parse_amount(value, min_bet, max_bet):
    if isinstance(value, bool) or value is None:
        raise InvalidWager("amount must be a number")
    if not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidWager("amount must be a number") from None
    # Only floats can be inf or nan; ints of any size compare exactly.
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidWager("amount must be a finite number")
    if value <= 0:
        raise InvalidWager("amount must be positive")
    if value < min_bet or value > max_bet:
        raise InvalidWager(f"amount must be between {min_bet} and {max_bet}")
    return value


def parse_wager(data, min_bet=1, max_bet=100000):
    """Build a Wager from a ``placeBet`` payload, raising InvalidWager on bad input."""
    kind = data.get('betType')
    if kind not in PAYOUTS:
        raise InvalidWager(f"unknown betType {kind!r}")
    value = data.get('betValue')
    if kind == NUMBER:
        target = _parse_number(value)
    else:
        target = value.lower() if isinstance(value, str) else value
        if target not in TARGETS[kind]:
            raise InvalidWager(f"betValue for {kind} must be one of {', '.join(TARGETS[kind])}")
    return Wager(kind, target, _parse_amount(data.get('amount'), min_bet, max_bet))


def is_winner(wager, segment):
    if wager.kind == NUMBER:
        return wager.target == segment.number
    if wager.kind == COLOR:
        return wager.target == segment.color
    if wager.kind == PARITY:
        # Zero is neither even nor odd.
        if segment.number == 0:
            return False
        return (segment.number % 2 == 0) == (wager.target == EVEN)
    return False


def payout(wager, segment):
    if is_winner(wager, segment):
        return wager.amount * PAYOUTS[wager.kind]
    return -wager.amount


class BetLedger:
    """Pending wagers keyed by connection handle, one per handle."""

    def __init__(self):
        self._wagers = {}

    def __len__(self):
        return len(self._wagers)

    def __contains__(self, handle):
        return handle in self._wagers

    def get(self, handle):
        return self._wagers.get(handle)

    def place(self, handle, wager):
        if handle in self._wagers:
            logger.info("Replacing pending bet for %s", handle)
        self._wagers[handle] = wager

    def remove(self, handle):
        return self._wagers.pop(handle, None)

    def clear(self):
        self._wagers.clear()

    def settle(self, segment):
        results = [(handle, wager, payout(wager, segment)) for handle, wager in self._wagers.items()]
        self._wagers.clear()
        return results

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    secret_key: str = 'change-me'
    host: str = '0.0.0.0'
    port: int = 3003
    async_mode: str = 'eventlet'
    tick_interval: float = 0.01
    wheel_friction: float = 0.2
    ball_friction: float = 0.08
    wheel_speed_min: float = 2.0
    wheel_speed_max: float = 4.0
    ball_speed_min: float = 8.0
    ball_speed_max: float = 12.0
    min_bet: float = 1
    max_bet: float = 100000
    log_level: str = 'INFO'

    def __post_init__(self):
        if self.tick_interval <= 0:
            raise ValueError("tick interval must be positive")
        if self.wheel_friction <= 0 or self.ball_friction <= 0:
            raise ValueError("friction must be positive")
        if not 0 < self.wheel_speed_min <= self.wheel_speed_max:
            raise ValueError("wheel speed range is invalid")
        if not 0 < self.ball_speed_min <= self.ball_speed_max:
            raise ValueError("ball speed range is invalid")
        if not 0 < self.min_bet <= self.max_bet:
            raise ValueError("bet limits are invalid")


def _get_int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _get_float(name, default):
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def get_settings():
    load_dotenv()
    return Settings(
        secret_key=os.getenv('ROULETTE_SECRET_KEY') or Settings.secret_key,
        host=os.getenv('ROULETTE_HOST') or Settings.host,
        port=_get_int('ROULETTE_PORT', Settings.port),
        async_mode=os.getenv('ROULETTE_ASYNC_MODE') or Settings.async_mode,
        tick_interval=_get_float('ROULETTE_TICK_INTERVAL', Settings.tick_interval),
        wheel_friction=_get_float('ROULETTE_WHEEL_FRICTION', Settings.wheel_friction),
        ball_friction=_get_float('ROULETTE_BALL_FRICTION', Settings.ball_friction),
        wheel_speed_min=_get_float('ROULETTE_WHEEL_SPEED_MIN', Settings.wheel_speed_min),
        wheel_speed_max=_get_float('ROULETTE_WHEEL_SPEED_MAX', Settings.wheel_speed_max),
        ball_speed_min=_get_float('ROULETTE_BALL_SPEED_MIN', Settings.ball_speed_min),
        ball_speed_max=_get_float('ROULETTE_BALL_SPEED_MAX', Settings.ball_speed_max),
        min_bet=_get_float('ROULETTE_MIN_BET', Settings.min_bet),
        max_bet=_get_float('ROULETTE_MAX_BET', Settings.max_bet),
        log_level=(os.getenv('ROULETTE_LOG_LEVEL') or Settings.log_level).upper(),
    )

"""
Wheel and ball kinematics.

Both bodies decelerate under constant friction and are advanced with a
semi-implicit step: the angle moves by the velocity the body had at the start
of the tick, then the deceleration is applied. Once the ball comes to rest it
is carried by the wheel, so its pocket no longer depends on when it is read.
"""
import math

from .segments import SEGMENTS, SEGMENT_COUNT

TWO_PI = 2 * math.pi
SEGMENT_ARC = TWO_PI / SEGMENT_COUNT
G = 9.81


def wrap_angle(angle):
    """Normalize an angle into [0, 2pi)."""
    angle %= TWO_PI
    # -1e-17 % 2pi rounds up to exactly 2pi
    return 0.0 if angle >= TWO_PI else angle


class Wheel:
    def __init__(self, friction, angular_velocity=0.0, angle=0.0):
        if friction <= 0:
            raise ValueError("wheel friction must be positive")
        self.friction = friction
        self.angular_velocity = angular_velocity
        self.angle = wrap_angle(angle)

    def start(self, angular_velocity):
        # The angle is kept: the wheel never snaps back between rounds.
        self.angular_velocity = angular_velocity

    def advance(self, dt):
        self.angle = wrap_angle(self.angle + self.angular_velocity * dt)
        self.angular_velocity = max(0.0, self.angular_velocity - self.friction * dt)

    def is_stopped(self):
        return self.angular_velocity <= 0

    @property
    def speed(self):
        return max(self.angular_velocity, 0.0)


class Ball:
    def __init__(self, friction, velocity=0.0, angle=0.0):
        if friction <= 0:
            raise ValueError("ball friction must be positive")
        self.friction = friction
        self.velocity = velocity
        self.angle = wrap_angle(angle)
        self.stop_angle = None
        self.relative_angle_at_stop = None

    def start(self, velocity):
        self.velocity = velocity
        self.stop_angle = None
        self.relative_angle_at_stop = None

    def advance(self, dt):
        next_velocity = max(self.velocity - self.friction * G * dt, 0.0)
        if next_velocity <= 0 and self.stop_angle is None:
            self.stop_angle = self.angle
        self.angle = wrap_angle(self.angle + self.velocity * dt)
        self.velocity = next_velocity

    def is_stopped(self):
        return self.velocity <= 0

    @property
    def speed(self):
        return max(self.velocity, 0.0)

    def relative_speed(self, wheel):
        return abs(self.speed - wheel.speed)

    def relative_angle(self, wheel_angle):
        return wrap_angle(self.angle - wheel_angle)

    def _lock_to(self, wheel):
        if self.relative_angle_at_stop is None:
            self.relative_angle_at_stop = self.relative_angle(wheel.angle)
        return self.relative_angle_at_stop

    def final_angle(self, wheel):
        """Angle to display: the raw angle while rolling, then carried by the wheel."""
        if not self.is_stopped():
            return self.angle
        return wrap_angle(wheel.angle + self._lock_to(wheel))

    def segment(self, wheel):
        if self.is_stopped():
            relative = self._lock_to(wheel)
        else:
            relative = self.relative_angle(wheel.angle)
        return min(int(relative // SEGMENT_ARC), SEGMENT_COUNT - 1)


def resolve(wheel, ball):
    """
    Segment under the ball. Final once both bodies are stopped; before that
    the result is provisional and can change every tick.
    """
    return SEGMENTS[ball.segment(wheel)]

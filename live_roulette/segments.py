from dataclasses import dataclass

# --- European Wheel Layout ---
# Pocket numbers in physical order around the wheel, starting at the pocket
# right after zero. Zero closes the circle at index 36.
WHEEL_NUMBERS = (32, 15, 19, 4, 21, 2, 25, 17, 34, 6, 27, 13, 36, 11, 30, 8, 23, 10,
                 5, 24, 16, 33, 1, 20, 14, 31, 9, 22, 18, 29, 7, 28, 12, 35, 3, 26, 0)
RED_NUMBERS = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})
BLACK_NUMBERS = frozenset({2, 4, 6, 8, 10, 11, 13, 15, 17, 20, 22, 24, 26, 28, 29, 31, 33, 35})

RED, BLACK, GREEN = 'red', 'black', 'green'
SEGMENT_COUNT = len(WHEEL_NUMBERS)


@dataclass(frozen=True)
class Segment:
    index: int
    number: int
    color: str


def color_of(number):
    if number in RED_NUMBERS:
        return RED
    if number in BLACK_NUMBERS:
        return BLACK
    return GREEN


SEGMENTS = tuple(Segment(i, n, color_of(n)) for i, n in enumerate(WHEEL_NUMBERS))


def segment_for_number(number):
    return SEGMENTS[WHEEL_NUMBERS.index(number)]

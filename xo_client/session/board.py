"""Board geometry - maps 1-based positions to grid cells."""
from typing import Tuple

BOARD_SIZE = 10
MAX_POSITION = BOARD_SIZE * BOARD_SIZE


def is_valid_position(position: int) -> bool:
    return isinstance(position, int) and not isinstance(position, bool) \
        and 1 <= position <= MAX_POSITION


def position_to_cell(position: int) -> Tuple[int, int]:
    """Return zero-based (row, col) for a 1-based row-major position."""
    if not is_valid_position(position):
        raise ValueError(f"Position out of range: {position}")
    return (position - 1) // BOARD_SIZE, (position - 1) % BOARD_SIZE


def cell_to_position(row: int, col: int) -> int:
    """Inverse of position_to_cell."""
    if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
        raise ValueError(f"Cell out of range: ({row}, {col})")
    return row * BOARD_SIZE + col + 1

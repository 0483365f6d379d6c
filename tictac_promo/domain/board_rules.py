"""Board rules that are independent from HTTP, storage and the UI.

A board is a list of 9 cells in row-major order:

     0 | 1 | 2
    ---+---+---
     3 | 4 | 5
    ---+---+---
     6 | 7 | 8

Rule of thumb:
- OK: result evaluation, move selection, validation.
- Not OK: timers, sessions, network, global random state (pass ``rng``).
"""

import random
from enum import Enum
from typing import List, Optional, Sequence


class Mark(str, Enum):
    empty = " "
    player = "X"
    opponent = "O"


class Outcome(str, Enum):
    in_progress = "in_progress"
    player_win = "player_win"
    opponent_win = "opponent_win"
    draw = "draw"


class LogicError(RuntimeError):
    """Raised when a caller breaks an invariant of the game flow."""


BOARD_SIZE = 9
CENTER = 4

# Scan order matters: rows, then columns, then diagonals.
WINNING_LINES = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

WIN_OUTCOMES = {
    Mark.player: Outcome.player_win,
    Mark.opponent: Outcome.opponent_win,
}


def new_board() -> List[Mark]:
    return [Mark.empty] * BOARD_SIZE


def _check_board(board: Sequence[Mark]) -> None:
    if len(board) != BOARD_SIZE:
        raise ValueError(f"board must have {BOARD_SIZE} cells, got {len(board)}")


def empty_cells(board: Sequence[Mark]) -> List[int]:
    """Return the indices of empty cells in ascending order."""
    _check_board(board)
    return [index for index, cell in enumerate(board) if cell == Mark.empty]


def evaluate(board: Sequence[Mark]) -> Outcome:
    """Compute the result of the game from the board alone.

    Args:
        board (Sequence[Mark]): 9 cells, row-major

    Returns:
        Outcome: win for the mark of the first completed line, draw when the
            board is full without a line, otherwise in_progress
    """
    _check_board(board)
    for a, b, c in WINNING_LINES:
        if board[a] != Mark.empty and board[a] == board[b] == board[c]:
            return WIN_OUTCOMES[Mark(board[a])]
    if Mark.empty not in board:
        return Outcome.draw
    return Outcome.in_progress


def _completes_line(board: Sequence[Mark], cell: int, mark: Mark) -> bool:
    trial = list(board)
    trial[cell] = mark
    return evaluate(trial) == WIN_OUTCOMES[mark]


def select_move(board: Sequence[Mark], rng: Optional[random.Random] = None) -> int:
    """Pick the opponent's next cell.

    Priority, first applicable wins:
    1. a cell that wins right now (lowest index),
    2. a cell that blocks the player's immediate win (lowest index),
    3. the center,
    4. a uniformly random empty cell.

    Args:
        board (Sequence[Mark]): Current board, opponent to move
        rng (random.Random, optional): Source of randomness for step 4.

    Raises:
        LogicError: The board has no empty cell

    Returns:
        int: Cell index 0-8
    """
    available = empty_cells(board)
    if not available:
        raise LogicError("select_move called on a full board")

    for cell in available:
        if _completes_line(board, cell, Mark.opponent):
            return cell

    for cell in available:
        if _completes_line(board, cell, Mark.player):
            return cell

    if board[CENTER] == Mark.empty:
        return CENTER

    return (rng or random).choice(available)

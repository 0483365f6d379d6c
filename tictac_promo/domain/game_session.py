"""Client-side game flow: one human player against the heuristic opponent.

The session owns the board. Player moves are applied synchronously; the
opponent's reply is either run directly (headless use) or scheduled as a
deferred asyncio task that remembers the board generation it was scheduled
against and does nothing if the session moved on in the meantime.
"""

import asyncio
import logging
import random
from typing import Callable, List, Optional

from tictac_promo.domain.board_rules import (
    BOARD_SIZE,
    Mark,
    Outcome,
    evaluate,
    new_board,
    select_move,
)

OutcomeListener = Callable[[Outcome], None]


class GameSession:
    def __init__(self, rng: Optional[random.Random] = None):
        """Create a session in the initial state: empty board, player to move.

        Args:
            rng (random.Random, optional): Randomness for the opponent's fallback move.
        """
        self.rng = rng
        self.board: List[Mark] = new_board()
        self.turn: Mark = Mark.player
        self.outcome: Outcome = Outcome.in_progress
        # Bumped on every board change and on reset.
        self.generation = 0
        self._pending: Optional[asyncio.Task] = None
        self._listeners: List[OutcomeListener] = []

    @property
    def is_terminal(self) -> bool:
        return self.outcome != Outcome.in_progress

    def add_outcome_listener(self, listener: OutcomeListener) -> None:
        """Register a callback invoked once per game with the terminal outcome.

        A listener that raises is logged and skipped; the move still stands.
        """
        self._listeners.append(listener)

    def apply_player_move(self, cell_index: int) -> bool:
        """Place the player's mark.

        Occupied or out-of-range cells, moves out of turn and moves after the
        game ended are ignored.

        Args:
            cell_index (int): Target cell 0-8

        Returns:
            bool: True if the move was applied
        """
        if self.is_terminal or self.turn != Mark.player:
            return False
        if not 0 <= cell_index < BOARD_SIZE or self.board[cell_index] != Mark.empty:
            return False

        self._place(cell_index, Mark.player)
        return True

    def run_opponent_turn(self, expected_generation: Optional[int] = None) -> Optional[int]:
        """Let the opponent move now.

        Args:
            expected_generation (int, optional): If given, the move is only
                applied when the board is still at this generation.

        Returns:
            Optional[int]: The cell played, None if nothing was applied
        """
        if self.is_terminal or self.turn != Mark.opponent:
            return None
        if expected_generation is not None and expected_generation != self.generation:
            logging.debug(
                f"Dropping stale opponent turn (generation {expected_generation} != {self.generation})"
            )
            return None

        cell_index = select_move(self.board, self.rng)
        self._place(cell_index, Mark.opponent)
        return cell_index

    def schedule_opponent_turn(self, delay: float) -> Optional[asyncio.Task]:
        """Run the opponent turn after ``delay`` seconds on the running loop.

        Any previously scheduled turn is cancelled. The returned task resolves
        to the cell played, or None when the turn turned out to be stale.
        """
        if self.is_terminal or self.turn != Mark.opponent:
            return None
        self.cancel_pending()
        self._pending = asyncio.get_running_loop().create_task(
            self._deferred_opponent_turn(delay, self.generation)
        )
        return self._pending

    def cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def reset(self) -> None:
        """Discard the current game and return to the initial state."""
        self.cancel_pending()
        self.board = new_board()
        self.turn = Mark.player
        self.outcome = Outcome.in_progress
        self.generation += 1

    async def _deferred_opponent_turn(self, delay: float, generation: int) -> Optional[int]:
        if delay > 0:
            await asyncio.sleep(delay)
        return self.run_opponent_turn(expected_generation=generation)

    def _place(self, cell_index: int, mark: Mark) -> None:
        self.board[cell_index] = mark
        self.generation += 1
        self.outcome = evaluate(self.board)
        if self.is_terminal:
            logging.info(f"Game over: {self.outcome.value}")
            for listener in self._listeners:
                try:
                    listener(self.outcome)
                except Exception as e:
                    logging.error(f"Outcome listener failed: {e}")
            return
        self.turn = Mark.opponent if mark == Mark.player else Mark.player

import itertools
import random

import pytest

from tictac_promo.domain.board_rules import (
    WINNING_LINES,
    LogicError,
    Mark,
    Outcome,
    empty_cells,
    evaluate,
    new_board,
    select_move,
)

_ = Mark.empty
P = Mark.player
O = Mark.opponent


def test_evaluate_all_boards():
    for cells in itertools.product((_, P, O), repeat=9):
        board = list(cells)
        player_line = any(all(board[i] == P for i in line) for line in WINNING_LINES)
        opponent_line = any(all(board[i] == O for i in line) for line in WINNING_LINES)
        result = evaluate(board)
        if player_line and not opponent_line:
            assert result == Outcome.player_win
        elif opponent_line and not player_line:
            assert result == Outcome.opponent_win
        elif not player_line and not opponent_line:
            expected = Outcome.in_progress if _ in board else Outcome.draw
            assert result == expected
        else:
            assert result in (Outcome.player_win, Outcome.opponent_win)


def test_evaluate_top_row_win():
    assert evaluate([P, P, P, _, O, O, _, _, _]) == Outcome.player_win


def test_evaluate_full_board_draw():
    assert evaluate([P, O, P, P, O, O, O, P, P]) == Outcome.draw


def test_evaluate_empty_board_in_progress():
    assert evaluate(new_board()) == Outcome.in_progress


def test_evaluate_first_line_in_scan_order_wins():
    # Unreachable through legal play; only parallel lines can hold different marks.
    assert evaluate([P, P, P, O, O, O, _, _, _]) == Outcome.player_win
    assert evaluate([_, _, _, O, O, O, P, P, P]) == Outcome.opponent_win
    assert evaluate([O, P, _, O, P, _, O, P, _]) == Outcome.opponent_win


def test_evaluate_rejects_wrong_length():
    with pytest.raises(ValueError):
        evaluate([_] * 8)


def test_select_move_prefers_win_over_block():
    # O can win at 5 (row 3-4-5); P threatens 2 (row 0-1-2).
    board = [P, P, _, O, O, _, _, _, P]
    assert select_move(board) == 5


def test_select_move_blocks():
    board = [P, P, _, _, O, _, _, _, _]
    assert select_move(board) == 2


def test_select_move_scenario_after_two_player_moves():
    board = new_board()
    board[0] = P
    assert select_move(board) == 4
    board[4] = O
    board[1] = P
    assert select_move(board) == 2


def test_select_move_lowest_index_win():
    # O wins at 2 (row 0) and at 6 (column 0); the lower index is chosen.
    board = [O, O, _, O, P, P, _, P, _]
    assert select_move(board) == 2


def test_select_move_lowest_index_block():
    # P threatens 2 (row 0) and 6 (column 0).
    board = [P, P, _, P, O, _, _, _, _]
    assert select_move(board) == 2


def test_select_move_takes_center():
    board = [P, _, _, _, _, _, _, _, _]
    assert select_move(board) == 4


def test_select_move_random_fallback_is_empty_cell():
    board = [P, _, _, _, O, _, _, _, _]
    seen = set()
    for seed in range(50):
        cell = select_move(board, random.Random(seed))
        assert cell in empty_cells(board)
        seen.add(cell)
    assert len(seen) > 1


def test_select_move_single_cell_left():
    board = [P, O, P, P, O, O, O, P, _]
    assert select_move(board) == 8


def test_select_move_full_board_is_logic_error():
    with pytest.raises(LogicError):
        select_move([P, O, P, P, O, O, O, P, P])


def test_select_move_does_not_mutate_board():
    board = [P, P, _, _, O, _, _, _, _]
    before = list(board)
    select_move(board)
    assert board == before

import argparse
import asyncio
import logging
import pathlib
from typing import List, Optional

import httpx
import uvicorn

from tictac_promo.client import PromoGameClient
from tictac_promo.domain.board_rules import Mark, Outcome
from tictac_promo.domain.game_session import GameSession
from tictac_promo.domain.promo_codes import generate_candidate_code
from tictac_promo.identity import DEFAULT_ID_FILE, load_or_create_player_id
from tictac_promo.load_secrets import (
    log_level,
    opponent_delay_seconds,
    poll_interval_seconds,
)

RESULT_TEXT = {
    Outcome.player_win: "Brilliant victory!",
    Outcome.opponent_win: "The AI prevailed this time.",
    Outcome.draw: "Draw, the art of balance. Try again, victory is close.",
}


def parse_cell(answer: str) -> Optional[int]:
    """Map the typed cell number (1-9) to a board index, or None for anything else."""
    answer = answer.strip()
    if len(answer) != 1 or answer not in "123456789":
        return None
    return int(answer) - 1


def render_board(board: List[Mark]) -> str:
    rows = []
    for start in range(0, 9, 3):
        cells = [
            cell.value if cell != Mark.empty else str(start + offset + 1)
            for offset, cell in enumerate(board[start:start + 3])
        ]
        rows.append(" " + " | ".join(cells))
    return "\n---+---+---\n".join(rows)


async def report_outcome(
    client: PromoGameClient, player_id: str, outcome: Outcome
) -> Optional[str]:
    """Send the finished game to the server. Draws are not reported.

    Returns:
        Optional[str]: The promo code to display after a win
    """
    if outcome == Outcome.player_win:
        return await client.report_win(player_id, generate_candidate_code())
    if outcome == Outcome.opponent_win:
        await client.report_loss(player_id)
    return None


async def play(server: str, id_file: pathlib.Path, delay: float) -> None:
    player_id = load_or_create_player_id(id_file)
    async with httpx.AsyncClient(base_url=server) as http:
        client = PromoGameClient(http)

        if not (await client.get_status(player_id)).is_connected:
            print("Open this link in Telegram to receive your promo codes:")
            print(await client.connect_url(player_id))
            await client.wait_until_linked(player_id, interval=poll_interval_seconds)
            print("Telegram connected.")

        session = GameSession()
        while True:
            while not session.is_terminal:
                print(render_board(session.board))
                answer = await asyncio.to_thread(input, "Your move (1-9): ")
                cell_index = parse_cell(answer)
                if cell_index is None or not session.apply_player_move(cell_index):
                    print("That cell is not available.")
                    continue
                task = session.schedule_opponent_turn(delay)
                if task is not None:
                    print("The AI is thinking...")
                    await task

            print(render_board(session.board))
            print(RESULT_TEXT[session.outcome])
            try:
                promo_code = await report_outcome(client, player_id, session.outcome)
            except httpx.HTTPError as e:
                logging.error(f"Failed to report game result: {e}")
                print("Could not reach the server, the result was not saved.")
            else:
                if promo_code is not None:
                    print(f"Your exclusive promo code: {promo_code}")

            again = await asyncio.to_thread(input, "Play again? [y/N] ")
            if again.strip().lower() != "y":
                return
            session.reset()


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tic-tac-toe promo game")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("--host", type=str, default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8080)

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--server", type=str, default="http://localhost:8080")
    play_parser.add_argument("--id-file", type=pathlib.Path, default=DEFAULT_ID_FILE)
    play_parser.add_argument("--delay", type=float, default=opponent_delay_seconds)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = get_parser().parse_args(argv)
    logging.basicConfig(level=log_level)
    if args.command == "serve":
        uvicorn.run("tictac_promo.main:create_app", factory=True, host=args.host, port=args.port)
    elif args.command == "play":
        asyncio.run(play(args.server, args.id_file, args.delay))


if __name__ == "__main__":
    main()

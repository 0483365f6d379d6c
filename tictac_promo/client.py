import asyncio
import logging
from typing import Optional

import httpx

from tictac_promo.models.dc_models import PlayerStatusModel


class PromoGameClient:
    """Client for the promo game HTTP API."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http
        # Once linked, a player is never polled again by this client.
        self.linked_players = set()

    async def get_status(self, player_id: str) -> PlayerStatusModel:
        response = await self.http.get(f"/api/player/{player_id}")
        response.raise_for_status()
        return PlayerStatusModel.model_validate(response.json())

    async def connect_url(self, player_id: str) -> str:
        response = await self.http.get(f"/api/player/{player_id}/connect")
        response.raise_for_status()
        return response.json()["url"]

    async def wait_until_linked(
        self,
        player_id: str,
        interval: float = 2.0,
        max_attempts: Optional[int] = None,
    ) -> bool:
        """Poll the player status until the bot link is committed on the server

        Args:
            player_id (str): Anonymous id of the player
            interval (float): Seconds between two polls
            max_attempts (int, optional): Give up after this many polls

        Returns:
            bool: True once linked, False if max_attempts ran out
        """
        if player_id in self.linked_players:
            return True

        attempts = 0
        while max_attempts is None or attempts < max_attempts:
            status = await self.get_status(player_id)
            attempts += 1
            if status.is_connected:
                self.linked_players.add(player_id)
                return True
            logging.debug(f"Player {player_id} not linked yet (poll {attempts})")
            if max_attempts is None or attempts < max_attempts:
                await asyncio.sleep(interval)
        return False

    async def report_win(self, player_id: str, candidate_code: str) -> str:
        """Send a win and return the code to display (the server's, not the candidate)."""
        response = await self.http.post(
            "/api/game/win",
            json={"storageId": player_id, "promoCode": candidate_code},
        )
        response.raise_for_status()
        return response.json()["promoCode"]

    async def report_loss(self, player_id: str) -> None:
        response = await self.http.post("/api/game/loss", json={"storageId": player_id})
        response.raise_for_status()

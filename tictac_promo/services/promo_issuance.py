"""Promo issuance use cases.

- Routers call this module; it owns the per-player serialization.
- A player gets at most one promo code, ever. Later wins replay it.
- Notifications are dispatched after the decision is persisted and are never
  awaited by the request.
"""

import logging
from dataclasses import dataclass

from tictac_promo.key_lock_manager import KeyLockManager
from tictac_promo.notifier import (
    FIRST_WIN_MESSAGE,
    LOSS_MESSAGE,
    REPEAT_WIN_MESSAGE,
    NotificationDispatcher,
)
from tictac_promo.storage import PlayerStore


@dataclass(frozen=True)
class PromoIssueResult:
    promo_code: str
    first_issue: bool


class PromoIssuanceCoordinator:
    def __init__(
        self,
        store: PlayerStore,
        dispatcher: NotificationDispatcher,
        key_locks: KeyLockManager,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.key_locks = key_locks

    async def on_win(self, player_id: str, candidate_code: str) -> PromoIssueResult:
        """Decide which code the player gets for this win

        Args:
            player_id (str): Anonymous id of the player
            candidate_code (str): Code generated by the client, discarded if
                the player already owns one

        Raises:
            StorageError: The decision could not be persisted

        Returns:
            PromoIssueResult: The code the client must display
        """
        async with self.key_locks.hold(player_id):
            player = await self.store.get(player_id)
            if player is not None and player.last_promo_code is not None:
                result = PromoIssueResult(player.last_promo_code, first_issue=False)
            else:
                player = await self.store.upsert(player_id, last_promo_code=candidate_code)
                # Another process may have stored its own code first.
                result = PromoIssueResult(
                    player.last_promo_code,
                    first_issue=player.last_promo_code == candidate_code,
                )

        if result.first_issue:
            logging.info(f"Issued promo code to player {player_id}")
            message = FIRST_WIN_MESSAGE.format(code=result.promo_code)
        else:
            logging.info(f"Player {player_id} won again, replaying existing promo code")
            message = REPEAT_WIN_MESSAGE.format(code=result.promo_code)
        self.dispatcher.dispatch(player_id, message)
        return result

    async def on_loss(self, player_id: str) -> None:
        """Make sure the player is known and send a consolation message

        Args:
            player_id (str): Anonymous id of the player
        """
        async with self.key_locks.hold(player_id):
            await self.store.upsert(player_id)
        self.dispatcher.dispatch(player_id, LOSS_MESSAGE)

import logging

from tictac_promo.key_lock_manager import KeyLockManager
from tictac_promo.models.schema_models import PlayerRecordSchema
from tictac_promo.storage import PlayerStore

CONNECT_PREFIX = "connect_"


def connect_url(bot_username: str, player_id: str) -> str:
    """Deep link that opens the bot with ``/start connect_<player_id>``."""
    return f"https://t.me/{bot_username}?start={CONNECT_PREFIX}{player_id}"


class PlayerLinkService:
    def __init__(self, store: PlayerStore, key_locks: KeyLockManager):
        self.store = store
        self.key_locks = key_locks

    async def read_status(self, player_id: str) -> PlayerRecordSchema:
        """Return the player record, or an unlinked placeholder for unknown players.

        Reading never creates a record.
        """
        player = await self.store.get(player_id)
        if player is None:
            return PlayerRecordSchema(player_id=player_id)
        return player

    async def link(self, player_id: str, channel_id: str) -> PlayerRecordSchema:
        """Attach a chat to the player. Called by the bot, never by the game flow.

        Args:
            player_id (str): Anonymous id carried in the deep link
            channel_id (str): Chat that will receive notifications

        Returns:
            PlayerRecordSchema: The linked record
        """
        async with self.key_locks.hold(player_id):
            player = await self.store.link(player_id, channel_id)
        logging.info(f"Linked player {player_id} to chat {channel_id}")
        return player

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from tictac_promo.models.schema_models import PlayerRecordSchema
from tictac_promo.models.schemas import Player


class ReadData:
    @staticmethod
    async def read_player_data(player_id: str, session: AsyncSession) -> PlayerRecordSchema | None:
        """Read player data from database

        Args:
            player_id (str): To identify the player

        Returns:
            PlayerRecordSchema | None: Player record, None if the player is unknown
        """
        stmt = select(Player).where(Player.player_id == player_id)
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None:
            return None

        return PlayerRecordSchema.model_validate(result)

    @staticmethod
    async def read_player_row_for_update(player_id: str, session: AsyncSession) -> Player | None:
        """Read the player row and lock it until the surrounding transaction ends.

        NOTE: Call inside session.begin().
        """
        stmt = select(Player).where(Player.player_id == player_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalars().first()


class CreateData:
    @staticmethod
    def add_player_data(player_id: str, session: AsyncSession) -> Player:
        """Add an empty player row to the session (no code, no channel). Does not commit."""
        new_player = Player(
            player_id=player_id,
            notification_channel_id=None,
            last_promo_code=None,
            is_connected=False,
        )
        session.add(new_player)
        return new_player


class UpdateData:
    @staticmethod
    def set_promo_code_if_absent(player: Player, promo_code: str) -> bool:
        """Store the promo code unless the player already owns one. Does not commit.

        Returns:
            bool: True if promo_code was stored
        """
        if player.last_promo_code is not None:
            return False
        player.last_promo_code = promo_code
        return True

    @staticmethod
    def set_notification_channel(player: Player, channel_id: str) -> None:
        """Link the player to a chat. Does not commit."""
        player.notification_channel_id = channel_id
        player.is_connected = True

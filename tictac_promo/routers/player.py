from fastapi import APIRouter, Depends

from tictac_promo.models.dc_models import ConnectLinkModel, PlayerStatusModel
from tictac_promo.routers.dependencies import get_bot_username, get_link_service
from tictac_promo.services.player_link import PlayerLinkService, connect_url

player_router = APIRouter(prefix="/api/player")


class PlayerAPI:
    @staticmethod
    @player_router.get("/{player_id}", response_model=PlayerStatusModel)
    async def get_player(
        player_id: str,
        link_service: PlayerLinkService = Depends(get_link_service),
    ) -> PlayerStatusModel:
        """Tell the client whether the bot is linked yet. Polled until isConnected is true.

        Args:
            player_id (str): Anonymous id of the player

        Returns:
            PlayerStatusModel: isConnected and lastPromoCode (null if none)
        """
        player = await link_service.read_status(player_id)
        return PlayerStatusModel(
            is_connected=player.is_connected,
            last_promo_code=player.last_promo_code,
        )

    @staticmethod
    @player_router.get("/{player_id}/connect", response_model=ConnectLinkModel)
    async def get_connect_link(
        player_id: str,
        bot_username: str = Depends(get_bot_username),
    ) -> ConnectLinkModel:
        return ConnectLinkModel(url=connect_url(bot_username, player_id))

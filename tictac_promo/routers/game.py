import logging

from fastapi import APIRouter, Depends, HTTPException, status

from tictac_promo.models.dc_models import (
    AckModel,
    LossRequestModel,
    WinRequestModel,
    WinResponseModel,
)
from tictac_promo.routers.dependencies import get_coordinator
from tictac_promo.services.promo_issuance import PromoIssuanceCoordinator
from tictac_promo.storage import StorageError

game_router = APIRouter(prefix="/api/game")


class GameResultAPI:
    @staticmethod
    @game_router.post("/win", response_model=WinResponseModel)
    async def report_win(
        win: WinRequestModel,
        coordinator: PromoIssuanceCoordinator = Depends(get_coordinator),
    ) -> WinResponseModel:
        """Record a player win and return the promo code to display

        Args:
            win (WinRequestModel):
                    storageId: anonymous id of the player
                    promoCode: candidate code generated by the client

        Raises:
            HTTPException: The result could not be stored

        Returns:
            WinResponseModel: promoCode decided by the server, which may differ
                from the candidate
        """
        try:
            result = await coordinator.on_win(win.storage_id, win.promo_code)
        except StorageError as e:
            logging.error(f"Failed to store win for player {win.storage_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Failed to store game result.",
            )
        return WinResponseModel(success=True, promo_code=result.promo_code)

    @staticmethod
    @game_router.post("/loss", response_model=AckModel)
    async def report_loss(
        loss: LossRequestModel,
        coordinator: PromoIssuanceCoordinator = Depends(get_coordinator),
    ) -> AckModel:
        try:
            await coordinator.on_loss(loss.storage_id)
        except StorageError as e:
            logging.error(f"Failed to store loss for player {loss.storage_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Failed to store game result.",
            )
        return AckModel(success=True)

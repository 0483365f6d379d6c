from pydantic import BaseModel, Field
from typing import Optional

from tictac_promo.domain.promo_codes import PROMO_CODE_MAX_LENGTH

PLAYER_ID_MAX_LENGTH = 128


class LossRequestModel(BaseModel):
    storage_id: str = Field(
        alias="storageId", min_length=1, max_length=PLAYER_ID_MAX_LENGTH
    )  # anonymous id generated by the client

    class Config:
        populate_by_name = True


class WinRequestModel(LossRequestModel):
    promo_code: str = Field(
        alias="promoCode", min_length=1, max_length=PROMO_CODE_MAX_LENGTH
    )  # candidate code, may be discarded by the server


class PlayerStatusModel(BaseModel):
    is_connected: bool = Field(alias="isConnected")
    last_promo_code: Optional[str] = Field(alias="lastPromoCode")

    class Config:
        populate_by_name = True


class AckModel(BaseModel):
    success: bool = True


class WinResponseModel(AckModel):
    promo_code: str = Field(alias="promoCode")  # the code the client must display

    class Config:
        populate_by_name = True


class ConnectLinkModel(BaseModel):
    url: str

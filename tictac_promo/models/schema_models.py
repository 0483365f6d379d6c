from pydantic import BaseModel
from typing import Optional


class PlayerRecordSchema(BaseModel):
    player_id: str
    notification_channel_id: Optional[str] = None
    last_promo_code: Optional[str] = None
    is_connected: bool = False

    class Config:
        from_attributes = True

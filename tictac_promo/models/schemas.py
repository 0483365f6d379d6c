from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column
from sqlalchemy.types import Boolean, String


class Base(DeclarativeBase):
    pass


class Player(Base):
    __tablename__ = "players"
    player_id = Column(String, primary_key=True, index=True)
    notification_channel_id = Column(String, nullable=True)
    # Write-once: set on the first win and never changed afterwards.
    last_promo_code = Column(String, nullable=True)
    is_connected = Column(Boolean, nullable=False, default=False)

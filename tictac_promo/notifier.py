import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Set

from telegram import Bot
from telegram.constants import ParseMode

from tictac_promo.storage import PlayerStore

FIRST_WIN_MESSAGE = "🎉 *Victory!* Congratulations!\n\nYour exclusive promo code: `{code}`"
REPEAT_WIN_MESSAGE = (
    "✨ *Another win!* You are brilliant!\n\n"
    "A reminder, your exclusive code is still waiting for you: `{code}`"
)
LOSS_MESSAGE = "💔 *Defeat*\n\nDon't be upset! Play again, luck will smile on you soon."
LINKED_MESSAGE = (
    "✨ *Account connected!* ✨\n\n"
    "Your game results and exclusive promo codes will be sent here.{code_line}\n\n"
    "Good luck! 💅"
)
LINKED_CODE_LINE = "\n\n🎟 Your current promo code: `{code}`"


class NotificationSink(ABC):
    @abstractmethod
    async def notify(self, player_id: str, message: str) -> None:
        """Deliver a message to the player's linked channel."""


class LogNotificationSink(NotificationSink):
    """Used when no bot token is configured."""

    async def notify(self, player_id: str, message: str) -> None:
        logging.info(f"Bot disabled, message for player {player_id} not sent: {message!r}")


class TelegramNotificationSink(NotificationSink):
    def __init__(self, bot: Bot, store: PlayerStore):
        self.bot = bot
        self.store = store

    async def notify(self, player_id: str, message: str) -> None:
        player = await self.store.get(player_id)
        if player is None or player.notification_channel_id is None:
            logging.debug(f"Player {player_id} has no linked chat, skipping message")
            return
        await self.bot.send_message(
            chat_id=player.notification_channel_id,
            text=message,
            parse_mode=ParseMode.MARKDOWN,
        )


class NotificationDispatcher:
    """Fire-and-forget delivery: dispatch() never waits for the sink and never raises."""

    def __init__(self, sink: NotificationSink):
        self.sink = sink
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, player_id: str, message: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._deliver(player_id, message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, player_id: str, message: str) -> None:
        try:
            await self.sink.notify(player_id, message)
        except Exception as e:
            logging.error(f"Failed to send message to player {player_id}: {e}")

    async def drain(self) -> None:
        """Wait until every dispatched message has been handled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

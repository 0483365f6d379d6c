import logging

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import Application, CallbackContext, CommandHandler

from tictac_promo.notifier import LINKED_CODE_LINE, LINKED_MESSAGE
from tictac_promo.services.player_link import CONNECT_PREFIX, PlayerLinkService


class LinkBot:
    """Telegram side of the game: links a chat to the anonymous player id."""

    def __init__(self, link_service: PlayerLinkService):
        self.link_service = link_service

    async def start(self, update: Update, context: CallbackContext) -> None:
        """Handle ``/start connect_<player_id>`` sent through the deep link."""
        if not context.args or not context.args[0].startswith(CONNECT_PREFIX):
            return

        player_id = context.args[0][len(CONNECT_PREFIX):]
        if not player_id:
            return

        chat_id = str(update.effective_chat.id)
        player = await self.link_service.link(player_id, chat_id)

        code_line = ""
        if player.last_promo_code:
            code_line = LINKED_CODE_LINE.format(code=player.last_promo_code)
        await update.message.reply_text(
            LINKED_MESSAGE.format(code_line=code_line),
            parse_mode=ParseMode.MARKDOWN,
        )


def build_application(token: str, link_service: PlayerLinkService) -> Application:
    link_bot = LinkBot(link_service)
    application = Application.builder().token(token).build()
    application.add_handler(CommandHandler("start", link_bot.start))
    logging.info("Telegram bot configured")
    return application

import logging
from contextlib import asynccontextmanager
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from tictac_promo.bot import build_application
from tictac_promo.db import create_engine, create_session_factory, create_tables
from tictac_promo.key_lock_manager import KeyLockManager
from tictac_promo.load_secrets import (
    bot_username,
    database_url,
    lock_cleanup_minutes,
    log_level,
    player_data_file,
    storage_backend,
    telegram_bot_token,
)
from tictac_promo.notifier import (
    LogNotificationSink,
    NotificationDispatcher,
    NotificationSink,
    TelegramNotificationSink,
)
from tictac_promo.routers import game, player
from tictac_promo.services.player_link import PlayerLinkService
from tictac_promo.services.promo_issuance import PromoIssuanceCoordinator
from tictac_promo.storage import (
    FilePlayerStore,
    MemoryPlayerStore,
    PlayerStore,
    SqlPlayerStore,
)

logging.basicConfig(level=log_level)


def create_app(
    store: Optional[PlayerStore] = None,
    sink: Optional[NotificationSink] = None,
    bot_token: Optional[str] = telegram_bot_token,
    backend: str = storage_backend,
) -> FastAPI:
    """Build the promo game server

    Args:
        store (PlayerStore, optional): Player store. Built from ``backend`` when omitted.
        sink (NotificationSink, optional): Where messages go. Telegram when a
            bot token is set, log-only otherwise.
        bot_token (str, optional): Telegram bot token.
        backend (str): "sql", "memory" or "file".

    Returns:
        FastAPI: The application
    """
    engine = None
    if store is None:
        if backend == "memory":
            store = MemoryPlayerStore()
        elif backend == "file":
            store = FilePlayerStore(player_data_file)
        elif backend == "sql":
            engine = create_engine(database_url)
            store = SqlPlayerStore(create_session_factory(engine))
        else:
            raise ValueError(f"Unknown storage backend: {backend}")

    key_locks = KeyLockManager()
    dispatcher = NotificationDispatcher(sink or LogNotificationSink())
    coordinator = PromoIssuanceCoordinator(store, dispatcher, key_locks)
    link_service = PlayerLinkService(store, key_locks)
    scheduler = AsyncIOScheduler()

    @asynccontextmanager
    async def lifespan(app):
        """Create tables, start the bot and the lock cleanup job.
        This function is called to start the server.
        """
        if engine is not None:
            await create_tables(engine)

        bot_application = None
        if bot_token:
            bot_application = build_application(bot_token, link_service)
            await bot_application.initialize()
            await bot_application.start()
            await bot_application.updater.start_polling()
            if sink is None:
                dispatcher.sink = TelegramNotificationSink(bot_application.bot, store)
            logging.info("Telegram bot started")
        else:
            logging.warning("TELEGRAM_BOT_TOKEN not provided, bot logic disabled.")

        # Player locks are created on demand; drop the idle ones periodically.
        scheduler.add_job(key_locks.cleanup, "interval", minutes=lock_cleanup_minutes)
        scheduler.start()
        try:
            yield
        finally:
            scheduler.shutdown()
            await dispatcher.drain()
            if bot_application is not None:
                await bot_application.updater.stop()
                await bot_application.stop()
                await bot_application.shutdown()
            if engine is not None:
                await engine.dispose()
            logging.info("Stop Server")

    app = FastAPI(lifespan=lifespan)
    app.state.coordinator = coordinator
    app.state.link_service = link_service
    app.state.bot_username = bot_username
    app.state.key_locks = key_locks
    app.include_router(player.player_router)
    app.include_router(game.game_router)
    return app

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.ext import Application

from tictac_promo.bot import LinkBot, build_application
from tictac_promo.key_lock_manager import KeyLockManager
from tictac_promo.notifier import TelegramNotificationSink
from tictac_promo.services.player_link import PlayerLinkService
from tictac_promo.storage import MemoryPlayerStore


@pytest.fixture
def link_service(memory_store):
    return PlayerLinkService(memory_store, KeyLockManager())


def make_update(chat_id=42):
    message = SimpleNamespace(reply_text=AsyncMock())
    return SimpleNamespace(effective_chat=SimpleNamespace(id=chat_id), message=message)


async def test_start_links_player(link_service, memory_store):
    update = make_update()
    await LinkBot(link_service).start(update, SimpleNamespace(args=["connect_p1"]))

    player = await memory_store.get("p1")
    assert player.is_connected is True
    assert player.notification_channel_id == "42"
    text = update.message.reply_text.await_args.args[0]
    assert "current promo code" not in text


async def test_start_mentions_existing_code(link_service, memory_store):
    await memory_store.upsert("p1", last_promo_code="12345")
    update = make_update()
    await LinkBot(link_service).start(update, SimpleNamespace(args=["connect_p1"]))
    assert "12345" in update.message.reply_text.await_args.args[0]


@pytest.mark.parametrize("args", [[], ["hello"], ["connect_"]])
async def test_start_without_connect_payload_is_ignored(link_service, memory_store, args):
    update = make_update()
    await LinkBot(link_service).start(update, SimpleNamespace(args=args))
    update.message.reply_text.assert_not_awaited()
    assert memory_store.players == {}


def test_build_application():
    service = PlayerLinkService(MemoryPlayerStore(), KeyLockManager())
    application = build_application("123456:TEST-TOKEN", service)
    assert isinstance(application, Application)


async def test_telegram_sink_sends_to_linked_chat(memory_store):
    await memory_store.link("p1", "42")
    bot = SimpleNamespace(send_message=AsyncMock())
    await TelegramNotificationSink(bot, memory_store).notify("p1", "hello")
    assert bot.send_message.await_args.kwargs["chat_id"] == "42"
    assert bot.send_message.await_args.kwargs["text"] == "hello"


async def test_telegram_sink_skips_unlinked_player(memory_store):
    await memory_store.upsert("p1")
    bot = SimpleNamespace(send_message=AsyncMock())
    sink = TelegramNotificationSink(bot, memory_store)
    await sink.notify("p1", "hello")
    await sink.notify("unknown", "hello")
    bot.send_message.assert_not_awaited()

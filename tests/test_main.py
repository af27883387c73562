from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram import Chat, Message, MessageEntity, Update
from telegram.ext import CommandHandler, MessageHandler

import main
from clients.coingecko_client import MAX_PER_PAGE
from handlers.bot_handlers import DISPATCHER_KEY
from handlers.dispatcher import EventDispatcher
from models.coin import CoinCatalogEntry, CoinRecord
from services.resolver_service import CatalogResolver, SnapshotResolver
from tests.conftest import FakeMarketClient
from utils.errors import ConfigError, ProviderUnavailable


def _application() -> SimpleNamespace:
    return SimpleNamespace(
        bot_data={},
        bot=SimpleNamespace(username="crypto_bot", set_my_commands=AsyncMock()),
    )


def test_missing_token_is_fatal(monkeypatch):
    monkeypatch.setattr(main, "TELEGRAM_BOT_TOKEN", "")
    with pytest.raises(ConfigError):
        main.validate_config()


def test_unknown_resolution_mode_is_fatal(monkeypatch):
    monkeypatch.setattr(main, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(main, "RESOLUTION_MODE", "fuzzy")
    with pytest.raises(ConfigError):
        main.validate_config()


@pytest.mark.parametrize("setting", ["TOP_N_OPTIONS", "SNAPSHOT_SIZE"])
@pytest.mark.parametrize("value", [0, -3, MAX_PER_PAGE + 1, 300])
def test_out_of_range_list_size_is_fatal(monkeypatch, setting, value):
    monkeypatch.setattr(main, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(main, "RESOLUTION_MODE", "catalog")
    monkeypatch.setattr(main, setting, value)
    with pytest.raises(ConfigError, match=setting):
        main.validate_config()


@pytest.mark.parametrize("value", [1, MAX_PER_PAGE])
def test_list_size_bounds_are_accepted(monkeypatch, value):
    monkeypatch.setattr(main, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(main, "RESOLUTION_MODE", "snapshot")
    monkeypatch.setattr(main, "TOP_N_OPTIONS", value)
    monkeypatch.setattr(main, "SNAPSHOT_SIZE", value)
    main.validate_config()


def test_main_exits_before_polling_on_bad_snapshot_size(monkeypatch):
    monkeypatch.setattr(main, "TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setattr(main, "RESOLUTION_MODE", "snapshot")
    monkeypatch.setattr(main, "SNAPSHOT_SIZE", 0)
    with pytest.raises(SystemExit) as exc_info:
        main.main()
    assert exc_info.value.code == 1


def test_main_exits_before_polling_without_token(monkeypatch):
    monkeypatch.setattr(main, "TELEGRAM_BOT_TOKEN", "")
    with pytest.raises(SystemExit) as exc_info:
        main.main()
    assert exc_info.value.code == 1


@pytest.mark.asyncio
async def test_startup_loads_full_catalog(monkeypatch):
    client = FakeMarketClient(catalog=[CoinCatalogEntry("bitcoin", "Bitcoin")])
    monkeypatch.setattr(main, "CoinGeckoClient", lambda: client)
    monkeypatch.setattr(main, "RESOLUTION_MODE", "catalog")
    application = _application()

    await main.on_startup(application)

    dispatcher = application.bot_data[DISPATCHER_KEY]
    assert isinstance(dispatcher, EventDispatcher)
    assert isinstance(dispatcher.resolver, CatalogResolver)
    assert dispatcher.resolver.resolve("BITCOIN") == "bitcoin"
    assert client.catalog_calls == 1
    application.bot.set_my_commands.assert_awaited_once()


@pytest.mark.asyncio
async def test_startup_loads_snapshot(monkeypatch):
    client = FakeMarketClient(records=[CoinRecord("bitcoin", "Bitcoin", 1.0, 1.0)])
    monkeypatch.setattr(main, "CoinGeckoClient", lambda: client)
    monkeypatch.setattr(main, "RESOLUTION_MODE", "snapshot")
    monkeypatch.setattr(main, "SNAPSHOT_SIZE", 20)
    application = _application()

    await main.on_startup(application)

    assert isinstance(application.bot_data[DISPATCHER_KEY].resolver, SnapshotResolver)
    assert client.top_calls == [20]
    assert client.catalog_calls == 0


@pytest.mark.asyncio
async def test_startup_fails_when_catalog_cannot_be_fetched(monkeypatch):
    client = FakeMarketClient(error=ProviderUnavailable("down"))
    monkeypatch.setattr(main, "CoinGeckoClient", lambda: client)
    monkeypatch.setattr(main, "RESOLUTION_MODE", "catalog")
    application = _application()

    with pytest.raises(ProviderUnavailable):
        await main.on_startup(application)
    assert DISPATCHER_KEY not in application.bot_data

    await main.on_shutdown(application)
    assert client.closed


def _command_update(text: str) -> Update:
    command = text.split()[0]
    message = Message(
        message_id=1,
        date=datetime.now(timezone.utc),
        chat=Chat(id=1, type=Chat.PRIVATE),
        text=text,
        entities=[MessageEntity(type=MessageEntity.BOT_COMMAND, offset=0, length=len(command))],
    )
    return Update(update_id=1, message=message)


def test_application_processes_updates_one_at_a_time():
    app = main.build_application("123:abc")
    assert app.update_processor.max_concurrent_updates == 1


def test_unknown_command_reaches_text_handler():
    handlers = main.build_application("123:abc").handlers[0]
    text_handlers = [h for h in handlers if isinstance(h, MessageHandler)]
    assert len(text_handlers) == 1
    text_handler = text_handlers[0]

    last_command = max(i for i, h in enumerate(handlers) if isinstance(h, CommandHandler))
    assert handlers.index(text_handler) > last_command
    assert text_handler.callback is main.handle_text_message
    assert text_handler.check_update(_command_update("/foo"))
    assert text_handler.check_update(_command_update("/price bitcoin"))

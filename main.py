"""
main.py
-------
Entry point for the crypto price Telegram bot.

Responsibilities:
    - Validate configuration before anything touches the network.
    - Load the coin catalog (or top-N snapshot) once, before polling starts.
    - Configure and start the Telegram bot with all handlers.
"""

import sys

from telegram import BotCommand
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from clients.coingecko_client import MAX_PER_PAGE, CoinGeckoClient
from config import (
    RESOLUTION_MODE,
    RESOLUTION_MODES,
    SNAPSHOT_SIZE,
    TELEGRAM_BOT_TOKEN,
    TOP_N_OPTIONS,
)
from handlers.bot_handlers import (
    DISPATCHER_KEY,
    error_handler,
    handle_button_press,
    handle_text_message,
    help_command,
    start_command,
)
from handlers.dispatcher import EventDispatcher
from handlers.telegram_transport import TelegramTransport
from repositories.catalog_repo import CatalogRepository
from services.resolver_service import CatalogResolver, SnapshotResolver
from utils.errors import BotError, ConfigError
from utils.logger import get_logger

logger = get_logger(__name__)

CLIENT_KEY = "coingecko_client"


def validate_config() -> None:
    """
    Check the settings that make start-up impossible.

    Raises:
        ConfigError: If the bot token is missing, the resolution mode is unknown,
            or a list size is outside what CoinGecko serves in one page.
    """
    if not TELEGRAM_BOT_TOKEN:
        raise ConfigError("TELEGRAM_BOT_TOKEN is not set")
    if RESOLUTION_MODE not in RESOLUTION_MODES:
        raise ConfigError(
            f"RESOLUTION_MODE must be one of {', '.join(RESOLUTION_MODES)}, got {RESOLUTION_MODE!r}"
        )
    for name, value in (("TOP_N_OPTIONS", TOP_N_OPTIONS), ("SNAPSHOT_SIZE", SNAPSHOT_SIZE)):
        if not 1 <= value <= MAX_PER_PAGE:
            raise ConfigError(f"{name} must be between 1 and {MAX_PER_PAGE}, got {value}")


async def on_startup(application: Application) -> None:
    """
    Runs once after the bot is initialized and before polling begins.
    Any exception raised here aborts start-up.
    """
    client = CoinGeckoClient()
    application.bot_data[CLIENT_KEY] = client
    repo = CatalogRepository(client)

    if RESOLUTION_MODE == "snapshot":
        resolver = SnapshotResolver(await repo.load_snapshot(SNAPSHOT_SIZE))
    else:
        resolver = CatalogResolver(await repo.load_full_catalog())

    application.bot_data[DISPATCHER_KEY] = EventDispatcher(
        transport=TelegramTransport(application.bot),
        client=client,
        resolver=resolver,
        top_n=TOP_N_OPTIONS,
    )

    await application.bot.set_my_commands(
        [
            BotCommand("start", "🚀 Start the bot"),
            BotCommand("help", "📖 Show help"),
        ]
    )
    logger.info(f"Authorized on account @{application.bot.username} ({RESOLUTION_MODE} mode).")


async def on_shutdown(application: Application) -> None:
    """Close the CoinGecko connection pool."""
    client = application.bot_data.get(CLIENT_KEY)
    if client is not None:
        await client.close()


def build_application(token: str) -> Application:
    """Build the Telegram application with every handler registered."""

    # Updates are processed strictly one at a time, in arrival order.
    app = (
        Application.builder()
        .token(token)
        .concurrent_updates(False)
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )

    # First matching handler wins, so any other command falls through
    # to the text handler and gets a reply like any other name.
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CallbackQueryHandler(handle_button_press))
    app.add_handler(MessageHandler(filters.TEXT, handle_text_message))
    app.add_error_handler(error_handler)
    return app


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Configuration ──────────────────────────────────
    try:
        validate_config()
    except ConfigError as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = build_application(TELEGRAM_BOT_TOKEN)

    # ── 3. Start polling ──────────────────────────────────
    logger.info("🚀 Crypto price bot is running! Press Ctrl+C to stop.")
    try:
        app.run_polling(allowed_updates=["message", "callback_query"])
    except BotError as e:
        logger.critical(f"Start-up failed: {e}")
        sys.exit(1)

    logger.info("Crypto price bot stopped.")


if __name__ == "__main__":
    main()

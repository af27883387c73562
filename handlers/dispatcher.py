"""
handlers/dispatcher.py
----------------------
Routes inbound events through resolve -> fetch -> format -> send.

One event in, one reply out (two independent messages for /start).
Everything below the dispatcher raises typed errors; this is the only
place where they are turned into messages for the user.
"""

from typing import Optional, Sequence, Union

from clients.coingecko_client import CoinGeckoClient
from handlers.telegram_transport import ChatTransport
from models.coin import CoinCatalogEntry, CoinRecord
from models.events import ButtonPress, InboundEvent, OutboundReply, TextMessage
from services.quote_service import build_options_keyboard, format_quote
from services.resolver_service import CatalogResolver, SnapshotResolver
from utils.errors import DecodeError, NotFound, ProviderUnavailable, TransportSendFailure
from utils.logger import get_logger

logger = get_logger(__name__)

START_COMMAND = "/start"
HELP_COMMAND = "/help"

MARKDOWN = "Markdown"

WELCOME_TEXT = "👋 Welcome to crypto_bot! Type the name of any cryptocurrency to get its info."
OPTIONS_TEXT = "OR choose a cryptocurrency from the top {count} list 👇"
NOT_FOUND_TEXT = "❌ Cryptocurrency not found. Please check the name and try again."
FETCH_ERROR_TEXT = "❌ Error fetching cryptocurrency data."
BUTTON_FETCH_ERROR_TEXT = "❌ Error fetching data for this cryptocurrency."

HELP_TEXT = """
🤖 *Crypto Bot*
Live cryptocurrency prices from CoinGecko.

*How to use:*
• Type a coin name, e.g. `Bitcoin` or `bitcoin cash`
• Or tap one of the buttons sent by /start

*Commands:*
/start - Welcome message and top coins
/help - Show this help
"""


class EventDispatcher:
    """
    Handles one inbound event at a time.

    Holds no per-chat state: the catalog inside the resolver is read-only
    and every quote is fetched fresh from the provider.
    """

    def __init__(
        self,
        transport: ChatTransport,
        client: CoinGeckoClient,
        resolver: Union[CatalogResolver, SnapshotResolver],
        top_n: int = 5,
    ):
        self.transport = transport
        self.client = client
        self.resolver = resolver
        self.top_n = top_n

    async def dispatch(self, event: InboundEvent) -> None:
        if isinstance(event, TextMessage):
            await self._on_text(event)
        elif isinstance(event, ButtonPress):
            await self._on_button(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")

    # ── Text messages ─────────────────────────────────────

    async def _on_text(self, event: TextMessage) -> None:
        text = event.text.strip()
        if text == START_COMMAND:
            await self._on_start(event.chat_id)
            return
        if text == HELP_COMMAND:
            await self._send(OutboundReply(event.chat_id, HELP_TEXT, MARKDOWN))
            return
        await self._send(await self._quote_for_name(event.chat_id, event.text))

    async def _quote_for_name(self, chat_id: int, name: str) -> OutboundReply:
        try:
            identifier = self.resolver.resolve(name)
            record = await self._fetch_one(identifier)
        except NotFound:
            logger.info(f"Chat {chat_id}: no coin named {name!r}")
            return OutboundReply(chat_id, NOT_FOUND_TEXT)
        except (ProviderUnavailable, DecodeError) as e:
            logger.error(f"Chat {chat_id}: failed to fetch {name!r}: {e}")
            return OutboundReply(chat_id, FETCH_ERROR_TEXT)
        return OutboundReply(chat_id, format_quote(name, record), MARKDOWN)

    async def _on_start(self, chat_id: int) -> None:
        # Two independent sends; a failure in one does not undo the other.
        await self._send(OutboundReply(chat_id, WELCOME_TEXT))

        entries = await self._options()
        if not entries:
            return
        keyboard = build_options_keyboard(entries)
        try:
            await self.transport.send_keyboard(
                chat_id, OPTIONS_TEXT.format(count=len(entries)), keyboard
            )
        except TransportSendFailure as e:
            logger.error(f"Chat {chat_id}: failed to send options keyboard: {e}")

    async def _options(self) -> Optional[Sequence[CoinCatalogEntry]]:
        entries = self.resolver.options()
        if entries is not None:
            return entries
        try:
            records = await self.client.fetch_top_n(self.top_n)
        except (ProviderUnavailable, DecodeError) as e:
            logger.error(f"Failed to fetch top {self.top_n} coins: {e}")
            return None
        return [r.to_catalog_entry() for r in records]

    # ── Button presses ────────────────────────────────────

    async def _on_button(self, event: ButtonPress) -> None:
        try:
            await self.transport.acknowledge(event.callback_id)
        except TransportSendFailure as e:
            logger.warning(f"Chat {event.chat_id}: could not acknowledge button press: {e}")

        try:
            record = await self._fetch_one(event.payload_identifier)
        except (NotFound, ProviderUnavailable, DecodeError) as e:
            logger.error(f"Chat {event.chat_id}: failed to fetch {event.payload_identifier!r}: {e}")
            await self._send(OutboundReply(event.chat_id, BUTTON_FETCH_ERROR_TEXT))
            return
        await self._send(
            OutboundReply(event.chat_id, format_quote(record.display_name, record), MARKDOWN)
        )

    # ── Helpers ───────────────────────────────────────────

    async def _fetch_one(self, identifier: str) -> CoinRecord:
        records = await self.client.fetch_market({identifier})
        for record in records:
            if record.identifier == identifier:
                return record
        raise NotFound(identifier)

    async def _send(self, reply: OutboundReply) -> None:
        try:
            await self.transport.send_message(reply.chat_id, reply.text, reply.parse_mode)
        except TransportSendFailure as e:
            logger.error(f"Chat {reply.chat_id}: reply not delivered: {e}")

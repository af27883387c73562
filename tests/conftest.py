from __future__ import annotations

from typing import Iterable, Optional

import pytest

from models.coin import CoinCatalogEntry, CoinRecord
from repositories.catalog_repo import CoinCatalog
from utils.errors import TransportSendFailure


class FakeTransport:
    """Records every outbound effect, in order."""

    def __init__(self, fail_send: bool = False, fail_keyboard: bool = False, fail_ack: bool = False):
        self.fail_send = fail_send
        self.fail_keyboard = fail_keyboard
        self.fail_ack = fail_ack
        self.calls: list[tuple] = []

    async def send_message(self, chat_id, text, parse_mode=None):
        self.calls.append(("message", chat_id, text, parse_mode))
        if self.fail_send:
            raise TransportSendFailure("chat unreachable")

    async def send_keyboard(self, chat_id, text, keyboard):
        self.calls.append(("keyboard", chat_id, text, keyboard))
        if self.fail_keyboard:
            raise TransportSendFailure("chat unreachable")

    async def acknowledge(self, callback_id):
        self.calls.append(("ack", callback_id))
        if self.fail_ack:
            raise TransportSendFailure("query too old")

    @property
    def messages(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "message"]

    @property
    def keyboards(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "keyboard"]

    @property
    def acks(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "ack"]


class FakeMarketClient:
    """In-memory stand-in for CoinGeckoClient."""

    def __init__(
        self,
        records: Iterable[CoinRecord] = (),
        error: Optional[Exception] = None,
        catalog: Iterable[CoinCatalogEntry] = (),
    ):
        self.records = list(records)
        self.error = error
        self.catalog = list(catalog)
        self.market_calls: list[set[str]] = []
        self.top_calls: list[int] = []
        self.catalog_calls = 0
        self.closed = False

    async def fetch_market(self, identifiers):
        ids = set(identifiers)
        self.market_calls.append(ids)
        if self.error:
            raise self.error
        return [r for r in self.records if r.identifier in ids]

    async def fetch_top_n(self, n):
        self.top_calls.append(n)
        if self.error:
            raise self.error
        return self.records[:n]

    async def fetch_catalog(self):
        self.catalog_calls += 1
        if self.error:
            raise self.error
        return self.catalog

    async def close(self):
        self.closed = True


BITCOIN = CoinRecord("bitcoin", "Bitcoin", 50000.00, 1.5)
ETHEREUM = CoinRecord("ethereum", "Ethereum", 3000.126, -0.5)
BITCOIN_CASH = CoinRecord("bitcoin-cash", "Bitcoin Cash", 420.0, 0.0)


@pytest.fixture()
def catalog() -> CoinCatalog:
    return CoinCatalog(
        [
            CoinCatalogEntry("bitcoin", "Bitcoin"),
            CoinCatalogEntry("ethereum", "Ethereum"),
            CoinCatalogEntry("bitcoin-cash", "Bitcoin Cash"),
            CoinCatalogEntry("tether", "Tether"),
        ]
    )


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def market() -> FakeMarketClient:
    return FakeMarketClient(records=[BITCOIN, ETHEREUM, BITCOIN_CASH])

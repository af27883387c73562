"""
models/coin.py
--------------
Domain models for coins as reported by the market data provider.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class CoinCatalogEntry:
    """
    A single identifier/name pair used for name lookup.

    Attributes:
        identifier: Provider's canonical key (e.g. 'bitcoin', 'bitcoin-cash').
        display_name: Human readable name (e.g. 'Bitcoin Cash').
    """
    identifier: str
    display_name: str


@dataclass(frozen=True)
class CoinRecord:
    """
    Price data for one coin, fetched fresh for every query.

    Attributes:
        identifier: Provider's canonical key.
        display_name: Human readable name.
        price_usd: Current price in the quote currency (never negative).
        change_24h_percent: Signed 24h change in percent, NaN when the provider omits it.
    """
    identifier: str
    display_name: str
    price_usd: float
    change_24h_percent: float = math.nan

    def to_catalog_entry(self) -> CoinCatalogEntry:
        return CoinCatalogEntry(self.identifier, self.display_name)

"""
repositories/catalog_repo.py
----------------------------
Start-up loaded, read-only coin catalog.

The catalog is fetched exactly once before the bot starts polling and is
then passed explicitly to the resolver and the dispatcher. It is never
refreshed or mutated.
"""

from collections import Counter
from collections.abc import Sequence
from typing import Iterable, Iterator

from clients.coingecko_client import CoinGeckoClient
from models.coin import CoinCatalogEntry
from utils.logger import get_logger

logger = get_logger(__name__)


class CoinCatalog(Sequence):
    """
    Immutable, ordered collection of catalog entries with unique identifiers.

    When the provider lists the same identifier twice, the first occurrence
    wins. Duplicate display names are kept (lookup returns the first one in
    provider order) but are counted so they can be reported.
    """

    def __init__(self, entries: Iterable[CoinCatalogEntry]):
        seen: set[str] = set()
        unique: list[CoinCatalogEntry] = []
        for entry in entries:
            if entry.identifier in seen:
                continue
            seen.add(entry.identifier)
            unique.append(entry)
        self._entries: tuple[CoinCatalogEntry, ...] = tuple(unique)

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CoinCatalogEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"CoinCatalog({len(self._entries)} entries)"

    def duplicate_names(self) -> dict[str, int]:
        """Return lowercased display names that map to more than one identifier."""
        counts = Counter(e.display_name.lower() for e in self._entries)
        return {name: n for name, n in counts.items() if n > 1}


class CatalogRepository:
    """Loads the start-up catalog or snapshot from the market data client."""

    def __init__(self, client: CoinGeckoClient):
        self.client = client

    async def load_full_catalog(self) -> CoinCatalog:
        """
        Fetch the complete /coins/list catalog.

        Raises:
            ProviderUnavailable, DecodeError: Propagated from the client. Fatal at start-up.
        """
        catalog = CoinCatalog(await self.client.fetch_catalog())
        self._report(catalog, "full catalog")
        return catalog

    async def load_snapshot(self, size: int) -> CoinCatalog:
        """
        Fetch the top ``size`` coins by market cap and keep only their names.

        Prices from this snapshot are discarded: quotes are always fetched fresh.
        """
        records = await self.client.fetch_top_n(size)
        catalog = CoinCatalog(r.to_catalog_entry() for r in records)
        self._report(catalog, f"top-{size} snapshot")
        return catalog

    @staticmethod
    def _report(catalog: CoinCatalog, label: str) -> None:
        logger.info(f"Loaded {label} with {len(catalog)} coins.")
        duplicates = catalog.duplicate_names()
        if duplicates:
            logger.warning(
                f"{len(duplicates)} display names in the {label} map to several coins; "
                f"lookups return the first one in provider order."
            )

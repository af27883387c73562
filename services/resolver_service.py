"""
services/resolver_service.py
----------------------------
Maps a user supplied coin name to the provider's canonical identifier.

Matching is exact and case-insensitive on the display name: "bitcoin",
"BITCOIN" and " Bitcoin " all match "Bitcoin", but "bit" or "bitcoinn"
never do.
"""

from typing import Optional, Sequence

from models.coin import CoinCatalogEntry
from repositories.catalog_repo import CoinCatalog
from utils.errors import NotFound
from utils.logger import get_logger

logger = get_logger(__name__)


def _normalize(name: str) -> str:
    return name.strip().lower()


def resolve(catalog: Sequence[CoinCatalogEntry], name: str) -> str:
    """
    Find the identifier whose display name equals ``name``, ignoring case.

    Args:
        catalog: Entries to scan, in provider order.
        name: Raw user input. Leading/trailing whitespace is ignored.

    Returns:
        The identifier of the first matching entry.

    Raises:
        NotFound: If ``name`` is empty or nothing matches exactly.
    """
    wanted = _normalize(name)
    if not wanted:
        raise NotFound(name)
    for entry in catalog:
        if entry.display_name.lower() == wanted:
            return entry.identifier
    raise NotFound(name)


class CatalogResolver:
    """Resolves names against the full provider catalog."""

    def __init__(self, catalog: CoinCatalog):
        self.catalog = catalog

    def resolve(self, name: str) -> str:
        return resolve(self.catalog, name)

    def options(self) -> Optional[Sequence[CoinCatalogEntry]]:
        """The full catalog is too large for a keyboard; options are fetched live."""
        return None


class SnapshotResolver:
    """
    Resolves names against a small top-N snapshot.

    Names that are not in the snapshot are turned into an identifier guess
    (lowercased, whitespace joined with '-', e.g. "Bitcoin Cash" ->
    "bitcoin-cash"). Whether the guess exists is only known after the
    market query, which returns nothing for unknown ids.
    """

    def __init__(self, snapshot: CoinCatalog):
        self.snapshot = snapshot

    def resolve(self, name: str) -> str:
        try:
            return resolve(self.snapshot, name)
        except NotFound:
            guess = "-".join(_normalize(name).split())
            if not guess:
                raise
            logger.debug(f"{name!r} not in snapshot, guessing identifier {guess!r}")
            return guess

    def options(self) -> Optional[Sequence[CoinCatalogEntry]]:
        return self.snapshot

"""
clients/coingecko_client.py
---------------------------
Read-only client for the public CoinGecko v3 API.

Responsibilities:
    - Fetch the full coin catalog (/coins/list).
    - Fetch market snapshots (/coins/markets), either for specific ids
      or for the top N coins by market capitalization.
    - Decode the fixed-shape JSON into CoinRecord / CoinCatalogEntry values.

No retries: provider errors propagate immediately as ProviderUnavailable
or DecodeError.
"""

import math
from typing import Any, Iterable, Optional

import httpx

from config import COINGECKO_API_URL, HTTP_TIMEOUT_SECONDS, VS_CURRENCY
from models.coin import CoinCatalogEntry, CoinRecord
from utils.errors import DecodeError, ProviderUnavailable
from utils.logger import get_logger

logger = get_logger(__name__)

# CoinGecko caps per_page at 250.
MAX_PER_PAGE = 250


class CoinGeckoClient:
    """Async wrapper around the CoinGecko endpoints the bot uses."""

    def __init__(
        self,
        base_url: str = COINGECKO_API_URL,
        vs_currency: str = VS_CURRENCY,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.vs_currency = vs_currency
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Release the underlying connection pool."""
        await self._http.aclose()

    # ── Public API ────────────────────────────────────────

    async def fetch_market(self, identifiers: Iterable[str]) -> list[CoinRecord]:
        """
        Fetch current market data for the given coin identifiers.

        Args:
            identifiers: One or more canonical CoinGecko ids.

        Returns:
            Records in provider order. Empty if the provider knows none of them.

        Raises:
            ProviderUnavailable: Network error, timeout or non-2xx status.
            DecodeError: The response is not the expected JSON shape.
        """
        ids = sorted({i for i in identifiers if i})
        if not ids:
            return []
        params = {
            "vs_currency": self.vs_currency,
            "ids": ",".join(ids),
            "order": "market_cap_desc",
            "per_page": min(len(ids), MAX_PER_PAGE),
            "page": 1,
            "sparkline": "false",
        }
        payload = await self._get_json("/coins/markets", params)
        return [_decode_market_item(item) for item in _expect_list(payload)]

    async def fetch_top_n(self, n: int) -> list[CoinRecord]:
        """
        Fetch the top ``n`` coins ordered by market capitalization, descending.

        Raises:
            ValueError: If ``n`` is not between 1 and 250.
            ProviderUnavailable, DecodeError: As for fetch_market.
        """
        if not 1 <= n <= MAX_PER_PAGE:
            raise ValueError(f"n must be between 1 and {MAX_PER_PAGE}, got {n}")
        params = {
            "vs_currency": self.vs_currency,
            "order": "market_cap_desc",
            "per_page": n,
            "page": 1,
            "sparkline": "false",
        }
        payload = await self._get_json("/coins/markets", params)
        return [_decode_market_item(item) for item in _expect_list(payload)]

    async def fetch_catalog(self) -> list[CoinCatalogEntry]:
        """Fetch the full identifier/name catalog. Called once at start-up."""
        payload = await self._get_json("/coins/list", None)
        return [_decode_catalog_item(item) for item in _expect_list(payload)]

    # ── Internals ─────────────────────────────────────────

    async def _get_json(self, path: str, params: Optional[dict]) -> Any:
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"CoinGecko request {path} failed: {e!r}")
            raise ProviderUnavailable(f"Unable to reach CoinGecko: {e}") from e

        if response.is_error:
            logger.error(
                f"CoinGecko {path} returned HTTP {response.status_code}: {response.text}"
            )
            raise ProviderUnavailable(
                f"CoinGecko {path} returned HTTP {response.status_code}"
            )

        logger.debug(f"CoinGecko {path} response: {response.text}")
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"CoinGecko {path} returned non-JSON body: {response.text}")
            raise DecodeError(f"CoinGecko {path} returned invalid JSON") from e


def _expect_list(payload: Any) -> list:
    if not isinstance(payload, list):
        raise DecodeError(f"Expected a JSON array, got {type(payload).__name__}")
    return payload


def _expect_str(item: dict, key: str, allow_empty: bool = False) -> str:
    value = item.get(key)
    if not isinstance(value, str) or (not value and not allow_empty):
        raise DecodeError(f"Field {key!r} missing or not a string in {item!r}")
    return value


def _expect_number(
    item: dict, key: str, null_value: Optional[float] = None, optional: bool = False
) -> float:
    if key not in item and not optional:
        raise DecodeError(f"Field {key!r} missing in {item!r}")
    value = item.get(key)
    if value is None:
        if null_value is None:
            raise DecodeError(f"Field {key!r} is null in {item!r}")
        return null_value
    # bool is an int subclass; JSON true/false is never a valid price.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Field {key!r} missing or not a number in {item!r}")
    value = float(value)
    if math.isinf(value) or (math.isnan(value) and not optional):
        raise DecodeError(f"Field {key!r} is not a finite number in {item!r}")
    return value


def _decode_catalog_item(item: Any) -> CoinCatalogEntry:
    if not isinstance(item, dict):
        raise DecodeError(f"Expected a JSON object, got {item!r}")
    return CoinCatalogEntry(
        identifier=_expect_str(item, "id"),
        display_name=_expect_str(item, "name", allow_empty=True),
    )


def _decode_market_item(item: Any) -> CoinRecord:
    if not isinstance(item, dict):
        raise DecodeError(f"Expected a JSON object, got {item!r}")
    # Illiquid coins are listed with a null price.
    price = _expect_number(item, "current_price", null_value=0.0)
    if price < 0:
        raise DecodeError(f"Negative price in {item!r}")
    return CoinRecord(
        identifier=_expect_str(item, "id"),
        display_name=_expect_str(item, "name", allow_empty=True),
        price_usd=price,
        change_24h_percent=_expect_number(
            item, "price_change_percentage_24h", null_value=math.nan, optional=True
        ),
    )

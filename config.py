"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── CoinGecko ─────────────────────────────────────────────
COINGECKO_API_URL: str = os.getenv("COINGECKO_API_URL", "https://api.coingecko.com/api/v3")
VS_CURRENCY: str = os.getenv("VS_CURRENCY", "usd").lower()
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# ── Name resolution ───────────────────────────────────────
# "catalog": full /coins/list fetched once at start-up.
# "snapshot": top-N market snapshot fetched once at start-up.
RESOLUTION_MODE: str = os.getenv("RESOLUTION_MODE", "catalog").strip().lower()
RESOLUTION_MODES: tuple[str, ...] = ("catalog", "snapshot")

TOP_N_OPTIONS: int = int(os.getenv("TOP_N_OPTIONS", "5"))
SNAPSHOT_SIZE: int = int(os.getenv("SNAPSHOT_SIZE", "20"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

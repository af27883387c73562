"""
services/quote_service.py
-------------------------
Turns price records into the text and keyboards shown to the user.
Pure functions, no I/O.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from models.coin import CoinCatalogEntry, CoinRecord

UP = "📈"
DOWN = "📉"

_CENT = Decimal("0.01")


def capitalize_words(name: str) -> str:
    """'bitcoin  CASH' -> 'Bitcoin Cash'. Idempotent."""
    return " ".join(word.capitalize() for word in name.split())


def round_half_up(value: float) -> Decimal:
    """
    Round to 2 decimal places, ties away from zero.

    Works on the shortest decimal repr of the float, so -2.345 becomes
    -2.35 even though its binary value is slightly above -2.345.
    """
    return Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_price(price: float) -> str:
    return f"${round_half_up(price):.2f}"


def format_change(change: float) -> str:
    """Signed 24h change with a direction marker, or 'n/a' when unknown."""
    if math.isnan(change):
        return "n/a"
    rounded = round_half_up(change)
    marker = UP if change >= 0 else DOWN
    # A value that rounds to zero keeps the sign of its marker: +0.00 or -0.00.
    if rounded == 0:
        rounded = rounded.copy_abs() if change >= 0 else rounded.copy_abs().copy_negate()
    return f"{marker} {rounded:+.2f}%"


def format_quote(display_name: str, record: CoinRecord) -> str:
    """
    Build the Markdown price message.

    Example:
        💰 *Bitcoin*
        💵 Price: *$50000.00*
        📊 24h Change: *📈 +1.50%*
    """
    # Legacy Markdown has no escaping inside an entity, so drop the one
    # character that would close the bold title early.
    title = capitalize_words(display_name).replace("*", "")
    return (
        f"💰 *{title}*\n"
        f"💵 Price: *{format_price(record.price_usd)}*\n"
        f"📊 24h Change: *{format_change(record.change_24h_percent)}*"
    )


def build_options_keyboard(entries: Sequence[CoinCatalogEntry]) -> InlineKeyboardMarkup:
    """One button per row, label = display name, callback data = identifier."""
    rows = [
        [InlineKeyboardButton(text=entry.display_name or entry.identifier, callback_data=entry.identifier)]
        for entry in entries
    ]
    return InlineKeyboardMarkup(rows)

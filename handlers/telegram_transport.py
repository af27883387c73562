"""
handlers/telegram_transport.py
------------------------------
Outbound side of the chat transport.

The dispatcher only talks to a ChatTransport; TelegramTransport is the
production implementation over python-telegram-bot's Bot. Every Telegram
failure is re-raised as TransportSendFailure.
"""

from typing import Optional, Protocol

from telegram import Bot, InlineKeyboardMarkup
from telegram.error import TelegramError

from utils.errors import TransportSendFailure


class ChatTransport(Protocol):
    async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str] = None) -> None:
        ...

    async def send_keyboard(self, chat_id: int, text: str, keyboard: InlineKeyboardMarkup) -> None:
        ...

    async def acknowledge(self, callback_id: str) -> None:
        ...


class TelegramTransport:
    """Sends replies through the Telegram Bot API."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str] = None) -> None:
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, parse_mode=parse_mode)
        except TelegramError as e:
            raise TransportSendFailure(f"send_message to chat {chat_id} failed: {e}") from e

    async def send_keyboard(self, chat_id: int, text: str, keyboard: InlineKeyboardMarkup) -> None:
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=keyboard)
        except TelegramError as e:
            raise TransportSendFailure(f"send_keyboard to chat {chat_id} failed: {e}") from e

    async def acknowledge(self, callback_id: str) -> None:
        """Answer a callback query so the client stops showing the loading spinner."""
        try:
            await self.bot.answer_callback_query(callback_query_id=callback_id)
        except TelegramError as e:
            raise TransportSendFailure(f"answer_callback_query {callback_id} failed: {e}") from e

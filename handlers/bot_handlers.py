"""
handlers/bot_handlers.py
------------------------
python-telegram-bot callbacks.

Each callback converts the Telegram Update into an InboundEvent and hands
it to the EventDispatcher stored in ``application.bot_data``. No business
logic lives here.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.dispatcher import HELP_COMMAND, START_COMMAND, EventDispatcher
from models.events import ButtonPress, TextMessage
from utils.logger import get_logger

logger = get_logger(__name__)

DISPATCHER_KEY = "dispatcher"


def _dispatcher(context: ContextTypes.DEFAULT_TYPE) -> EventDispatcher:
    return context.bot_data[DISPATCHER_KEY]


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start - welcome message plus the top coins keyboard."""
    chat = update.effective_chat
    logger.info(f"Chat {chat.id} started the bot.")
    await _dispatcher(context).dispatch(TextMessage(chat.id, START_COMMAND))


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help - show usage."""
    await _dispatcher(context).dispatch(TextMessage(update.effective_chat.id, HELP_COMMAND))


async def handle_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle any text, including unregistered commands, as a coin name."""
    message = update.message
    if message is None or not message.text:
        return
    await _dispatcher(context).dispatch(TextMessage(message.chat_id, message.text))


async def handle_button_press(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle an inline keyboard press; the callback data is a coin identifier."""
    query = update.callback_query
    if query is None:
        return
    chat = update.effective_chat
    if not query.data or chat is None:
        # Nothing to quote, but Telegram still waits for an answer.
        await query.answer()
        return
    await _dispatcher(context).dispatch(
        ButtonPress(
            chat_id=chat.id,
            payload_identifier=query.data,
            callback_id=query.id,
        )
    )


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log any exception that escaped a handler."""
    logger.error(f"Unhandled error while processing update {update}", exc_info=context.error)

"""
models/events.py
----------------
Inbound events consumed by the dispatcher and the replies it produces.

An inbound event is exactly one of:
    - TextMessage: the user typed something (a coin name or a command).
    - ButtonPress: the user clicked an inline keyboard button whose
      payload is an already-resolved coin identifier.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class TextMessage:
    chat_id: int
    text: str


@dataclass(frozen=True)
class ButtonPress:
    chat_id: int
    payload_identifier: str
    callback_id: str


InboundEvent = Union[TextMessage, ButtonPress]


@dataclass(frozen=True)
class OutboundReply:
    """
    A single message to send back to a chat.

    Attributes:
        chat_id: Telegram chat ID.
        text: Message body.
        parse_mode: Telegram parse mode ('Markdown') or None for plain text.
    """
    chat_id: int
    text: str
    parse_mode: Optional[str] = None

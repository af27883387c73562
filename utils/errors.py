"""
utils/errors.py
---------------
Exception hierarchy shared by every layer.

Clients, repositories and services raise these; only the dispatcher
turns them into messages for the user.
"""


class BotError(Exception):
    """Base class for all errors raised by the bot."""


class ConfigError(BotError):
    """Required configuration is missing or invalid. Fatal at start-up."""


class ProviderUnavailable(BotError):
    """The market data provider could not be reached or answered with an error status."""


class DecodeError(BotError):
    """The market data provider returned JSON with an unexpected shape."""


class NotFound(BotError):
    """No coin matches the requested name."""

    def __init__(self, name: str):
        super().__init__(f"No cryptocurrency named {name!r}")
        self.name = name


class TransportSendFailure(BotError):
    """A message or acknowledgment could not be delivered through the chat transport."""

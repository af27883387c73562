"""
handlers/ - Presentation Layer
================================
Telegram callbacks, the chat transport and the event dispatcher.
Callbacks turn updates into events, the dispatcher routes each event
through the services and sends exactly one reply back.
"""

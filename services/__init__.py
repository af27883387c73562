"""
services/ - Business Logic Layer
================================
Name resolution and reply formatting. No network or Telegram I/O.
"""

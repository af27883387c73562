"""
clients/ - External APIs
========================
Thin async clients for third-party HTTP APIs. The lowest layer: returns
domain models and raises typed errors, never talks to the user.
"""

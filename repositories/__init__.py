"""
repositories/ - Data Access Layer
==================================
Loads the read-only coin catalog from the market data client once at start-up.
"""

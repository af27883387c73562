"""
models/ - Domain Models
=======================
Immutable dataclasses shared by every layer.
"""

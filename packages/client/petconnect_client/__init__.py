"""
PetConnect client

Async client for the PetConnect resource store: API gateway, session
manager, catalog cache with its derived views, and a small CLI.
"""

__version__ = "0.1.0"

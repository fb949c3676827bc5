"""Minted - chat client for the Minted conversations API."""

__version__ = "0.1.0"

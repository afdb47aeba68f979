"""Asyncio client for Hyperliquid info queries and websocket feeds, with price helpers."""

__version__ = "0.1.0"
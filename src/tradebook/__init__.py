"""Orderbook ingestion, FIFO round-trip pairing and behavioral trade reports."""

__version__ = "0.1.0"

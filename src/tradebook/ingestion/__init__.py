"""Orderbook ingestion: header detection and per-vendor row normalization."""

from .formats import SCHEMAS, HeaderSignature, detect_schema, find_header_index
from .normalizer import ParseResult, parse_tradebook, parse_tradebook_text

__all__ = [
    "SCHEMAS",
    "HeaderSignature",
    "detect_schema",
    "find_header_index",
    "ParseResult",
    "parse_tradebook",
    "parse_tradebook_text",
]

"""Custom exception hierarchy for the trade journal."""


class TradebookError(Exception):
    """Base exception for all trade journal errors."""


# --- Configuration ---
class ConfigError(TradebookError):
    """Invalid or missing configuration."""


# --- Ingestion ---
class IngestionError(TradebookError):
    """Orderbook ingestion error."""


class UnrecognizedFormatError(IngestionError):
    """No known trade table header was found in the uploaded file."""

    def __init__(self, source: str = ""):
        self.source = source
        message = "No recognizable trade table found"
        if source:
            message = f"{message} in {source}"
        super().__init__(message)


class NoTradesError(IngestionError):
    """The trade table was recognized but held no valid trade rows."""

    def __init__(self, source: str = ""):
        self.source = source
        message = "No valid trades found"
        if source:
            message = f"{message} in {source}"
        super().__init__(message)


# --- Storage ---
class StorageError(TradebookError):
    """Execution store failure."""

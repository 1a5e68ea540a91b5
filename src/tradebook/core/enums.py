"""Enumerations used across the trade journal."""

from enum import Enum


class Side(str, Enum):
    BUY = "Buy"
    SELL = "Sell"

    @property
    def opposite(self) -> "Side":
        return Side.SELL if self is Side.BUY else Side.BUY

    @classmethod
    def parse(cls, value: str | None) -> "Side | None":
        """Map a vendor direction marker (``B``, ``buy``, ``SELL``...) to a Side."""
        if not value:
            return None
        marker = value.strip().lower()
        if marker in ("buy", "b"):
            return cls.BUY
        if marker in ("sell", "s"):
            return cls.SELL
        return None


class TradebookSchema(str, Enum):
    """Known vendor orderbook layouts."""

    EXECUTION_LOG = "execution_log"      # symbol,isin,trade_date,...
    CONTRACT_NOTE = "contract_note"      # Scrip/Contract,Buy/Sell,Buy Price,...
    SCRIP_LEDGER = "scrip_ledger"        # Scrip Name,Trade Type,Trade Date,...


class SymbolDialect(str, Enum):
    """Instrument symbol encodings understood by the plan comparison."""

    DASHED = "dashed"        # NIFTY-Sep2025-25000-CE
    SPACED = "spaced"        # OPTIDX NIFTY Sep 25 2025 25000 CE
    COMPACT = "compact"      # NIFTY25U1825000CE
    UNPARSED = "unparsed"


class StorageBackend(str, Enum):
    MEMORY = "memory"
    POSTGRES = "postgres"

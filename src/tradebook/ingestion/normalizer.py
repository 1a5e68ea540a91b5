"""Row normalization: vendor rows to canonical ``Trade`` records.

Each known layout names its columns differently, reports prices and
charges differently, and splits (or combines) date and time in its own
way.  One extractor per layout maps a CSV row to a ``Trade``.

Rows missing a symbol, side, quantity or price cannot take part in
pairing and are skipped without raising; they are vendor-export noise
(sub-totals, blank separator rows).  Dates that match no known pattern
are kept on a best-effort basis and reported as ``DataQualityWarning``.

Usage::

    result = parse_tradebook("uploads/orderbook.csv")
    print(result.schema, len(result.trades), result.warnings)
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from tradebook.core.enums import Side, TradebookSchema
from tradebook.journal.record import DataQualityWarning, Trade

from .dates import normalize_time, normalize_trade_date, split_datetime
from .formats import detect_schema

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")
_HAS_CLOCK = re.compile(r"\d{1,2}:\d{2}")

# Itemized charge columns summed into one figure
CONTRACT_NOTE_CHARGES = (
    "Brokerage",
    "GST",
    "STT",
    "Sebi Tax",
    "Stamp Duty",
    "Other Charges",
    "IPFT Charges",
)
# Vendors use one of these two names; never both
EXCHANGE_TURNOVER_COLUMNS = ("Exchange Turnover Charges", "Exchange Turnover")
SCRIP_LEDGER_CHARGES = ("Brokerage", "GST", "STT", "Stamp Duty", "Other Charges")
STOP_DISTANCE_COLUMNS = ("stop_distance", "Stop Distance", "SL Distance")


@dataclass
class ParseResult:
    """Outcome of parsing one uploaded orderbook."""

    schema: TradebookSchema
    trades: list[Trade] = field(default_factory=list)
    warnings: list[DataQualityWarning] = field(default_factory=list)
    skipped_rows: int = 0
    preamble_lines: int = 0


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def _cell(row: dict[str, str], *names: str) -> str:
    """First non-empty value among ``names``."""
    for name in names:
        value = row.get(name)
        if value is not None and value.strip():
            return value.strip()
    return ""


def _number(value: str) -> float | None:
    if not value:
        return None
    try:
        return float(value.replace(",", ""))
    except ValueError:
        return None


def _quantity(value: str) -> int:
    num = _number(value)
    if num is None:
        return 0
    return abs(int(num))


def _sum_columns(row: dict[str, str], columns: tuple[str, ...]) -> float:
    return sum(_number(_cell(row, c)) or 0.0 for c in columns)


def _stop_distance(row: dict[str, str]) -> float | None:
    value = _number(_cell(row, *STOP_DISTANCE_COLUMNS))
    return value if value and value > 0 else None


# ---------------------------------------------------------------------------
# Per-layout extractors
# ---------------------------------------------------------------------------

@dataclass
class _RawRow:
    """Fields pulled from one CSV row before validation."""

    date: str
    time: str
    symbol: str
    side: Side | None
    quantity: int
    price: float | None
    charges: float = 0.0
    buy_price_raw: float | None = None
    sell_price_raw: float | None = None
    stop_distance: float | None = None


def _execution_log_row(row: dict[str, str]) -> _RawRow:
    date = _cell(row, "trade_date")
    time = ""
    executed_at = _cell(row, "order_execution_time")
    if executed_at:
        exec_date, exec_time = split_datetime(executed_at)
        if exec_time:
            date, time = exec_date, exec_time
    if not time:
        time = _cell(row, "trade_time")

    return _RawRow(
        date=date,
        time=time,
        symbol=_cell(row, "symbol"),
        side=Side.parse(_cell(row, "trade_type")),
        quantity=_quantity(_cell(row, "quantity")),
        price=_number(_cell(row, "price")),
        stop_distance=_stop_distance(row),
    )


def _contract_note_row(row: dict[str, str]) -> _RawRow:
    side = Side.parse(_cell(row, "Buy/Sell"))
    buy_raw = _number(_cell(row, "Buy Price"))
    sell_raw = _number(_cell(row, "Sell Price"))
    price = buy_raw if side == Side.BUY else sell_raw

    date = _cell(row, "Date", "Trade Date")
    time = _cell(row, "Time", "Trade Time", "Order Time", "TradeDateTime")
    if " " in time:
        stamp_date, stamp_time = split_datetime(time)
        # "09:25 AM" has a space but no date part
        if stamp_time:
            date, time = stamp_date, stamp_time
    if not _HAS_CLOCK.search(time):
        time = ""

    turnover = 0.0
    for column in EXCHANGE_TURNOVER_COLUMNS:
        turnover = _number(_cell(row, column)) or 0.0
        if turnover:
            break

    return _RawRow(
        date=date,
        time=time,
        symbol=_cell(row, "Scrip/Contract"),
        side=side,
        quantity=_quantity(_cell(row, "Quantity")),
        price=price,
        charges=_sum_columns(row, CONTRACT_NOTE_CHARGES) + turnover,
        # One of the two is always blank or zero on a given row
        buy_price_raw=buy_raw or None,
        sell_price_raw=sell_raw or None,
        stop_distance=_stop_distance(row),
    )


def _scrip_ledger_row(row: dict[str, str]) -> _RawRow:
    date = _cell(row, "Trade Date")
    time = _cell(row, "Trade Time", "Order Time")
    if " " in date and not time:
        date, time = split_datetime(date)

    return _RawRow(
        date=date,
        time=time,
        symbol=_cell(row, "Scrip Name"),
        side=Side.parse(_cell(row, "Trade Type")),
        quantity=_quantity(_cell(row, "Quantity", "Qty")),
        price=_number(_cell(row, "Price", "Trade Price", "Rate")),
        charges=_sum_columns(row, SCRIP_LEDGER_CHARGES),
        stop_distance=_stop_distance(row),
    )


_EXTRACTORS: dict[TradebookSchema, Callable[[dict[str, str]], _RawRow]] = {
    TradebookSchema.EXECUTION_LOG: _execution_log_row,
    TradebookSchema.CONTRACT_NOTE: _contract_note_row,
    TradebookSchema.SCRIP_LEDGER: _scrip_ledger_row,
}


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def parse_tradebook_text(
    text: str,
    *,
    symbol: str | None = None,
    source: str = "",
) -> ParseResult:
    """Parse raw export text into canonical trades.

    Parameters
    ----------
    text : str
        Full file contents.
    symbol : str | None
        When given, only trades in this instrument are kept.
    source : str
        File name used in error messages.

    Raises
    ------
    UnrecognizedFormatError
        If no known trade table header is present.
    """
    lines = _LINE_SPLIT.split(text)
    header_idx, schema = detect_schema(lines, source=source)
    table = "\n".join(lines[header_idx:])

    reader = csv.DictReader(io.StringIO(table), skipinitialspace=True)
    if reader.fieldnames:
        reader.fieldnames = [
            (name or "").replace("\ufeff", "").strip() for name in reader.fieldnames
        ]

    extract = _EXTRACTORS[schema]
    result = ParseResult(schema=schema, preamble_lines=header_idx)

    for offset, row in enumerate(reader, start=1):
        row_number = header_idx + 1 + offset
        raw = extract({k: v for k, v in row.items() if isinstance(k, str) and isinstance(v, str)})

        if not raw.symbol or raw.side is None or raw.quantity <= 0 or raw.price is None or raw.price < 0:
            result.skipped_rows += 1
            logger.debug("Skipping incomplete row %d: %s", row_number, row)
            continue
        if symbol and raw.symbol != symbol:
            continue

        trade_date, recognized = normalize_trade_date(raw.date)
        if not recognized:
            result.warnings.append(DataQualityWarning(
                row_number=row_number,
                field="date",
                value=raw.date,
                message=f"Unrecognized date format; using {trade_date!r}",
            ))
            logger.warning(
                "Row %d: unrecognized date %r, falling back to %r",
                row_number, raw.date, trade_date,
            )

        result.trades.append(Trade(
            date=trade_date,
            time=normalize_time(raw.time),
            symbol=raw.symbol,
            side=raw.side,
            quantity=raw.quantity,
            price=raw.price,
            charges=raw.charges,
            buy_price_raw=raw.buy_price_raw,
            sell_price_raw=raw.sell_price_raw,
            stop_distance=raw.stop_distance,
            schema=schema,
        ))

    logger.info(
        "Parsed %d trades from %s table (%d rows skipped, %d date warnings)",
        len(result.trades), schema.value, result.skipped_rows, len(result.warnings),
    )
    return result


def parse_tradebook(path: str | Path, *, symbol: str | None = None) -> ParseResult:
    """Read an orderbook export from disk and parse it.

    The caller owns the file and is responsible for removing it.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8-sig", errors="replace")
    return parse_tradebook_text(text, symbol=symbol, source=p.name)

"""Derivative symbol parsing across broker dialects.

Three encodings are recognised:

- ``DASHED``   ``NIFTY-Sep2025-25000-CE``
- ``SPACED``   ``OPTIDX NIFTY Sep 25 2025 25000 CE`` (optional segment
  prefix, optional expiry day, optional trailing parenthesised note)
- ``COMPACT``  ``NIFTY25U1825000CE`` (two-digit year, futures month
  letter, expiry day, strike, option type)

Anything else is ``UNPARSED`` and keeps only the alphanumerics of the raw
text as its underlying, so two unparsed symbols still compare by name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from tradebook.core.enums import SymbolDialect

_DASHED = re.compile(r"^([A-Z]+)-([A-Za-z]{3,})\s?(\d{4})-(\d+)-([A-Z]{2,})$")
_SPACED = re.compile(
    r"^(?:OPTIDX|OPTSTK|FUTIDX|FUTSTK|BSXOPT|BSXFUT)? ?([A-Z]+)\s+([A-Za-z]{3,})\s+"
    r"(\d{1,2})?\s?(\d{4})\s+([\d.]+)\s+([A-Z]{2,})(?:\s?\(.*\))?$"
)
_COMPACT = re.compile(r"^([A-Z]+)(\d{2})([A-Z])(\d{1,2})(\d+)([A-Z]{2})$")
_NON_WORD = re.compile(r"[\W_]")

# Futures month letter codes; "O" is a common broker alias for October.
MONTH_CODES: dict[str, str] = {
    "F": "JAN", "G": "FEB", "H": "MAR", "J": "APR", "K": "MAY", "M": "JUN",
    "N": "JUL", "Q": "AUG", "U": "SEP", "V": "OCT", "X": "NOV", "Z": "DEC",
    "O": "OCT",
}


def month_from_code(code: str) -> str:
    code = code.upper()
    return MONTH_CODES.get(code, code)


@dataclass(frozen=True)
class InstrumentSymbol:
    """Structured view of a derivative symbol."""

    raw: str
    dialect: SymbolDialect
    underlying: str
    expiry_month: str | None = None  # JAN..DEC
    expiry_year: str | None = None   # four digits
    expiry_day: int | None = None
    strike: float | None = None
    option_type: str | None = None   # CE / PE / FU...

    @property
    def is_parsed(self) -> bool:
        return self.dialect is not SymbolDialect.UNPARSED

    def matches(self, other: InstrumentSymbol, strike_tolerance: float = 0.01) -> bool:
        """Same contract: underlying, strike, option type, expiry month and year.

        The expiry day is ignored so a monthly plan matches a weekly print
        of the same series.
        """
        if self.underlying != other.underlying:
            return False
        if self.strike != other.strike:
            if self.strike is None or other.strike is None:
                return False
            if abs(self.strike - other.strike) >= strike_tolerance:
                return False
        return (
            self.option_type == other.option_type
            and self.expiry_month == other.expiry_month
            and str(self.expiry_year) == str(other.expiry_year)
        )


def _clean(text: str) -> str:
    return _NON_WORD.sub("", text)


def parse_instrument(symbol: str) -> InstrumentSymbol:
    """Parse *symbol* in any known dialect.  Never raises."""
    raw = symbol or ""
    text = raw.strip()

    m = _DASHED.match(text)
    if m:
        return InstrumentSymbol(
            raw=raw,
            dialect=SymbolDialect.DASHED,
            underlying=_clean(m.group(1)),
            expiry_month=m.group(2)[:3].upper(),
            expiry_year=m.group(3),
            strike=float(m.group(4)),
            option_type=m.group(5)[:2].upper(),
        )

    m = _SPACED.match(text)
    if m:
        return InstrumentSymbol(
            raw=raw,
            dialect=SymbolDialect.SPACED,
            underlying=_clean(m.group(1)),
            expiry_month=m.group(2)[:3].upper(),
            expiry_day=int(m.group(3)) if m.group(3) else None,
            expiry_year=m.group(4),
            strike=float(m.group(5)),
            option_type=m.group(6)[:2].upper(),
        )

    m = _COMPACT.match(text)
    if m:
        return InstrumentSymbol(
            raw=raw,
            dialect=SymbolDialect.COMPACT,
            underlying=m.group(1),
            expiry_year="20" + m.group(2),
            expiry_month=month_from_code(m.group(3)),
            expiry_day=int(m.group(4)),
            strike=float(m.group(5)),
            option_type=m.group(6),
        )

    return InstrumentSymbol(raw=raw, dialect=SymbolDialect.UNPARSED, underlying=_clean(text))

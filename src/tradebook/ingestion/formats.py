"""Trade table header detection.

Brokers prepend disclaimers, account summaries and blank lines to their
exports.  Detection scans line by line for one of the known header
signatures; the first matching line starts the trade table and
everything before it is discarded.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from tradebook.core.enums import TradebookSchema
from tradebook.core.errors import UnrecognizedFormatError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")


def _squash(text: str) -> str:
    return _WHITESPACE.sub("", text).replace("\ufeff", "").lower()


@dataclass(frozen=True)
class HeaderSignature:
    """Leading columns that identify a vendor layout."""

    schema: TradebookSchema
    prefix: str

    def matches(self, line: str) -> bool:
        """Case-insensitive, whitespace-agnostic prefix comparison."""
        return _squash(line).startswith(_squash(self.prefix))


SCHEMAS: tuple[HeaderSignature, ...] = (
    HeaderSignature(TradebookSchema.CONTRACT_NOTE, "Scrip/Contract,Buy/Sell,Buy Price"),
    HeaderSignature(TradebookSchema.EXECUTION_LOG, "symbol,isin,trade_date"),
    HeaderSignature(TradebookSchema.SCRIP_LEDGER, "Scrip Name,Trade Type,Trade Date"),
)


def find_header_index(lines: list[str]) -> tuple[int, TradebookSchema] | None:
    """Return ``(line_index, schema)`` of the first known header, or None."""
    for idx, line in enumerate(lines):
        for signature in SCHEMAS:
            if signature.matches(line):
                return idx, signature.schema
    return None


def detect_schema(lines: list[str], *, source: str = "") -> tuple[int, TradebookSchema]:
    """Locate the trade table or fail the upload.

    Raises:
        UnrecognizedFormatError: If no line matches a known header.
    """
    found = find_header_index(lines)
    if found is None:
        raise UnrecognizedFormatError(source)
    idx, schema = found
    logger.info(
        "Detected %s trade table at line %d (%d preamble lines dropped)",
        schema.value, idx + 1, idx,
    )
    return idx, schema

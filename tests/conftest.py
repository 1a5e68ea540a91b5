"""Shared test fixtures: sample orderbook exports for every vendor layout."""

from __future__ import annotations

import pytest

from tradebook.core.config import TaggerConfig
from tradebook.journal.report_store import ReportStore
from tradebook.storage.memory_store import MemoryExecutionStore

# Schema A: execution log with a disclaimer preamble and combined timestamps
EXECUTION_LOG_CSV = """\
Tradebook for client AB1234
Period 2024-01-01 to 2024-01-31

symbol,isin,trade_date,exchange,segment,series,trade_type,auction,quantity,price,trade_id,order_id,order_execution_time
NIFTY24JAN21500CE,,2024-01-05,NSE,FO,,buy,false,50,100.00,1,11,2024-01-05T09:30:00
NIFTY24JAN21500CE,,2024-01-05,NSE,FO,,sell,false,50,120.00,2,12,2024-01-05T09:45:00
BANKNIFTY24JAN47000PE,,2024-01-05,NSE,FO,,sell,false,15,200.00,3,13,2024-01-05T10:00:00
BANKNIFTY24JAN47000PE,,2024-01-05,NSE,FO,,buy,false,15,230.00,4,14,2024-01-05T10:20:00
"""

# Schema B: contract note with side-specific price columns and itemized charges
CONTRACT_NOTE_CSV = """\
Contract Note
Client: XYZ
Scrip/Contract,Buy/Sell,Buy Price,Sell Price,Quantity,Date,Time,Brokerage,GST,STT,Sebi Tax,Stamp Duty,Exchange Turnover Charges,Other Charges,IPFT Charges
RELIANCE,B,2500.00,,10,05/01/2024,09:25:00,20,3.6,0,0.01,0.38,0.9,0,0.01
RELIANCE,S,,2520.50,10,05/01/2024,14:10:00,20,3.6,6.3,0.01,0,0.9,0,0.01
"""

# Schema C: scrip ledger with day-first dashed dates
SCRIP_LEDGER_CSV = """\
Scrip Name,Trade Type,Trade Date,Trade Time,Quantity,Price,Brokerage,GST,STT,Stamp Duty,Other Charges
TATASTEEL,Buy,10-01-2024,09:40,100,140.5,10,1.8,0,0.5,0
TATASTEEL,Sell,10-01-2024,11:05,100,142.0,10,1.8,3.5,0,0
"""


@pytest.fixture
def execution_log_csv():
    return EXECUTION_LOG_CSV


@pytest.fixture
def contract_note_csv():
    return CONTRACT_NOTE_CSV


@pytest.fixture
def scrip_ledger_csv():
    return SCRIP_LEDGER_CSV


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing export text to a temp file and returning its path."""

    def _write(text: str, name: str = "orderbook.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def tagger_config():
    return TaggerConfig()


@pytest.fixture
def memory_store():
    return MemoryExecutionStore()


@pytest.fixture
def report_store():
    return ReportStore()

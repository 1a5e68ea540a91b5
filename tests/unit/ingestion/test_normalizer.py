"""Tests for row normalization across vendor layouts."""

import pytest

from tradebook.core.enums import Side, TradebookSchema
from tradebook.core.errors import UnrecognizedFormatError
from tradebook.ingestion.normalizer import parse_tradebook, parse_tradebook_text


class TestExecutionLog:
    """Schema A: combined execution timestamp, no charges."""

    def test_parses_all_rows(self, execution_log_csv):
        result = parse_tradebook_text(execution_log_csv)
        assert result.schema == TradebookSchema.EXECUTION_LOG
        assert result.preamble_lines == 3
        assert len(result.trades) == 4
        assert result.warnings == []

    def test_fields(self, execution_log_csv):
        first = parse_tradebook_text(execution_log_csv).trades[0]
        assert first.symbol == "NIFTY24JAN21500CE"
        assert first.side == Side.BUY
        assert first.quantity == 50
        assert first.price == 100.0
        assert first.date == "2024-01-05"
        assert first.time == "09:30"
        assert first.charges == 0.0
        assert first.schema == TradebookSchema.EXECUTION_LOG

    def test_trade_time_used_without_execution_timestamp(self):
        text = (
            "symbol,isin,trade_date,trade_type,quantity,price,trade_time\n"
            "INFY,,2024-01-05,sell,5,1500,13:45:10\n"
        )
        trade = parse_tradebook_text(text).trades[0]
        assert trade.time == "13:45"
        assert trade.side == Side.SELL


class TestContractNote:
    """Schema B: side-selected price and itemized charges."""

    def test_price_chosen_by_side(self, contract_note_csv):
        buy, sell = parse_tradebook_text(contract_note_csv).trades
        assert buy.side == Side.BUY and buy.price == 2500.0
        assert sell.side == Side.SELL and sell.price == 2520.5

    def test_raw_prices_kept(self, contract_note_csv):
        buy, sell = parse_tradebook_text(contract_note_csv).trades
        assert buy.buy_price_raw == 2500.0
        assert buy.sell_price_raw is None
        assert sell.sell_price_raw == 2520.5

    def test_charges_summed(self, contract_note_csv):
        buy, sell = parse_tradebook_text(contract_note_csv).trades
        assert buy.charges == pytest.approx(24.9)
        assert sell.charges == pytest.approx(30.82)

    def test_slashed_date_is_month_first(self, contract_note_csv):
        buy, _ = parse_tradebook_text(contract_note_csv).trades
        assert buy.date == "2024-05-01"
        assert buy.time == "09:25"

    def test_exchange_turnover_alternate_name(self):
        text = (
            "Scrip/Contract,Buy/Sell,Buy Price,Sell Price,Quantity,Date,Brokerage,Exchange Turnover\n"
            "SBIN,Buy,600,,1,2024-02-01,5,1.5\n"
        )
        assert parse_tradebook_text(text).trades[0].charges == pytest.approx(6.5)

    def test_embedded_date_in_time_column(self):
        text = (
            "Scrip/Contract,Buy/Sell,Buy Price,Sell Price,Quantity,TradeDateTime\n"
            "SBIN,S,,610,2,2024-02-01 10:05:00\n"
        )
        trade = parse_tradebook_text(text).trades[0]
        assert trade.date == "2024-02-01"
        assert trade.time == "10:05"

    def test_meridiem_time_keeps_date_column(self):
        text = (
            "Scrip/Contract,Buy/Sell,Buy Price,Sell Price,Quantity,Date,Time\n"
            "SBIN,B,600,,1,2024-01-05,09:25 AM\n"
            "SBIN,S,,605,1,2024-01-05,02:40 PM\n"
        )
        result = parse_tradebook_text(text)
        buy, sell = result.trades
        assert (buy.date, buy.time) == ("2024-01-05", "09:25")
        assert (sell.date, sell.time) == ("2024-01-05", "14:40")
        assert result.warnings == []


class TestScripLedger:
    """Schema C: Scrip Name / Trade Type layout."""

    def test_parses_rows(self, scrip_ledger_csv):
        result = parse_tradebook_text(scrip_ledger_csv)
        assert result.schema == TradebookSchema.SCRIP_LEDGER
        buy, sell = result.trades
        assert buy.date == "2024-01-10"
        assert buy.time == "09:40"
        assert buy.price == 140.5
        assert buy.charges == pytest.approx(12.3)
        assert sell.side == Side.SELL
        assert sell.charges == pytest.approx(15.3)


class TestRowFiltering:
    """Incomplete rows are dropped, never raised."""

    def test_incomplete_rows_skipped(self):
        text = (
            "symbol,isin,trade_date,trade_type,quantity,price\n"
            "INFY,,2024-01-05,buy,10,1500\n"
            ",,2024-01-05,buy,10,1500\n"
            "INFY,,2024-01-05,hold,10,1500\n"
            "INFY,,2024-01-05,buy,0,1500\n"
            "INFY,,2024-01-05,buy,10,\n"
            "Total,,,,,\n"
        )
        result = parse_tradebook_text(text)
        assert len(result.trades) == 1
        assert result.skipped_rows == 5

    def test_negative_quantity_becomes_absolute(self):
        text = (
            "symbol,isin,trade_date,trade_type,quantity,price\n"
            "INFY,,2024-01-05,sell,-10,1500\n"
        )
        assert parse_tradebook_text(text).trades[0].quantity == 10

    def test_thousands_separators(self):
        text = (
            "symbol,isin,trade_date,trade_type,quantity,price\n"
            'MRF,,2024-01-05,buy,"1,000","1,25,000.50"\n'
        )
        trade = parse_tradebook_text(text).trades[0]
        assert trade.quantity == 1000
        assert trade.price == 125000.5

    def test_symbol_filter(self, execution_log_csv):
        result = parse_tradebook_text(execution_log_csv, symbol="BANKNIFTY24JAN47000PE")
        assert {t.symbol for t in result.trades} == {"BANKNIFTY24JAN47000PE"}
        assert len(result.trades) == 2

    def test_stop_distance_column(self):
        text = (
            "symbol,isin,trade_date,trade_type,quantity,price,stop_distance\n"
            "INFY,,2024-01-05,buy,10,1500,12.5\n"
        )
        assert parse_tradebook_text(text).trades[0].stop_distance == 12.5


class TestDateWarnings:
    """Unrecognized dates are kept and reported."""

    def test_warning_recorded(self):
        text = (
            "symbol,isin,trade_date,trade_type,quantity,price\n"
            "INFY,,5th Jan 2024,buy,10,1500\n"
        )
        result = parse_tradebook_text(text)
        assert len(result.trades) == 1
        assert result.trades[0].date == "5th Jan 20"
        [warning] = result.warnings
        assert warning.field == "date"
        assert warning.value == "5th Jan 2024"
        assert warning.row_number == 2


class TestParseTradebookFile:
    """Reading from disk."""

    def test_reads_file_with_bom(self, write_csv, scrip_ledger_csv):
        path = write_csv("\ufeff" + scrip_ledger_csv)
        assert len(parse_tradebook(path).trades) == 2

    def test_unrecognized_file(self, write_csv):
        path = write_csv("date,amount\n2024-01-01,5\n", name="bank.csv")
        with pytest.raises(UnrecognizedFormatError, match="bank.csv"):
            parse_tradebook(path)

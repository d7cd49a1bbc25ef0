"""Tests for Pydantic data models (Transaction, TransactionFilter, Aggregation)."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from models import Aggregation, Transaction, TransactionFilter


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------

class TestTransaction:
    def test_required_fields(self):
        t = Transaction(title="T", price=10, dateOfSale="2022-01-01T00:00:00Z")
        assert t.title == "T"
        assert t.price == 10.0
        assert t.date_of_sale == datetime(2022, 1, 1, tzinfo=timezone.utc)

    def test_optional_defaults(self):
        t = Transaction(title="T", price=10, dateOfSale="2022-01-01T00:00:00Z")
        assert t.id is None
        assert t.description == ""
        assert t.category == ""
        assert t.image == ""
        assert t.sold is False

    def test_populate_by_field_name(self):
        t = Transaction(title="T", price=1, date_of_sale="2022-01-01T00:00:00Z")
        assert t.date_of_sale.year == 2022

    def test_naive_date_taken_as_utc(self):
        t = Transaction(title="T", price=1, dateOfSale="2022-06-30T23:30:00")
        assert t.date_of_sale.tzinfo is not None
        assert t.date_of_sale.month == 6

    def test_offset_converted_to_utc(self):
        t = Transaction(title="T", price=1, dateOfSale="2022-07-01T02:00:00+05:30")
        assert t.date_of_sale.month == 6
        assert t.date_of_sale.utcoffset().total_seconds() == 0

    def test_dumps_camel_case_alias(self):
        t = Transaction(title="T", price=1, dateOfSale="2022-01-01T00:00:00Z")
        assert "dateOfSale" in t.model_dump(by_alias=True)

    def test_missing_title_raises(self):
        with pytest.raises(ValidationError):
            Transaction(price=1, dateOfSale="2022-01-01T00:00:00Z")

    def test_missing_price_raises(self):
        with pytest.raises(ValidationError):
            Transaction(title="T", dateOfSale="2022-01-01T00:00:00Z")

    def test_bad_date_raises(self):
        with pytest.raises(ValidationError):
            Transaction(title="T", price=1, dateOfSale="yesterday")


# ---------------------------------------------------------------------------
# TransactionFilter / Aggregation
# ---------------------------------------------------------------------------

class TestTransactionFilter:
    def test_defaults_unrestricted(self):
        f = TransactionFilter()
        assert f.month is None
        assert f.search is None
        assert f.sold is None

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range_raises(self, month):
        with pytest.raises(ValidationError):
            TransactionFilter(month=month)


class TestAggregation:
    def test_defaults(self):
        a = Aggregation()
        assert a.match == TransactionFilter()
        assert a.group_by is None
        assert a.accumulator == "COUNT(*)"

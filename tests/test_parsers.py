"""Tests for amount and date parsing utilities."""

import pytest
from datetime import datetime, UTC, timedelta, timezone
from decimal import Decimal

from autostock.utils.amount_parser import parse_amount, parse_quantity
from autostock.utils.date_parser import days_between, parse_timestamp, parse_timestamp_or


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("123.45", Decimal("123.45")),
            ("$123.45", Decimal("123.45")),
            ("S/ 45.90", Decimal("45.90")),
            ("1,234.56", Decimal("1234.56")),
            ("(12.00)", Decimal("-12.00")),
            (" 7 ", Decimal("7")),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)


class TestParseQuantity:
    def test_plain_integer(self):
        assert parse_quantity("12") == 12

    def test_leading_integer(self):
        assert parse_quantity("12 unidades") == 12

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_quantity("doce")


class TestParseTimestamp:
    def test_date_only_is_utc_midnight(self):
        assert parse_timestamp("2024-02-15") == datetime(2024, 2, 15, tzinfo=UTC)

    def test_offset_preserved(self):
        value = parse_timestamp("2024-02-15T10:00:00-05:00")
        assert value.utcoffset() == timedelta(hours=-5)
        assert value == datetime(2024, 2, 15, 15, 0, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_timestamp("not a date")

    def test_default_on_blank_or_invalid(self):
        default = datetime(2024, 1, 1, tzinfo=UTC)
        assert parse_timestamp_or("", default) == default
        assert parse_timestamp_or(None, default) == default
        assert parse_timestamp_or("garbage", default) == default
        assert parse_timestamp_or("2024-03-01", default) == datetime(2024, 3, 1, tzinfo=UTC)


def test_days_between():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    assert days_between(start, datetime(2024, 1, 31, tzinfo=UTC)) == 30
    assert days_between(start, datetime(2023, 12, 31, tzinfo=UTC)) == -1

"""Utility functions for autostock."""

from autostock.utils.date_parser import parse_timestamp, parse_timestamp_or, days_between
from autostock.utils.amount_parser import parse_amount, parse_quantity

__all__ = ["parse_timestamp", "parse_timestamp_or", "days_between", "parse_amount", "parse_quantity"]

"""Utility functions for ctengine."""

from ctengine.utils.date_parser import parse_date
from ctengine.utils.amount_parser import parse_amount, round_money

__all__ = ["parse_date", "parse_amount", "round_money"]

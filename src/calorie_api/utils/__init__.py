"""Utility functions."""

from .dates import calendar_month_dates, to_iso_date, utc_now

__all__ = ["calendar_month_dates", "to_iso_date", "utc_now"]

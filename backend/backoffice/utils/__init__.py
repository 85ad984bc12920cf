"""Utility functions and helpers."""

from backoffice.utils.datetime_utils import current_year, to_api_timezone

__all__ = [
    "current_year",
    "to_api_timezone",
]

"""
phonetype - phone number recognition and country code resolution.

This package parses free-form phone number text into a country calling code
and a national number, resolves strict E.164 strings against a table of known
dial codes, and renders parsed numbers back with a chosen separator.
"""

from __future__ import annotations

from phonetype.core.countries import CountryCodeTable, CountryEntry
from phonetype.core.resolver import (
    InvalidPhoneNumberError,
    NotE164FormatError,
    ParsedNumber,
    PhoneParseError,
    PhoneResolver,
    format_national,
)

__all__ = [
    "CountryCodeTable",
    "CountryEntry",
    "InvalidPhoneNumberError",
    "NotE164FormatError",
    "ParsedNumber",
    "PhoneParseError",
    "PhoneResolver",
    "__version__",
    "format_national",
]

__version__ = "0.1.0"

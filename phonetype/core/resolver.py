"""
Phone number resolution and formatting.

`PhoneResolver` turns raw text into a `ParsedNumber` using the structural
recognizers in `phonetype.core.patterns` and, for strict E.164 input, the
country code table to decide where the country code ends.

Resolution either returns a complete `ParsedNumber` or raises a
`PhoneParseError` subclass; there is no partially parsed result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from phonetype.core.countries import MIN_NATIONAL_DIGITS, CountryCodeTable, CountryEntry
from phonetype.core.patterns import match_bare, match_strict_e164, match_with_country_code

logger = logging.getLogger(__name__)

ResolveMode = Literal["auto", "e164", "country_code", "bare"]


class PhoneParseError(ValueError):
    """Base class for resolution failures. `raw` is the rejected input."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class NotE164FormatError(PhoneParseError):
    """Raised when input is not `+` followed by 1-15 digits."""


class InvalidPhoneNumberError(PhoneParseError):
    """Raised when input matches no phone number shape, or no dial code fits it."""


def format_national(digits: str, separator: str = "-") -> str:
    """
    Group national number digits with `separator`.

    10 digits render as 3-3-4 and 11 digits as 1-3-3-4. Other lengths get a
    separator after every third digit. Fewer than 4 digits are returned as is.
    """

    n = len(digits)
    if n < MIN_NATIONAL_DIGITS:
        return digits
    if n == 10:
        return separator.join((digits[:3], digits[3:6], digits[6:]))
    if n == 11:
        return separator.join((digits[:1], digits[1:4], digits[4:7], digits[7:]))
    return separator.join(digits[i : i + 3] for i in range(0, n, 3))


@dataclass(frozen=True, slots=True)
class ParsedNumber:
    """
    A resolved phone number.

    Fields:
        country_code: Dial code digits without `+`, or None for bare input.
        national_number: Subscriber digits only (at least 4).
        raw: The text this value was resolved from. Not part of equality.
    """

    country_code: str | None
    national_number: str
    raw: str = field(default="", compare=False)

    def with_separator(self, separator: str = "-") -> str:
        return format_national(self.national_number, separator)

    def to_e164(self) -> str | None:
        if self.country_code is None:
            return None
        return f"+{self.country_code}{self.national_number}"

    def display(self) -> str:
        if self.country_code is None:
            return self.national_number
        return f"+{self.country_code}-{self.national_number}"

    def __str__(self) -> str:
        return self.display()


def _require_str(s: object) -> str:
    if not isinstance(s, str):
        raise TypeError(f"phone number must be a str, not {type(s).__name__}")
    return s


class PhoneResolver:
    """
    Resolve raw phone number text against a country code table.

    One resolver (and its table) is meant to be built at startup and shared;
    every method is a pure function of its input.
    """

    def __init__(self, table: CountryCodeTable, *, separator: str = "-") -> None:
        self.table = table
        self.separator = separator

    def resolve_e164(self, s: str) -> ParsedNumber:
        """
        Resolve a strict E.164 string such as `+521234567890`.

        The country code is the longest dial code in the table that prefixes
        the digits and leaves at least four digits for the national number.

        Raises:
            NotE164FormatError: if `s` is not `+` followed by 1-15 digits.
            InvalidPhoneNumberError: if no dial code fits the digits.
        """

        payload = match_strict_e164(_require_str(s))
        if payload is None:
            raise NotE164FormatError(f"Not an E.164 phone number: {s!r}", raw=s)

        code = self.table.longest_matching_prefix(payload)
        if code is None:
            logger.debug("No dial code fits %s", s)
            raise InvalidPhoneNumberError(f"Unknown or incomplete country code: {s!r}", raw=s)

        national = payload[len(code) :]
        if len(national) < MIN_NATIONAL_DIGITS:
            raise InvalidPhoneNumberError(f"National number too short: {s!r}", raw=s)
        return ParsedNumber(country_code=code, national_number=national, raw=s)

    def resolve_with_country_code(self, s: str) -> ParsedNumber:
        """
        Resolve a grouped number with an inline country code, e.g.
        `+52 (55) 1234-5678`.

        The leading group is taken as the country code without checking the
        table; the grouping already tells where it ends.
        """

        m = match_with_country_code(_require_str(s))
        if m is None:
            raise InvalidPhoneNumberError(f"Invalid phone number: {s!r}", raw=s)
        return ParsedNumber(country_code=m.country_code, national_number=m.digits, raw=s)

    def resolve_bare(self, s: str) -> ParsedNumber:
        m = match_bare(_require_str(s))
        if m is None:
            raise InvalidPhoneNumberError(f"Invalid phone number: {s!r}", raw=s)
        return ParsedNumber(country_code=None, national_number=m.digits, raw=s)

    def resolve_auto(self, s: str) -> ParsedNumber:
        """
        Try the inline country code shape first, then the bare shape.

        The inline shape wins whenever it matches, so a leading group of 1-3
        digits becomes the country code: `555-1234` resolves to country code
        `555` with national number `1234`, and `111-111-1111` to `111` and
        `1111111`. Use `resolve_bare` when the input is known to be national.

        E.164 is never tried here; use `resolve_e164` for that.
        """

        try:
            return self.resolve_with_country_code(s)
        except InvalidPhoneNumberError:
            return self.resolve_bare(s)

    def parse(self, s: str) -> ParsedNumber:
        """Parse the single-string form produced by `ParsedNumber.display()`."""

        return self.resolve_auto(s)

    def resolve(self, s: str, *, mode: ResolveMode = "auto") -> ParsedNumber:
        if mode == "auto":
            return self.resolve_auto(s)
        if mode == "e164":
            return self.resolve_e164(s)
        if mode == "country_code":
            return self.resolve_with_country_code(s)
        if mode == "bare":
            return self.resolve_bare(s)
        raise ValueError(f"Unknown resolve mode: {mode!r}")

    def format(self, parsed: ParsedNumber, separator: str | None = None) -> str:
        """Group the national number; the country code plays no part."""

        sep = self.separator if separator is None else separator
        return format_national(parsed.national_number, sep)

    def country_info(self, parsed: ParsedNumber) -> CountryEntry | None:
        if parsed.country_code is None:
            return None
        return self.table.lookup(parsed.country_code)

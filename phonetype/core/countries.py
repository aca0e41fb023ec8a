"""
Country calling code table.

The table maps a dial code (digits only, no leading `+`) to the country it
belongs to and keeps every dial code ordered longest first so an E.164
payload can be split with a greedy longest-prefix match.

Records come from a reference dataset: the bundled `country_codes.json`, a
user-supplied JSON file with the same shape, or the metadata shipped with the
`phonenumbers` library. Tables are built once and never mutated.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

import phonenumbers
from phonenumbers import geocoder

logger = logging.getLogger(__name__)

# Shortest remainder that still looks like a national number.
MIN_NATIONAL_DIGITS = 4


@dataclass(frozen=True, slots=True)
class CountryEntry:
    """Country metadata for a single dial code."""

    dial_code: str
    display_name: str
    region_code: str


@dataclass(frozen=True, slots=True)
class CountryRecord:
    """
    One row of a reference dataset, before de-duplication.

    `dial_code` may carry a leading `+`; it is stripped when the table is built.
    """

    display_name: str
    dial_code: str
    region_code: str


def _parse_record(obj: dict[str, object]) -> CountryRecord | None:
    dial_code = str(obj.get("dial_code") or "").strip()
    if not dial_code:
        return None
    return CountryRecord(
        display_name=str(obj.get("name") or ""),
        dial_code=dial_code,
        region_code=str(obj.get("code") or ""),
    )


def load_country_records(path: Path | None = None) -> list[CountryRecord]:
    """Load dataset records, defaulting to the packaged `country_codes.json`."""

    data: str | None = None
    if path is not None:
        try:
            if path.exists():
                raw_text = path.read_text(encoding="utf-8")
                if raw_text.strip():
                    data = raw_text
        except OSError:
            logger.warning("Could not read country code dataset %s; using bundled data", path)
            data = None

    if data is None:
        data = (
            resources.files("phonetype.data")
            .joinpath("country_codes.json")
            .read_text(encoding="utf-8")
        )

    raw = json.loads(data)
    if not isinstance(raw, list):
        raise ValueError("country_codes.json must contain a JSON array")

    records: list[CountryRecord] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        record = _parse_record(item)
        if record is not None:
            records.append(record)
    return records


def records_from_phonenumbers(*, locale: str = "en") -> list[CountryRecord]:
    """
    Build dataset records from the metadata embedded in `phonenumbers`.

    Calling codes are emitted in ascending order; for each code the main region
    comes first, so it is the one kept when the table drops duplicates.
    Non-geographic entities ("001") and regions without an example number
    are skipped.
    """

    records: list[CountryRecord] = []
    for calling_code in sorted(phonenumbers.COUNTRY_CODE_TO_REGION_CODE):
        for region in phonenumbers.COUNTRY_CODE_TO_REGION_CODE[calling_code]:
            if region == phonenumbers.UNKNOWN_REGION or region == "001":
                continue
            example = phonenumbers.example_number(region)
            if example is None:
                continue
            name = geocoder.country_name_for_number(example, locale) or region
            records.append(
                CountryRecord(display_name=name, dial_code=str(calling_code), region_code=region)
            )
    return records


def _order_dial_codes(codes: Iterable[str]) -> tuple[str, ...]:
    # Longest first, then lexicographic; duplicates removed.
    return tuple(sorted(set(codes), key=lambda c: (-len(c), c)))


class CountryCodeTable:
    """
    Immutable dial code lookup with greedy longest-prefix matching.

    Safe to share between threads: nothing is written after construction.
    """

    __slots__ = ("_entries", "_ordered")

    def __init__(self, entries: Mapping[str, CountryEntry]) -> None:
        self._entries: Mapping[str, CountryEntry] = MappingProxyType(dict(entries))
        self._ordered = _order_dial_codes(self._entries)

    @classmethod
    def from_records(
        cls, records: Iterable[CountryRecord | tuple[str, str, str]]
    ) -> CountryCodeTable:
        """
        Build a table from `(display_name, dial_code, region_code)` records.

        Leading `+` is stripped from each dial code. When a dial code repeats,
        the first record wins and later ones are discarded.
        """

        entries: dict[str, CountryEntry] = {}
        discarded = 0
        for record in records:
            if isinstance(record, CountryRecord):
                name, dial_code, region = record.display_name, record.dial_code, record.region_code
            else:
                name, dial_code, region = record
            code = dial_code.strip().lstrip("+")
            if not (code.isascii() and code.isdigit()):
                logger.debug("Skipping %s: dial code %r is not numeric", name, dial_code)
                continue
            if code in entries:
                discarded += 1
                logger.debug(
                    "Discarding duplicate dial code %s for %s (kept %s)",
                    code,
                    name,
                    entries[code].display_name,
                )
                continue
            entries[code] = CountryEntry(dial_code=code, display_name=name, region_code=region)

        table = cls(entries)
        logger.debug(
            "Built country code table", extra={"dial_codes": len(table), "discarded": discarded}
        )
        return table

    @classmethod
    def bundled(cls, path: Path | None = None) -> CountryCodeTable:
        """Table from the packaged dataset, or from `path` when it is readable."""

        return cls.from_records(load_country_records(path))

    @classmethod
    def from_phonenumbers(cls, *, locale: str = "en") -> CountryCodeTable:
        return cls.from_records(records_from_phonenumbers(locale=locale))

    @property
    def dial_codes(self) -> tuple[str, ...]:
        """Every dial code, longest first, ties in lexicographic order."""

        return self._ordered

    def lookup(self, dial_code: str) -> CountryEntry | None:
        if not isinstance(dial_code, str):
            return None
        return self._entries.get(dial_code.lstrip("+"))

    def longest_matching_prefix(self, digits: str) -> str | None:
        """
        Return the longest dial code that prefixes `digits` and still leaves
        at least `MIN_NATIONAL_DIGITS` digits after it.
        """

        for code in self._ordered:
            if digits.startswith(code) and len(digits) - len(code) >= MIN_NATIONAL_DIGITS:
                return code
        return None

    def split(self, digits: str) -> tuple[str, str] | None:
        """Split an E.164 payload (with or without `+`) into `(dial_code, national)`."""

        payload = digits[1:] if digits.startswith("+") else digits
        code = self.longest_matching_prefix(payload)
        if code is None:
            return None
        return code, payload[len(code) :]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, dial_code: object) -> bool:
        return isinstance(dial_code, str) and self.lookup(dial_code) is not None

    def __iter__(self) -> Iterator[CountryEntry]:
        for code in self._ordered:
            yield self._entries[code]

    def __repr__(self) -> str:
        return f"CountryCodeTable({len(self)} dial codes)"

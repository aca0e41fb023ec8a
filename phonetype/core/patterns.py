"""
Structural phone number recognizers.

Three input shapes are recognized, each with its own anchored grammar:

- bare: two or three groups of 2-4 digits, e.g. `(55) 1234-5678`;
- with country code: the bare body preceded by an optional `+` and a 1-3
  digit code that does not start with zero, e.g. `+52 (55) 1234-5678`;
- strict E.164: `+` followed by 1-15 digits and nothing else.

Matching is purely syntactic. No recognizer knows which dial codes exist;
that is decided later against the country code table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ASCII only: `\d` would also accept other Unicode decimal digits.
_SEP = r"[ .-]?"
_GROUP = r"[0-9]{2,4}"

# First group may be wrapped in a balanced pair of parentheses.
_BODY = (
    rf"(?:\((?P<g1p>{_GROUP})\)|(?P<g1>{_GROUP}))"
    rf"{_SEP}(?P<g2>{_GROUP})"
    rf"(?:{_SEP}(?P<g3>{_GROUP}))?"
)

_BARE = re.compile(_BODY)
_WITH_COUNTRY_CODE = re.compile(rf"\+?(?P<cc>[1-9][0-9]{{0,2}}){_SEP}{_BODY}")
_STRICT_E164 = re.compile(r"\+(?P<digits>[0-9]{1,15})")


@dataclass(frozen=True, slots=True)
class BareMatch:
    """Digit groups of a bare national number."""

    groups: tuple[str, ...]

    @property
    def digits(self) -> str:
        return "".join(self.groups)


@dataclass(frozen=True, slots=True)
class CountryCodeMatch:
    """A tentative country code plus the digit groups that follow it."""

    country_code: str
    groups: tuple[str, ...]

    @property
    def digits(self) -> str:
        return "".join(self.groups)


def _body_groups(m: re.Match[str]) -> tuple[str, ...]:
    first = m.group("g1p") or m.group("g1")
    return tuple(g for g in (first, m.group("g2"), m.group("g3")) if g)


def match_bare(s: str) -> BareMatch | None:
    """Recognize a bare national number, or return None."""

    if not isinstance(s, str):
        return None
    m = _BARE.fullmatch(s)
    if m is None:
        return None
    return BareMatch(groups=_body_groups(m))


def match_with_country_code(s: str) -> CountryCodeMatch | None:
    """Recognize a number with an inline country code, or return None."""

    if not isinstance(s, str):
        return None
    m = _WITH_COUNTRY_CODE.fullmatch(s)
    if m is None:
        return None
    return CountryCodeMatch(country_code=m.group("cc"), groups=_body_groups(m))


def match_strict_e164(s: str) -> str | None:
    """Return the digit payload of a strict E.164 string, or None."""

    if not isinstance(s, str):
        return None
    m = _STRICT_E164.fullmatch(s)
    if m is None:
        return None
    return m.group("digits")

"""Dates as stored in PDF strings, such as ``D:199812231952-08'00``."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from .errors import ParseError, PdfError, UnexpectedPrimitive
from .primitive import PdfString, debug_name, resolve


class TimeRel(enum.Enum):
    """How local time relates to universal time."""

    EARLIER = "-"
    LATER = "+"
    UNIVERSAL = "Z"


def _parse_uint(text: str, limit: int) -> int | None:
    """Parse an unsigned decimal integer no larger than ``limit``."""
    digits = text[1:] if text.startswith("+") else text
    if not digits or not all("0" <= ch <= "9" for ch in digits):
        return None
    value = int(digits)
    return value if value <= limit else None


def _parse_or(buffer: str, start: int, end: int, default: int) -> int:
    if end > len(buffer):
        return default
    value = _parse_uint(buffer[start:end], 0xFF)
    return default if value is None else value


@dataclass(frozen=True)
class Date:
    """A calendar date and time with its offset from universal time."""

    year: int
    month: int = 1
    day: int = 1
    hour: int = 0
    minute: int = 0
    second: int = 0
    rel: TimeRel = TimeRel.UNIVERSAL
    tz_hour: int = 0
    tz_minute: int = 0

    def to_primitive(self) -> PdfString:
        """Write the date as a PDF string; raise PdfError if a field is out of range."""
        fields = (self.year, self.month, self.day, self.hour, self.minute,
                  self.second, self.tz_hour, self.tz_minute)
        if (
            any(v < 0 for v in fields)
            or self.year > 9999
            or self.day > 99
            or self.hour > 23
            or self.minute >= 60
            or self.second >= 60
            or self.tz_hour >= 24
            or self.tz_minute >= 60
        ):
            raise PdfError("not a valid date")
        text = (
            f"D:{self.year:04}{self.month:02}{self.day:02}"
            f"{self.hour:02}{self.minute:02}{self.second:02}"
            f"{self.rel.value}{self.tz_hour:02}'{self.tz_minute:02}"
        )
        return PdfString(text.encode("ascii"))


def parse_date(value: Any, resolver: Any) -> Date:
    """Read a Date from a string primitive, resolving a reference first."""
    value = resolve(value, resolver)
    if not isinstance(value, PdfString):
        raise UnexpectedPrimitive("String", debug_name(value))
    try:
        s = value.data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError("date is not valid UTF-8") from exc
    if not s.startswith("D:"):
        raise PdfError("Failed parsing date")
    if len(s) < 6:
        raise PdfError("Missing obligatory year in date")
    year = _parse_uint(s[2:6], 0xFFFF)
    if year is None:
        raise ParseError(f"invalid year {s[2:6]!r} in date")

    positions = [i for i in (s.find(ch) for ch in "+-Z") if i >= 0]
    if positions:
        p = min(positions)
        rel = TimeRel(s[p])
        time, zone = s[:p], s[p + 1:]
    else:
        rel, time, zone = TimeRel.UNIVERSAL, s, ""

    return Date(
        year=year,
        month=_parse_or(time, 6, 8, 1),
        day=_parse_or(time, 8, 10, 1),
        hour=_parse_or(time, 10, 12, 0),
        minute=_parse_or(time, 12, 14, 0),
        second=_parse_or(time, 14, 16, 0),
        rel=rel,
        tz_hour=_parse_or(zone, 0, 2, 0),
        tz_minute=_parse_or(zone, 3, 5, 0),
    )
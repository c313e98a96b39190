"""The primitive values of a PDF file and conversions between them.

Primitives are represented with Python types: ``None`` (null), ``bool``,
``int``, ``float``, ``list`` (array), :class:`Name`, :class:`PdfString`,
:class:`Dictionary`, :class:`PdfStream` and :class:`PlainRef`.
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Iterator

from .errors import KeyValueMismatch, MissingEntry, ParseError, PdfError, UnexpectedPrimitive


@dataclass(frozen=True, order=True)
class PlainRef:
    """A reference to an indirect object: object number and generation."""

    id: int
    gen: int


class Name(str):
    """A PDF name, such as ``/Type``, stored without the leading slash."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Name({str.__repr__(self)})"


@dataclass(frozen=True)
class ParseOptions:
    """Switches that make parsing more tolerant of damaged files."""

    allow_xref_error: bool = False
    allow_missing_endobj: bool = False

    @classmethod
    def tolerant(cls) -> "ParseOptions":
        return cls(allow_xref_error=True, allow_missing_endobj=True)


class NoResolve:
    """A resolver for data that must not contain indirect references."""

    def resolve(self, ref: PlainRef) -> Any:
        raise PdfError(f"cannot resolve {ref.id} {ref.gen} R without a file")

    def resolve_flags(self, ref: PlainRef, flags: Any, depth: int) -> Any:
        raise PdfError(f"cannot resolve {ref.id} {ref.gen} R without a file")

    def stream_data(self, ref: PlainRef, start: int, end: int) -> bytes:
        raise PdfError(f"cannot read stream data of {ref.id} {ref.gen} R without a file")

    def options(self) -> ParseOptions:
        return ParseOptions()


# --- UTF-16BE -------------------------------------------------------------

def _utf16_units(data: bytes) -> Iterator[int]:
    usable = len(data) - len(data) % 2
    return (unit for (unit,) in struct.iter_unpack(">H", data[:usable]))


def _decode_utf16(units: Iterable[int]) -> Iterator[str | None]:
    """Yield decoded characters, or None for each invalid code unit."""
    pending: int | None = None
    for unit in units:
        if pending is not None:
            if 0xDC00 <= unit <= 0xDFFF:
                yield chr(0x10000 + ((pending - 0xD800) << 10) + (unit - 0xDC00))
                pending = None
                continue
            yield None
            pending = None
        if 0xD800 <= unit <= 0xDBFF:
            pending = unit
        elif 0xDC00 <= unit <= 0xDFFF:
            yield None
        else:
            yield chr(unit)
    if pending is not None:
        yield None


def utf16be_to_string_lossy(data: bytes) -> str:
    """Decode UTF-16BE, replacing invalid units and ignoring a trailing odd byte."""
    return "".join("\ufffd" if c is None else c for c in _decode_utf16(_utf16_units(data)))


def utf16be_to_string(data: bytes) -> str:
    """Decode UTF-16BE strictly, raising ParseError on any invalid data."""
    if len(data) % 2:
        raise ParseError("UTF-16BE data has an odd number of bytes")
    chars = list(_decode_utf16(_utf16_units(data)))
    if None in chars:
        raise ParseError("invalid UTF-16BE data")
    return "".join(chars)


# --- strings --------------------------------------------------------------

_STRING_SPECIAL = re.compile(rb"([\\()])")


@dataclass(frozen=True, repr=False)
class PdfString:
    """A PDF string: raw bytes whose encoding is not known."""

    data: bytes = b""

    def __post_init__(self) -> None:
        if isinstance(self.data, str):
            object.__setattr__(self, "data", self.data.encode("utf-8"))
        elif not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        parts = ['"']
        for b in self.data:
            if b == ord('"'):
                parts.append('\\"')
            elif 0x20 <= b <= 0x7E:
                parts.append(chr(b))
            elif b <= 7:
                parts.append(f"\\{b}")
            else:
                parts.append(f"\\x{b:02x}")
        parts.append('"')
        return "".join(parts)

    def serialize(self) -> bytes:
        """Literal string syntax for ASCII data, hexadecimal otherwise."""
        if any(b >= 0x80 for b in self.data):
            return b"<" + self.data.hex().encode("ascii") + b">"
        return b"(" + _STRING_SPECIAL.sub(rb"\\\1", self.data) + b")"

    def to_string_lossy(self) -> str:
        """Decode as UTF-16BE (with BOM) or UTF-8, replacing invalid data."""
        if self.data.startswith(b"\xfe\xff"):
            return utf16be_to_string_lossy(self.data[2:])
        return self.data.decode("utf-8", errors="replace")

    def to_string(self) -> str:
        """Decode as UTF-16BE (with BOM) or UTF-8; raise ParseError if invalid."""
        if self.data.startswith(b"\xfe\xff"):
            return utf16be_to_string(self.data[2:])
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError("string is not valid UTF-8") from exc


# --- dictionaries and streams ---------------------------------------------

class Dictionary(dict):
    """An insertion-ordered PDF dictionary mapping names to primitives."""

    def require(self, typ: str, key: str) -> Any:
        """Remove and return ``key``; raise MissingEntry if it is absent."""
        try:
            return self.pop(key)
        except KeyError:
            raise MissingEntry(typ, key) from None

    def expect(self, typ: str, key: str, value: str, required: bool) -> None:
        """Check that ``key`` names ``value``, or is absent when not required."""
        if key in self:
            found = as_name(self[key])
            if found != value:
                raise KeyValueMismatch(key, value, found)
        elif required:
            raise MissingEntry(typ, key)

    def append(self, other: dict) -> None:
        self.update(other)

    def serialize(self) -> bytes:
        parts = [b"<<\n"]
        for key, val in self.items():
            parts.append(f"/{key} ".encode("utf-8"))
            parts.append(serialize(val))
            parts.append(b"\n")
        parts.append(b">>\n")
        return b"".join(parts)

    def __str__(self) -> str:
        return "<" + ", ".join(f"/{k}={_display(v)}" for k, v in self.items()) + ">"

    def __repr__(self) -> str:
        return f"Dictionary({dict.__repr__(self)})"


@dataclass
class PdfStream:
    """A stream dictionary with either its data or its location in a file."""

    info: Dictionary = field(default_factory=Dictionary)
    data: bytes | None = None
    source: PlainRef | None = None
    file_range: tuple[int, int] | None = None

    def __post_init__(self) -> None:
        if self.data is None and (self.source is None or self.file_range is None):
            raise ValueError("a stream needs either data or a file location")
        if self.data is not None and not isinstance(self.data, bytes):
            self.data = bytes(self.data)

    def raw_data(self, resolver: Any) -> bytes:
        """The undecoded stream bytes, read through ``resolver`` if still in the file."""
        if self.data is not None:
            return self.data
        start, end = self.file_range
        return resolver.stream_data(self.source, start, end)

    def serialize(self) -> bytes:
        if self.data is None:
            raise PdfError("cannot serialize a stream whose data is still in the file")
        return self.info.serialize() + b"stream\n" + self.data + b"\nendstream\n"


# --- generic helpers ------------------------------------------------------

def _format_number(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    if x == 0:
        return "-0" if math.copysign(1.0, x) < 0 else "0"
    if x.is_integer():
        return str(int(x))
    return format(Decimal(repr(x)), "f")


def _display(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, PdfString):
        return repr(value)
    if isinstance(value, PdfStream):
        return "stream"
    if isinstance(value, Dictionary):
        return str(value)
    if isinstance(value, dict):
        return str(Dictionary(value))
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_display(v) for v in value) + "]"
    if isinstance(value, PlainRef):
        return f"@{value.id}"
    if isinstance(value, str):
        return f"/{value}"
    raise TypeError(f"not a PDF primitive: {value!r}")


def serialize_name(name: str) -> bytes:
    """Write ``name`` in name syntax, escaping backslash and parentheses."""
    out = ["/"]
    for ch in name:
        if ch > "~":
            raise PdfError(f"name {name!r} contains non-ASCII characters")
        if ch in "\\()":
            out.append("\\")
        out.append(ch)
    return "".join(out).encode("ascii")


def serialize(value: Any) -> bytes:
    """Write a primitive in PDF syntax."""
    if value is None:
        return b"null"
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return str(value).encode("ascii")
    if isinstance(value, float):
        return _format_number(value).encode("ascii")
    if isinstance(value, (PdfString, PdfStream, Dictionary)):
        return value.serialize()
    if isinstance(value, dict):
        return Dictionary(value).serialize()
    if isinstance(value, (list, tuple)):
        return b"[" + b" ".join(serialize(v) for v in value) + b"]"
    if isinstance(value, PlainRef):
        return f"{value.id} {value.gen} R".encode("ascii")
    if isinstance(value, str):
        return serialize_name(value)
    raise TypeError(f"not a PDF primitive: {value!r}")


def debug_name(value: Any) -> str:
    """The name of the primitive kind of ``value``, for error messages."""
    if value is None:
        return "Null"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, int):
        return "Integer"
    if isinstance(value, float):
        return "Number"
    if isinstance(value, PdfString):
        return "String"
    if isinstance(value, PdfStream):
        return "Stream"
    if isinstance(value, dict):
        return "Dictionary"
    if isinstance(value, (list, tuple)):
        return "Array"
    if isinstance(value, PlainRef):
        return "Reference"
    if isinstance(value, str):
        return "Name"
    raise TypeError(f"not a PDF primitive: {value!r}")


def resolve(value: Any, resolver: Any) -> Any:
    """Resolve ``value`` if it is a reference, otherwise return it unchanged."""
    if isinstance(value, PlainRef):
        return resolver.resolve(value)
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def as_integer(value: Any) -> int:
    if _is_int(value):
        return value
    raise UnexpectedPrimitive("Integer", debug_name(value))


def as_u8(value: Any) -> int:
    n = as_integer(value)
    if not 0 <= n < 256:
        raise PdfError("invalid integer")
    return n


def as_u32(value: Any) -> int:
    n = as_integer(value)
    if n < 0:
        raise PdfError("negative integer")
    return n


def as_number(value: Any) -> float:
    if _is_int(value) or isinstance(value, float):
        return float(value)
    raise UnexpectedPrimitive("Number", debug_name(value))


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise UnexpectedPrimitive("Boolean", debug_name(value))


def as_name(value: Any) -> Name:
    if isinstance(value, str):
        return value if isinstance(value, Name) else Name(value)
    raise UnexpectedPrimitive("Name", debug_name(value))


def as_string(value: Any) -> PdfString:
    if isinstance(value, PdfString):
        return value
    raise UnexpectedPrimitive("String", debug_name(value))


def as_array(value: Any) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    raise UnexpectedPrimitive("Array", debug_name(value))


def as_dictionary(value: Any) -> Dictionary:
    if isinstance(value, Dictionary):
        return value
    if isinstance(value, dict):
        return Dictionary(value)
    raise UnexpectedPrimitive("Dictionary", debug_name(value))


def as_reference(value: Any) -> PlainRef:
    if isinstance(value, PlainRef):
        return value
    raise UnexpectedPrimitive("Reference", debug_name(value))


def as_stream(value: Any) -> PdfStream:
    if isinstance(value, PdfStream):
        return value
    raise UnexpectedPrimitive("Stream", debug_name(value))
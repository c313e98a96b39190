"""The cross-reference table that maps object numbers to their locations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from .errors import MissingEntry, PdfError, UnspecifiedXRefEntry
from .primitive import (
    Dictionary,
    Name,
    NoResolve,
    PdfStream,
    as_array,
    as_dictionary,
    as_integer,
    as_u32,
    resolve,
)


@dataclass(frozen=True)
class XRefFree:
    """An object number that is not in use."""

    next_obj_nr: int
    gen_nr: int


@dataclass(frozen=True)
class XRefRaw:
    """An object stored at byte offset ``pos`` of the file."""

    pos: int
    gen_nr: int


@dataclass(frozen=True)
class XRefStream:
    """An object compressed inside an object stream."""

    stream_id: int
    index: int


@dataclass(frozen=True)
class XRefPromised:
    """An object number reserved for an object that is still to be written."""


@dataclass(frozen=True)
class XRefInvalid:
    """An object number with no usable entry."""


XRef = Union[XRefFree, XRefRaw, XRefStream, XRefPromised, XRefInvalid]


def gen_nr(entry: XRef) -> int:
    """The generation number of an entry; objects in streams have generation 0."""
    if isinstance(entry, (XRefFree, XRefRaw)):
        return entry.gen_nr
    if isinstance(entry, XRefStream):
        return 0
    raise PdfError(f"{entry!r} has no generation number")


def byte_len(n: int) -> int:
    """The number of bytes needed to store ``n``; at least one."""
    return max(1, (n.bit_length() + 7) // 8)


def _entry_fields(entry: XRef) -> tuple[int, int, int] | None:
    """Type code and the two fields an entry has in an xref stream."""
    if isinstance(entry, XRefFree):
        return 0, entry.next_obj_nr, entry.gen_nr
    if isinstance(entry, XRefRaw):
        return 1, entry.pos, entry.gen_nr
    if isinstance(entry, XRefStream):
        return 2, entry.stream_id, entry.index
    return None


class XRefTable:
    """Runtime lookup table of all objects of a file."""

    def __init__(self, num_objects: int = 0) -> None:
        self.entries: list[XRef] = [XRefInvalid()] * num_objects
        self.entries.append(XRefFree(0, 0xFFFF))

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, id: int) -> XRef:
        """The entry of object ``id``; raise UnspecifiedXRefEntry if there is none."""
        if 0 <= id < len(self.entries):
            return self.entries[id]
        raise UnspecifiedXRefEntry(id)

    __getitem__ = get

    def __setitem__(self, id: int, entry: XRef) -> None:
        self.entries[id] = entry

    def ids(self) -> Iterator[int]:
        """Numbers of the objects that are in use."""
        for i, entry in enumerate(self.entries):
            if isinstance(entry, (XRefRaw, XRefStream)):
                yield i

    def push(self, entry: XRef) -> None:
        self.entries.append(entry)

    def max_field_widths(self) -> tuple[int, int]:
        """The largest values of the first and second stream field over all entries."""
        max_a = max_b = 0
        for entry in self.entries:
            fields = _entry_fields(entry)
            if fields is None:
                continue
            _, a, b = fields
            max_a = max(max_a, a)
            max_b = max(max_b, b)
        return max_a, max_b

    def add_entries_from(self, section: "XRefSection") -> None:
        """Merge a section, keeping entries that have a higher generation."""
        for i, entry in section.numbered():
            if not 0 <= i < len(self.entries):
                continue
            current = self.entries[i]
            if isinstance(current, (XRefRaw, XRefFree)):
                update = gen_nr(entry) > current.gen_nr
            elif isinstance(current, (XRefStream, XRefInvalid)):
                update = True
            else:
                raise PdfError(f"found {current!r}")
            if update:
                self.entries[i] = entry

    def write_stream(self, size: int) -> PdfStream:
        """Encode the first ``size`` entries as the data of an xref stream."""
        max_a, max_b = self.max_field_widths()
        a_w, b_w = byte_len(max_a), byte_len(max_b)
        data = bytearray()
        for entry in self.entries[:size]:
            fields = _entry_fields(entry)
            if fields is None:
                raise PdfError(f"invalid xref entry: {entry!r}")
            kind, a, b = fields
            data.append(kind)
            data += a.to_bytes(a_w, "big")
            data += b.to_bytes(b_w, "big")
        info = XRefInfo(size=size, index=[0, size], prev=None, w=[1, a_w, b_w])
        return PdfStream(info=info.to_dict(), data=bytes(data))

    def __str__(self) -> str:
        lines = []
        for i, entry in enumerate(self.entries):
            if isinstance(entry, XRefFree):
                lines.append(f"{i:4}: {entry.next_obj_nr:010} {entry.gen_nr:05} f")
            elif isinstance(entry, XRefRaw):
                lines.append(f"{i:4}: {entry.pos:010} {entry.gen_nr:05} n")
            elif isinstance(entry, XRefStream):
                lines.append(f"{i:4}: in stream {entry.stream_id}, index {entry.index}")
            elif isinstance(entry, XRefPromised):
                lines.append(f"{i:4}: Promised?")
            else:
                lines.append(f"{i:4}: Invalid!")
        return "".join(line + "\n" for line in lines)


@dataclass
class XRefSection:
    """A run of consecutive entries as found in a file."""

    first_id: int
    entries: list[XRef] = field(default_factory=list)

    def add_free_entry(self, next_obj_nr: int, gen_nr: int) -> None:
        self.entries.append(XRefFree(next_obj_nr, gen_nr))

    def add_inuse_entry(self, pos: int, gen_nr: int) -> None:
        self.entries.append(XRefRaw(pos, gen_nr))

    def numbered(self) -> Iterator[tuple[int, XRef]]:
        """Pairs of object number and entry."""
        yield from enumerate(self.entries, self.first_id)


def _uint_list(value: Any, resolver: Any) -> list[int]:
    value = resolve(value, resolver)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [as_u32(resolve(v, resolver)) for v in as_array(value)]
    return [as_u32(value)]


@dataclass
class XRefInfo:
    """The dictionary of an xref stream."""

    size: int
    index: list[int] | None = None
    prev: int | None = None
    w: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.index is None:
            self.index = [0, self.size]

    @classmethod
    def from_dict(cls, dictionary: dict, resolver: Any = None) -> "XRefInfo":
        """Read the fields from a stream dictionary whose /Type is /XRef."""
        if resolver is None:
            resolver = NoResolve()
        d = as_dictionary(dictionary)
        d.expect("XRefInfo", "Type", "XRef", True)
        if "Size" not in d or d["Size"] is None:
            raise MissingEntry("XRefInfo", "size")
        size = as_u32(resolve(d["Size"], resolver))
        index = _uint_list(d["Index"], resolver) if "Index" in d else [0, size]
        prev_value = resolve(d.get("Prev"), resolver)
        prev = None if prev_value is None else as_integer(prev_value)
        w = _uint_list(d.get("W"), resolver)
        return cls(size=size, index=index, prev=prev, w=w)

    def to_dict(self) -> Dictionary:
        d = Dictionary()
        d[Name("Type")] = Name("XRef")
        d[Name("Size")] = self.size
        d[Name("Index")] = list(self.index)
        if self.prev is not None:
            d[Name("Prev")] = self.prev
        d[Name("W")] = list(self.w)
        return d
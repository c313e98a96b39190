"""Reading cross-reference sections and trailers from tables and streams."""

from __future__ import annotations

import io
import logging
import zlib
from typing import Any, BinaryIO

from .errors import ParseError, PdfError, UnexpectedLexeme, XRefStreamTypeError
from .lexer import Lexer, Substr
from .parser import ParseFlags, parse_indirect_stream, parse_with_lexer
from .primitive import (
    Dictionary,
    NoResolve,
    PdfStream,
    as_dictionary,
    as_integer,
    as_name,
    resolve,
)
from .xref import XRef, XRefFree, XRefInfo, XRefRaw, XRefSection, XRefStream

log = logging.getLogger(__name__)


def _remaining(stream: BinaryIO) -> int:
    pos = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(pos)
    return end - pos


def _read_uint(width: int, stream: BinaryIO) -> int:
    if width > 8:
        raise PdfError(f"xref stream entry has invalid width {width}")
    chunk = stream.read(width)
    if len(chunk) < width:
        raise PdfError(
            f"xref stream entry has width {width} but only {len(chunk)} bytes left to read"
        )
    return int.from_bytes(chunk, "big")


def parse_xref_section_from_stream(
    first_id: int,
    num_entries: int,
    width: list[int],
    data: BinaryIO | bytes,
    resolver: Any = None,
) -> XRefSection:
    """Read ``num_entries`` entries of field widths ``width`` from ``data``.

    ``data`` may be bytes or a binary stream; a stream is left positioned
    after the entries that were read.
    """
    if resolver is None:
        resolver = NoResolve()
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = io.BytesIO(bytes(data))
    if len(width) != 3:
        raise PdfError("invalid xref length array")
    w0, w1, w2 = width
    row = w0 + w1 + w2
    left = _remaining(data)
    if num_entries * row > left:
        if resolver.options().allow_xref_error:
            log.warning("not enough xref data. truncating.")
            num_entries = left // row
        else:
            raise PdfError("not enough xref data")

    section = XRefSection(first_id)
    for _ in range(num_entries):
        kind = 1 if w0 == 0 else _read_uint(w0, data)
        field1 = _read_uint(w1, data)
        field2 = _read_uint(w2, data)
        entry: XRef
        if kind == 0:
            entry = XRefFree(field1, field2)
        elif kind == 1:
            entry = XRefRaw(field1, field2)
        elif kind == 2:
            entry = XRefStream(field1, field2)
        else:
            raise XRefStreamTypeError(kind)
        section.entries.append(entry)
    return section


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _paeth(left: int, up: int, upleft: int) -> int:
    p = left + up - upleft
    pa, pb, pc = abs(p - left), abs(p - up), abs(p - upleft)
    if pa <= pb and pa <= pc:
        return left
    if pb <= pc:
        return up
    return upleft


def _png_unpredict(data: bytes, columns: int, colors: int, bpc: int) -> bytes:
    bpp = max(1, colors * bpc // 8)
    row_len = (colors * bpc * columns + 7) // 8
    out = bytearray()
    prev = bytearray(row_len)
    for start in range(0, len(data), row_len + 1):
        chunk = data[start:start + row_len + 1]
        if len(chunk) < row_len + 1:
            break
        kind, row = chunk[0], bytearray(chunk[1:])
        if kind > 4:
            raise PdfError(f"invalid PNG predictor filter type {kind}")
        for i in range(row_len):
            left = row[i - bpp] if i >= bpp else 0
            up = prev[i]
            upleft = prev[i - bpp] if i >= bpp else 0
            if kind == 1:
                row[i] = (row[i] + left) & 0xFF
            elif kind == 2:
                row[i] = (row[i] + up) & 0xFF
            elif kind == 3:
                row[i] = (row[i] + (left + up) // 2) & 0xFF
            elif kind == 4:
                row[i] = (row[i] + _paeth(left, up, upleft)) & 0xFF
        out += row
        prev = row
    return bytes(out)


def _apply_predictor(data: bytes, params: Any, resolver: Any) -> bytes:
    params = resolve(params, resolver)
    if params is None:
        return data
    params = as_dictionary(params)

    def param(key: str, default: int) -> int:
        return as_integer(resolve(params.get(key, default), resolver))

    predictor = param("Predictor", 1)
    if predictor == 1:
        return data
    if predictor >= 10:
        return _png_unpredict(
            data, param("Columns", 1), param("Colors", 1), param("BitsPerComponent", 8)
        )
    raise PdfError(f"unsupported predictor {predictor}")


def _stream_data(stream: PdfStream, resolver: Any) -> bytes:
    data = stream.raw_data(resolver)
    filters = _as_list(resolve(stream.info.get("Filter"), resolver))
    params = _as_list(resolve(stream.info.get("DecodeParms"), resolver))
    params += [None] * (len(filters) - len(params))
    for filter_value, filter_params in zip(filters, params):
        name = as_name(resolve(filter_value, resolver))
        if name not in ("FlateDecode", "Fl"):
            raise PdfError(f"unsupported stream filter /{name}")
        try:
            data = zlib.decompress(data)
        except zlib.error as exc:
            raise PdfError(f"invalid deflate data: {exc}") from exc
        data = _apply_predictor(data, filter_params, resolver)
    return data


def parse_xref_stream_and_trailer(
    lexer: Lexer, resolver: Any = None
) -> tuple[list[XRefSection], Dictionary]:
    """Read an xref stream object and its trailer at the lexer's position."""
    if resolver is None:
        resolver = NoResolve()
    _, stream = parse_indirect_stream(lexer, resolver, None)
    if lexer.next().equals("trailer"):
        trailer = as_dictionary(parse_with_lexer(lexer, resolver, ParseFlags.DICT))
    else:
        trailer = Dictionary(stream.info)

    info = XRefInfo.from_dict(stream.info, resolver)
    reader = io.BytesIO(_stream_data(stream, resolver))

    if len(info.index) % 2 != 0:
        raise PdfError(
            f"xref stream has {len(info.index)} elements which is not an even number"
        )
    sections = [
        parse_xref_section_from_stream(first_id, count, info.w, reader, resolver)
        for first_id, count in zip(info.index[::2], info.index[1::2])
    ]
    return sections, trailer


def _uint(lexeme: Substr) -> int:
    value = lexeme.to_int()
    if value < 0:
        raise ParseError(f"expected an unsigned integer, found {value}")
    return value


def parse_xref_table_and_trailer(
    lexer: Lexer, resolver: Any = None
) -> tuple[list[XRefSection], Dictionary]:
    """Read a classic xref table (after ``xref``) and its trailer."""
    if resolver is None:
        resolver = NoResolve()
    sections = []
    while not lexer.peek().equals("trailer"):
        start_id = _uint(lexer.next())
        num_ids = _uint(lexer.next())
        section = XRefSection(start_id)
        for i in range(num_ids):
            w1 = lexer.next()
            if w1.equals("trailer"):
                raise PdfError(
                    f"xref table declares {num_ids} entries, but only {i} follow."
                )
            w2 = lexer.next()
            w3 = lexer.next()
            if w3.equals("f"):
                section.add_free_entry(_uint(w1), _uint(w2))
            elif w3.equals("n"):
                section.add_inuse_entry(_uint(w1), _uint(w2))
            else:
                raise UnexpectedLexeme(lexer.pos, w3.to_string(), "f or n")
        sections.append(section)

    lexer.next_expect("trailer")
    trailer = as_dictionary(parse_with_lexer(lexer, resolver, ParseFlags.DICT))
    return sections, trailer


def read_xref_and_trailer_at(
    lexer: Lexer, resolver: Any = None
) -> tuple[list[XRefSection], Dictionary]:
    """Read an xref table or xref stream, whichever starts at the lexer's position."""
    if lexer.next().equals("xref"):
        return parse_xref_table_and_trailer(lexer, resolver)
    lexer.back()
    return parse_xref_stream_and_trailer(lexer, resolver)
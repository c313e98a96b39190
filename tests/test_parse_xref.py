import io
import zlib

import pytest

from pdfcore.errors import PdfError, UnexpectedEof, UnexpectedLexeme, XRefStreamTypeError
from pdfcore.lexer import Lexer
from pdfcore.parse_xref import (
    parse_xref_section_from_stream,
    parse_xref_stream_and_trailer,
    parse_xref_table_and_trailer,
    read_xref_and_trailer_at,
)
from pdfcore.primitive import ParseOptions, PdfError as _unused  # noqa: F401
from pdfcore.primitive import PlainRef
from pdfcore.xref import XRefFree, XRefRaw, XRefStream, XRefTable


class _BufferResolver:
    def __init__(self, buf, options=None):
        self.buf = buf
        self._options = options or ParseOptions()

    def resolve(self, ref):
        raise PdfError("no objects")

    def resolve_flags(self, ref, flags, depth):
        raise PdfError("no objects")

    def stream_data(self, ref, start, end):
        return self.buf[start:end]

    def options(self):
        return self._options


PAYLOAD = bytes([0, 0, 255, 1, 17, 0, 2, 5, 3])
EXPECTED = [XRefFree(0, 255), XRefRaw(17, 0), XRefStream(5, 3)]


def _xref_stream_file(payload, extra=b"", after=b"startxref\n0\n%%EOF\n"):
    return (
        b"5 0 obj\n<< /Type /XRef /Size 3 /W [1 1 1] " + extra
        + b" /Length " + str(len(payload)).encode("ascii") + b" >>\nstream\n"
        + payload + b"\nendstream\nendobj\n" + after
    )


TABLE = (
    b"xref\n0 3\n0000000000 65535 f \n0000000017 00000 n \n0000000081 00000 n \n"
    b"trailer\n<< /Size 3 /Root 1 0 R >>\nstartxref\n"
)


def test_read_table():
    sections, trailer = read_xref_and_trailer_at(Lexer(TABLE), None)
    assert len(sections) == 1
    assert sections[0].first_id == 0
    assert sections[0].entries == [XRefFree(0, 65535), XRefRaw(17, 0), XRefRaw(81, 0)]
    assert trailer["Size"] == 3
    assert trailer["Root"] == PlainRef(1, 0)


def test_table_with_two_sections():
    data = (
        b"0 1\n0000000000 65535 f \n5 1\n0000000100 00000 n \n"
        b"trailer\n<< /Size 6 >>"
    )
    sections, trailer = parse_xref_table_and_trailer(Lexer(data), None)
    assert [s.first_id for s in sections] == [0, 5]
    assert list(sections[1].numbered()) == [(5, XRefRaw(100, 0))]
    assert trailer["Size"] == 6


def test_table_sections_fill_xref_table():
    sections, _ = read_xref_and_trailer_at(Lexer(TABLE), None)
    table = XRefTable(3)
    for section in sections:
        table.add_entries_from(section)
    assert list(table.ids()) == [1, 2]


def test_table_too_few_entries():
    data = b"0 3\n0000000000 65535 f \ntrailer\n<< >>"
    with pytest.raises(PdfError):
        parse_xref_table_and_trailer(Lexer(data), None)


def test_table_bad_marker():
    data = b"0 1\n0000000000 65535 x \ntrailer\n<< >>"
    with pytest.raises(UnexpectedLexeme):
        parse_xref_table_and_trailer(Lexer(data), None)


def test_table_without_trailer():
    data = b"0 1\n0000000000 65535 f \n"
    with pytest.raises(UnexpectedEof):
        parse_xref_table_and_trailer(Lexer(data), None)


def test_section_from_bytes():
    data = bytes([1, 0, 17, 0, 0, 0, 0, 255, 2, 0, 5, 3])
    section = parse_xref_section_from_stream(4, 3, [1, 2, 1], data, None)
    assert section.first_id == 4
    assert section.entries == [XRefRaw(17, 0), XRefFree(0, 255), XRefStream(5, 3)]


def test_section_consumes_stream():
    reader = io.BytesIO(PAYLOAD + b"\x09")
    section = parse_xref_section_from_stream(0, 3, [1, 1, 1], reader, None)
    assert section.entries == EXPECTED
    assert reader.read() == b"\x09"


def test_section_default_type_is_raw():
    section = parse_xref_section_from_stream(0, 2, [0, 1, 1], bytes([17, 0, 81, 0]), None)
    assert section.entries == [XRefRaw(17, 0), XRefRaw(81, 0)]


def test_section_not_enough_data():
    with pytest.raises(PdfError):
        parse_xref_section_from_stream(0, 4, [1, 1, 1], PAYLOAD, None)


def test_section_not_enough_data_tolerated():
    resolver = _BufferResolver(b"", ParseOptions(allow_xref_error=True))
    section = parse_xref_section_from_stream(0, 4, [1, 1, 1], PAYLOAD + b"\x01", resolver)
    assert section.entries == EXPECTED


def test_section_bad_type():
    with pytest.raises(XRefStreamTypeError) as info:
        parse_xref_section_from_stream(0, 1, [1, 1, 1], bytes([3, 0, 0]), None)
    assert info.value.found == 3


def test_section_bad_width_array():
    with pytest.raises(PdfError):
        parse_xref_section_from_stream(0, 1, [1, 1], bytes([1, 0]), None)


def test_section_width_too_large():
    with pytest.raises(PdfError):
        parse_xref_section_from_stream(0, 1, [1, 9, 1], bytes(11), None)


def test_section_round_trip_with_write_stream():
    table = XRefTable(0)
    table.push(XRefRaw(70000, 0))
    table.push(XRefStream(3, 12))
    stream = table.write_stream(len(table))
    w = list(stream.info["W"])
    section = parse_xref_section_from_stream(0, len(table), w, stream.data, None)
    assert section.entries == table.entries


def test_xref_stream_without_trailer():
    buf = _xref_stream_file(PAYLOAD)
    sections, trailer = read_xref_and_trailer_at(Lexer(buf), _BufferResolver(buf))
    assert len(sections) == 1
    assert sections[0].first_id == 0
    assert sections[0].entries == EXPECTED
    assert trailer["Type"] == "XRef"
    assert trailer["Size"] == 3


def test_xref_stream_with_trailer():
    buf = _xref_stream_file(PAYLOAD, after=b"trailer\n<< /Size 3 /Root 1 0 R >>\n")
    sections, trailer = parse_xref_stream_and_trailer(Lexer(buf), _BufferResolver(buf))
    assert sections[0].entries == EXPECTED
    assert trailer["Root"] == PlainRef(1, 0)
    assert "Type" not in trailer


def test_xref_stream_with_index():
    buf = _xref_stream_file(PAYLOAD, extra=b"/Index [7 1 20 2]")
    sections, _ = parse_xref_stream_and_trailer(Lexer(buf), _BufferResolver(buf))
    assert [s.first_id for s in sections] == [7, 20]
    assert sections[0].entries + sections[1].entries == EXPECTED


def test_xref_stream_odd_index():
    buf = _xref_stream_file(PAYLOAD, extra=b"/Index [0]")
    with pytest.raises(PdfError):
        parse_xref_stream_and_trailer(Lexer(buf), _BufferResolver(buf))


def test_xref_stream_flate():
    buf = _xref_stream_file(zlib.compress(PAYLOAD), extra=b"/Filter /FlateDecode")
    sections, _ = parse_xref_stream_and_trailer(Lexer(buf), _BufferResolver(buf))
    assert sections[0].entries == EXPECTED


def test_xref_stream_png_predictor():
    rows = PAYLOAD[:3], PAYLOAD[3:6]
    encoded = b"\x00" + rows[0] + b"\x00" + rows[1] + b"\x02\x00\x00\x00"
    buf = _xref_stream_file(
        zlib.compress(encoded),
        extra=b"/Filter /FlateDecode /DecodeParms << /Predictor 12 /Columns 3 >>",
    )
    sections, _ = parse_xref_stream_and_trailer(Lexer(buf), _BufferResolver(buf))
    entries = sections[0].entries
    assert entries[:2] == EXPECTED[:2]
    assert entries[2] == entries[1]


def test_xref_stream_at_end_of_data():
    buf = _xref_stream_file(PAYLOAD, after=b"")
    with pytest.raises(UnexpectedEof):
        parse_xref_stream_and_trailer(Lexer(buf), _BufferResolver(buf))


def test_xref_stream_needs_resolver_for_data():
    buf = _xref_stream_file(PAYLOAD)
    with pytest.raises(PdfError):
        parse_xref_stream_and_trailer(Lexer(buf), None)
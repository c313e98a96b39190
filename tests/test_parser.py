import pytest

from pdfcore.errors import (
    HexDecodeError,
    MaxDepthExceeded,
    MissingEntry,
    PrimitiveNotAllowed,
    UnexpectedEof,
    UnexpectedLexeme,
    UnexpectedPrimitive,
    UnknownType,
)
from pdfcore.lexer import Lexer
from pdfcore.parser import (
    Context,
    ParseFlags,
    parse,
    parse_indirect_object,
    parse_indirect_stream,
    parse_stream,
    parse_stream_with_lexer,
    parse_with_lexer,
    parse_with_lexer_ctx,
)
from pdfcore.primitive import NoResolve, ParseOptions, PdfString, PlainRef


class LengthResolver(NoResolve):
    def __init__(self, value):
        self.value = value
        self.calls = []

    def resolve_flags(self, ref, flags, depth):
        self.calls.append((ref, flags, depth))
        return self.value


class TolerantResolver(NoResolve):
    def options(self):
        return ParseOptions.tolerant()


class ReversingDecoder:
    def decrypt(self, ref, data):
        return data[::-1]


def test_dict_with_empty_name_as_value():
    d = parse(b"<</App<</Name/>>>>", NoResolve(), ParseFlags.DICT)
    assert len(d) == 1
    assert len(d["App"]) == 1
    assert d["App"]["Name"] == ""

    stream = parse_stream(b"<</Length 0/App<</Name/>>>>stream\nendstream\n", NoResolve(), Context())
    assert len(stream.info) == 2
    assert stream.info["App"]["Name"] == ""


def test_dict_with_empty_name_as_key():
    d = parse(b"<</ true>>", NoResolve(), ParseFlags.DICT)
    assert len(d) == 1
    assert d[""] is True

    stream = parse_stream(b"<</Length 0/ true>>stream\nendstream\n", NoResolve(), Context())
    assert len(stream.info) == 2
    assert stream.info[""] is True


def test_empty_array():
    assert parse(b"[]", NoResolve(), ParseFlags.ARRAY) == []


def test_compact_array():
    lx = Lexer(b"[(Complete L)20(egend for Physical and P)20(olitical Maps)]TJ")
    assert parse_with_lexer(lx, NoResolve(), ParseFlags.ANY) == [
        PdfString(b"Complete L"),
        20,
        PdfString(b"egend for Physical and P"),
        20,
        PdfString(b"olitical Maps"),
    ]
    assert lx.next().as_str() == "TJ"
    with pytest.raises(UnexpectedEof):
        lx.next()


def test_references_and_integers():
    assert parse(b"[1 2 R 3 4 5]") == [PlainRef(1, 2), 3, 4, 5]


def test_real_numbers():
    assert parse(b"[-.5 3.25]") == [-0.5, 3.25]


def test_booleans_and_null():
    assert parse(b"[true false null]") == [True, False, None]


def test_name_hex_escape():
    assert parse(b"/A#20B ") == "A B"


def test_name_truncated_escape():
    with pytest.raises(UnexpectedEof):
        parse(b"/A#2 ")


def test_name_invalid_escape():
    with pytest.raises(HexDecodeError):
        parse(b"/A#zz ")


def test_strings():
    assert parse(b"<48656c6c6f>") == PdfString(b"Hello")
    assert parse(b"(a\\(b\\))") == PdfString(b"a(b)")


def test_flags_not_allowed_resets_position():
    lexer = Lexer(b"  /Foo")
    with pytest.raises(PrimitiveNotAllowed):
        parse_with_lexer(lexer, NoResolve(), ParseFlags.INTEGER)
    assert lexer.pos == 0


def test_reference_not_allowed_with_integer_flag():
    with pytest.raises(PrimitiveNotAllowed):
        parse(b"1 0 R", NoResolve(), ParseFlags.INTEGER)


def test_max_depth():
    with pytest.raises(MaxDepthExceeded):
        parse_with_lexer_ctx(Lexer(b"[]"), NoResolve(), None, ParseFlags.ANY, 0)


def test_stream_needs_context():
    with pytest.raises(PrimitiveNotAllowed):
        parse(b"<</Length 0>>stream\nendstream\n")


def test_unknown_type():
    with pytest.raises(UnknownType):
        parse(b"foo ")


def test_stream_file_range():
    stream = parse_stream(b"<</Length 3>>stream\nabc\nendstream\n", NoResolve(), Context())
    assert stream.file_range == (20, 23)
    assert stream.source == PlainRef(0, 0)


def test_stream_length_by_reference():
    resolver = LengthResolver(3)
    stream = parse_stream(b"<</Length 9 0 R>>stream\nabc\nendstream\n", resolver, Context())
    assert stream.file_range == (24, 27)
    assert resolver.calls == [(PlainRef(9, 0), ParseFlags.INTEGER, 1)]


def test_stream_missing_length():
    with pytest.raises(MissingEntry):
        parse_stream(b"<</Foo 1>>stream\nabc\nendstream\n", NoResolve(), Context())


def test_parse_stream_rejects_plain_dict():
    with pytest.raises(UnexpectedPrimitive) as info:
        parse_stream_with_lexer(Lexer(b"<</A 1>> 5"), NoResolve(), Context())
    assert info.value.expected == "Stream"
    assert info.value.found == "Dictionary"


def test_indirect_object_decrypts_strings():
    ref, obj = parse_indirect_object(
        Lexer(b"4 0 obj (abc) endobj"), NoResolve(), ReversingDecoder(), ParseFlags.ANY
    )
    assert ref == PlainRef(4, 0)
    assert obj == PdfString(b"cba")


def test_indirect_object_missing_endobj_strict():
    with pytest.raises(UnexpectedLexeme):
        parse_indirect_object(Lexer(b"4 0 obj 7 endx"), NoResolve(), None, ParseFlags.ANY)


def test_indirect_object_missing_endobj_tolerant():
    lexer = Lexer(b"4 0 obj 7 endx")
    ref, obj = parse_indirect_object(lexer, TolerantResolver(), None, ParseFlags.ANY)
    assert (ref, obj) == (PlainRef(4, 0), 7)
    assert lexer.pos == 9


def test_indirect_stream():
    ref, stream = parse_indirect_stream(
        Lexer(b"5 0 obj <</Length 2>>stream\nhi\nendstream endobj"), NoResolve(), None
    )
    assert ref == PlainRef(5, 0)
    assert stream.file_range == (28, 30)
    assert stream.source == PlainRef(5, 0)
    assert stream.info == {"Length": 2}


def test_context_decrypt_without_decoder():
    assert Context().decrypt(b"xyz") == b"xyz"
    assert Context(ReversingDecoder(), PlainRef(1, 0)).decrypt(b"xyz") == b"zyx"
import pytest

from pdfcore.errors import (
    HexDecodeError,
    KeyValueMismatch,
    MissingEntry,
    NotFound,
    ParseError,
    PdfError,
    PrimitiveNotAllowed,
    UnexpectedEof,
    UnexpectedLexeme,
    UnexpectedPrimitive,
    UnknownType,
    UnspecifiedXRefEntry,
    XRefStreamTypeError,
)
from pdfcore.lexer import Lexer


@pytest.mark.parametrize(
    "err, attr, value",
    [
        (UnexpectedPrimitive("Integer", "Name"), "found", "Name"),
        (MissingEntry("Catalog", "Pages"), "field", "Pages"),
        (KeyValueMismatch("Type", "XRef", "Page"), "found", "Page"),
        (UnexpectedLexeme(17, "foo", "f or n"), "lexeme", "foo"),
        (HexDecodeError(3, (ord("x"), ord("y"))), "pos", 3),
        (PrimitiveNotAllowed("DICT", "ARRAY"), "allowed", "DICT"),
        (UnknownType(5, "}", "rest"), "first_lexeme", "}"),
        (NotFound("startxref"), "word", "startxref"),
        (XRefStreamTypeError(7), "found", 7),
        (UnspecifiedXRefEntry(42), "id", 42),
    ],
)
def test_errors_are_pdf_errors_with_fields(err, attr, value):
    assert isinstance(err, PdfError)
    assert getattr(err, attr) == value


def test_eof_is_also_eof_error():
    with pytest.raises(EOFError) as info:
        Lexer(b"   ").next()
    assert isinstance(info.value, UnexpectedEof)
    assert isinstance(info.value, PdfError)


def test_unexpected_primitive_fields():
    err = UnexpectedPrimitive("Integer", "Name")
    assert err.expected == "Integer"
    assert err.found == "Name"
    assert "Integer" in str(err) and "Name" in str(err)


def test_missing_entry_fields():
    err = MissingEntry("Catalog", "Pages")
    assert (err.typ, err.field) == ("Catalog", "Pages")
    assert "Pages" in str(err)
    assert "Catalog" in str(err)


def test_key_value_mismatch_fields():
    err = KeyValueMismatch("Type", "XRef", "Page")
    assert (err.key, err.value, err.found) == ("Type", "XRef", "Page")
    assert "/XRef" in str(err)


def test_unexpected_lexeme_fields():
    err = UnexpectedLexeme(17, "foo", "f or n")
    assert err.pos == 17
    assert err.lexeme == "foo"
    assert err.expected == "f or n"
    assert "17" in str(err)


def test_hex_decode_error_keeps_bytes():
    err = HexDecodeError(3, (ord("x"), ord("y")))
    assert err.pos == 3
    assert err.found_bytes == (ord("x"), ord("y"))
    assert "xy" in str(err)


def test_unknown_type_fields():
    err = UnknownType(5, "}", "rest of input")
    assert err.first_lexeme == "}"
    assert err.rest == "rest of input"
    assert err.pos == 5


def test_not_found_is_lookup_error():
    err = NotFound("startxref")
    assert err.word == "startxref"
    assert isinstance(err, LookupError)


def test_xref_errors_fields():
    assert XRefStreamTypeError(7).found == 7
    assert UnspecifiedXRefEntry(42).id == 42
    assert "42" in str(UnspecifiedXRefEntry(42))


def test_primitive_not_allowed_fields():
    err = PrimitiveNotAllowed("DICT", "ARRAY")
    assert err.allowed == "DICT"
    assert err.found == "ARRAY"


def test_parse_error_is_value_error():
    err = ParseError("bad number")
    assert isinstance(err, ValueError)
    assert isinstance(err, PdfError)
    assert "bad number" in str(err)
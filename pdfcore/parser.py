"""Parsing PDF primitives, streams and indirect objects from raw bytes."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from .errors import (
    HexDecodeError,
    MaxDepthExceeded,
    MissingEntry,
    ParseError,
    PrimitiveNotAllowed,
    UnexpectedEof,
    UnexpectedLexeme,
    UnexpectedPrimitive,
    UnknownType,
)
from .lexer import Lexer, Substr
from .primitive import (
    Dictionary,
    Name,
    NoResolve,
    PdfStream,
    PdfString,
    PlainRef,
    as_u32,
    debug_name,
)
from .strlexer import HexStringLexer, StringLexer

log = logging.getLogger(__name__)

MAX_DEPTH = 20

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class ParseFlags(enum.IntFlag):
    """The kinds of primitive a parse call accepts."""

    INTEGER = 1 << 0
    STREAM = 1 << 1
    DICT = 1 << 2
    NUMBER = 1 << 3
    NAME = 1 << 4
    ARRAY = 1 << 5
    STRING = 1 << 6
    BOOL = 1 << 7
    NULL = 1 << 8
    REF = 1 << 9
    ANY = (1 << 10) - 1


@dataclass(frozen=True)
class Context:
    """The indirect object being parsed, and the decoder for its strings."""

    decoder: Any = None
    id: PlainRef = field(default_factory=lambda: PlainRef(0, 0))

    def decrypt(self, data: bytes) -> bytes:
        """Decrypt ``data`` with the decoder, or return it unchanged without one."""
        if self.decoder is None:
            return data
        return bytes(self.decoder.decrypt(self.id, data))


def _check(flags: ParseFlags, allowed: ParseFlags) -> None:
    if not flags & allowed:
        raise PrimitiveNotAllowed(allowed, flags)


def _to_uint(lexeme: Substr) -> int:
    value = lexeme.to_int()
    if value < 0:
        raise ParseError(f"expected an unsigned integer, found {value}")
    return value


def _to_i32(lexeme: Substr) -> int:
    value = lexeme.to_int()
    if not _I32_MIN <= value <= _I32_MAX:
        raise ParseError(f"integer {value} out of range")
    return value


def _nibble(c: int) -> int | None:
    if 0x30 <= c <= 0x39:
        return c - 0x30
    if 0x41 <= c <= 0x46:
        return c - 0x41 + 10
    if 0x61 <= c <= 0x66:
        return c - 0x61 + 10
    return None


def _decode_name(rest: bytes) -> Name:
    out = bytearray()
    while (idx := rest.find(b"#")) >= 0:
        pair = rest[idx + 1: idx + 3]
        if len(pair) < 2:
            raise UnexpectedEof()
        hi, lo = pair[0], pair[1]
        high, low = _nibble(hi), _nibble(lo)
        if high is None or low is None:
            raise HexDecodeError(idx, (hi, lo))
        out += rest[:idx]
        out.append((high << 4) | low)
        rest = rest[idx + 3:]
    out += rest
    try:
        return Name(bytes(out).decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ParseError("name is not valid UTF-8") from exc


def _parse_dictionary_object(
    lexer: Lexer, resolver: Any, ctx: Context | None, max_depth: int
) -> Dictionary:
    result = Dictionary()
    while True:
        token = lexer.next()
        if token.slice.startswith(b"/"):
            key = token.reslice(1).to_name()
            result[key] = parse_with_lexer_ctx(lexer, resolver, ctx, ParseFlags.ANY, max_depth)
        elif token.equals(">>"):
            return result
        else:
            raise UnexpectedLexeme(lexer.pos, token.to_string(), "/ or >>")


def _parse_stream_object(
    info: Dictionary, lexer: Lexer, resolver: Any, ctx: Context
) -> PdfStream:
    lexer.next_stream()

    if "Length" not in info:
        raise MissingEntry("<Stream>", "Length")
    length_value = info["Length"]
    if isinstance(length_value, int) and not isinstance(length_value, bool) and length_value >= 0:
        length = length_value
    elif isinstance(length_value, PlainRef):
        length = as_u32(resolver.resolve_flags(length_value, ParseFlags.INTEGER, 1))
    else:
        raise UnexpectedPrimitive("unsigned Integer or Reference", debug_name(length_value))

    body = lexer.read_n(length)
    if len(body) != length:
        raise UnexpectedEof()

    lexer.next_expect("endstream")
    return PdfStream(info=info, source=ctx.id, file_range=body.file_range())


def parse(data: bytes, resolver: Any = None, flags: ParseFlags = ParseFlags.ANY) -> Any:
    """Parse one primitive from ``data``.

    Streams are only accepted by the context-aware functions.
    """
    return parse_with_lexer(Lexer(data), resolver, flags)


def parse_with_lexer(lexer: Lexer, resolver: Any = None, flags: ParseFlags = ParseFlags.ANY) -> Any:
    """Parse one primitive at the lexer's position."""
    return parse_with_lexer_ctx(lexer, resolver, None, flags, MAX_DEPTH)


def parse_with_lexer_ctx(
    lexer: Lexer,
    resolver: Any,
    ctx: Context | None,
    flags: ParseFlags,
    max_depth: int = MAX_DEPTH,
) -> Any:
    """Parse one primitive; on failure the lexer is put back where it started."""
    if resolver is None:
        resolver = NoResolve()
    start = lexer.pos
    try:
        return _parse_primitive(lexer, resolver, ctx, ParseFlags(flags), max_depth)
    except Exception:
        lexer.set_pos(start)
        raise


def _parse_primitive(
    lexer: Lexer, resolver: Any, ctx: Context | None, flags: ParseFlags, max_depth: int
) -> Any:
    first = lexer.next()

    if first.equals("<<"):
        _check(flags, ParseFlags.DICT)
        if max_depth == 0:
            raise MaxDepthExceeded()
        info = _parse_dictionary_object(lexer, resolver, ctx, max_depth - 1)
        if lexer.peek().equals("stream"):
            if ctx is None:
                raise PrimitiveNotAllowed(ParseFlags.STREAM, flags)
            return _parse_stream_object(info, lexer, resolver, ctx)
        return info

    if first.is_integer():
        _check(flags, ParseFlags.INTEGER | ParseFlags.REF)
        backup = lexer.pos
        second = lexer.next()
        if second.is_integer():
            third = lexer.next()
            if third.equals("R"):
                _check(flags, ParseFlags.REF)
                return PlainRef(_to_uint(first), _to_uint(second))
        _check(flags, ParseFlags.INTEGER)
        lexer.set_pos(backup)
        return _to_i32(first)

    real = first.real_number()
    if real is not None:
        _check(flags, ParseFlags.NUMBER)
        return real.to_float()

    if first.slice.startswith(b"/"):
        _check(flags, ParseFlags.NAME)
        return _decode_name(first.slice[1:])

    if first.equals("["):
        _check(flags, ParseFlags.ARRAY)
        if max_depth == 0:
            raise MaxDepthExceeded()
        items = []
        while not lexer.peek().equals("]"):
            items.append(parse_with_lexer_ctx(lexer, resolver, ctx, ParseFlags.ANY, max_depth - 1))
        lexer.next()
        return items

    if first.equals("(") or first.equals("<"):
        _check(flags, ParseFlags.STRING)
        string_lexer = (StringLexer if first.equals("(") else HexStringLexer)(lexer.remaining())
        data = bytes(string_lexer)
        lexer.offset_pos(string_lexer.offset)
        if ctx is not None:
            data = ctx.decrypt(data)
        return PdfString(data)

    if first.equals("true") or first.equals("false"):
        _check(flags, ParseFlags.BOOL)
        return first.equals("true")

    if first.equals("null"):
        _check(flags, ParseFlags.NULL)
        return None

    raise UnknownType(lexer.pos, first.to_string(), lexer.read_n(50).to_string())


def parse_stream(data: bytes, resolver: Any, ctx: Context) -> PdfStream:
    """Parse a stream whose dictionary may hold indirect references."""
    return parse_stream_with_lexer(Lexer(data), resolver, ctx)


def parse_stream_with_lexer(lexer: Lexer, resolver: Any, ctx: Context) -> PdfStream:
    """Parse a stream at the lexer's position."""
    if resolver is None:
        resolver = NoResolve()
    first = lexer.next()
    if not first.equals("<<"):
        raise UnexpectedPrimitive("Stream", "something else")
    info = _parse_dictionary_object(lexer, resolver, None, MAX_DEPTH)
    if not lexer.peek().equals("stream"):
        raise UnexpectedPrimitive("Stream", "Dictionary")
    return _parse_stream_object(info, lexer, resolver, Context(decoder=None, id=ctx.id))


def _read_object_header(lexer: Lexer) -> PlainRef:
    obj_id = _to_uint(lexer.next())
    gen = _to_uint(lexer.next())
    lexer.next_expect("obj")
    return PlainRef(obj_id, gen)


def parse_indirect_object(
    lexer: Lexer, resolver: Any, decoder: Any = None, flags: ParseFlags = ParseFlags.ANY
) -> tuple[PlainRef, Any]:
    """Parse ``N G obj ... endobj`` and return the reference and the object."""
    if resolver is None:
        resolver = NoResolve()
    ref = _read_object_header(lexer)
    obj = parse_with_lexer_ctx(lexer, resolver, Context(decoder, ref), flags, MAX_DEPTH)

    if resolver.options().allow_missing_endobj:
        pos = lexer.pos
        try:
            lexer.next_expect("endobj")
        except Exception as exc:
            log.warning("error parsing obj %d %d: %s", ref.id, ref.gen, exc)
            lexer.set_pos(pos)
    else:
        lexer.next_expect("endobj")

    return ref, obj


def parse_indirect_stream(
    lexer: Lexer, resolver: Any, decoder: Any = None
) -> tuple[PlainRef, PdfStream]:
    """Parse ``N G obj <<...>> stream ... endstream endobj``."""
    if resolver is None:
        resolver = NoResolve()
    ref = _read_object_header(lexer)
    stream = parse_stream_with_lexer(lexer, resolver, Context(decoder, ref))
    lexer.next_expect("endobj")
    return ref, stream
"""Splitting PDF data into lexemes at whitespace and delimiters."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from .errors import NotFound, ParseError, PdfError, UnexpectedEof, UnexpectedLexeme
from .primitive import Name

_WHITESPACE = frozenset(b"\x00 \r\n\t")
_DELIMITERS = frozenset(b"()<>[]{}/%")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?"
    r"|inf|infinity|nan)",
    re.IGNORECASE,
)


def is_whitespace(b: int) -> bool:
    """True for the bytes the lexer treats as whitespace."""
    return b in _WHITESPACE


def _not_whitespace(b: int) -> bool:
    return b not in _WHITESPACE


def boundary(data: bytes, pos: int, condition: Callable[[int], bool]) -> int:
    """First position at or after ``pos`` where ``condition`` fails, or ``len(data)``."""
    for i in range(pos, len(data)):
        if not condition(data[i]):
            return i
    return len(data)


def boundary_rev(data: bytes, pos: int, condition: Callable[[int], bool]) -> int:
    """Position just after the last byte before ``pos`` where ``condition`` fails, or 0."""
    for i in range(pos - 1, -1, -1):
        if not condition(data[i]):
            return i + 1
    return 0


def _is_int(data: bytes) -> bool:
    return all(0x30 <= b <= 0x39 for b in data)


@dataclass(frozen=True, eq=False)
class Substr:
    """A lexeme: a slice of the input together with its offset in the file."""

    slice: bytes
    file_offset: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.slice, str):
            object.__setattr__(self, "slice", self.slice.encode("utf-8"))
        elif not isinstance(self.slice, bytes):
            object.__setattr__(self, "slice", bytes(self.slice))

    def __bytes__(self) -> bytes:
        return self.slice

    def __len__(self) -> int:
        return len(self.slice)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Substr):
            return self.slice == other.slice
        if isinstance(other, (bytes, bytearray, str)):
            return self.equals(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.slice)

    def to_string(self) -> str:
        """Decode as UTF-8, replacing invalid bytes."""
        return self.slice.decode("utf-8", errors="replace")

    def as_str(self) -> str:
        """Decode as UTF-8; raise ParseError if invalid."""
        try:
            return self.slice.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError("lexeme is not valid UTF-8") from exc

    def to_name(self) -> Name:
        return Name(self.as_str())

    def to_int(self) -> int:
        """Parse as a decimal integer; raise ParseError otherwise."""
        text = self.as_str()
        if not _INT_RE.fullmatch(text):
            raise ParseError(f"invalid integer {text!r}")
        return int(text)

    def to_float(self) -> float:
        """Parse as a floating point number; raise ParseError otherwise."""
        text = self.as_str()
        if not _FLOAT_RE.fullmatch(text):
            raise ParseError(f"invalid number {text!r}")
        return float(text)

    def is_integer(self) -> bool:
        data = self.slice
        if not data:
            return False
        if data[0] == ord("-"):
            if len(data) < 2:
                return False
            data = data[1:]
        return _is_int(data)

    def real_number(self) -> Substr | None:
        """The leading part that forms a real number, or None if there is none."""
        data = self.slice
        if not data:
            return None
        if data[0] == ord("-"):
            if len(data) < 2:
                return None
            data = data[1:]
        dot = data.find(b".")
        if dot >= 0:
            if not _is_int(data[:dot]):
                return None
            data = data[dot + 1:]
        for length, b in enumerate(data):
            if not 0x30 <= b <= 0x39:
                if length == 0:
                    return None
                end = len(self.slice) - len(data) + length
                return Substr(self.slice[:end], self.file_offset)
        return self

    def is_real_number(self) -> bool:
        return self.real_number() is not None

    def equals(self, other: bytes | str) -> bool:
        if isinstance(other, str):
            other = other.encode("utf-8")
        return self.slice == bytes(other)

    def reslice(self, start: int) -> Substr:
        """The part from ``start`` to the end."""
        return Substr(self.slice[start:], self.file_offset + start)

    def file_range(self) -> tuple[int, int]:
        """Start and end of the lexeme in the file."""
        return (self.file_offset, self.file_offset + len(self.slice))


class Lexer:
    """Moves through PDF data lexeme by lexeme, forwards or backwards."""

    def __init__(self, buf: bytes, file_offset: int = 0) -> None:
        self.buf = bytes(buf)
        self.pos = 0
        self.file_offset = file_offset

    def next(self) -> Substr:
        """Return the next lexeme and move past it."""
        lexeme, pos = self._next_word()
        self.pos = pos
        return lexeme

    def next_int(self) -> int:
        return self.next().to_int()

    def next_stream(self) -> None:
        """Consume the ``stream`` keyword and the end-of-line after it."""
        pos = self._skip_whitespace(self.pos)
        if pos + 6 >= len(self.buf):
            raise UnexpectedEof()
        b0 = self.buf[pos + 6]
        if b0 == 0x0A:
            self.pos = pos + 7
        elif b0 == 0x0D:
            if pos + 7 >= len(self.buf):
                raise UnexpectedEof()
            if self.buf[pos + 7] != 0x0A:
                raise PdfError("invalid whitespace following 'stream'")
            self.pos = pos + 8
        else:
            raise PdfError("invalid whitespace")

    def back(self) -> Substr:
        """Return the previous lexeme and move to its first byte."""
        end_pos = boundary_rev(self.buf, self.pos, is_whitespace)
        start_pos = boundary_rev(self.buf, end_pos, _not_whitespace)
        self.pos = start_pos
        return self.new_substr(start_pos, end_pos)

    def peek(self) -> Substr:
        """The next lexeme without moving; empty at the end of the data."""
        try:
            lexeme, _ = self._next_word()
        except UnexpectedEof:
            return self.new_substr(self.pos, self.pos)
        return lexeme

    def next_expect(self, expected: str) -> None:
        """Consume the next lexeme; raise UnexpectedLexeme unless it is ``expected``."""
        word = self.next()
        if not word.equals(expected):
            raise UnexpectedLexeme(self.pos, word.to_string(), expected)

    def _skip_whitespace(self, pos: int) -> int:
        pos = boundary(self.buf, pos, is_whitespace)
        if pos >= len(self.buf):
            raise UnexpectedEof()
        return pos

    def _is_ws_at(self, pos: int) -> bool:
        return pos < len(self.buf) and self.buf[pos] in _WHITESPACE

    def _is_delim_at(self, pos: int) -> bool:
        return pos < len(self.buf) and self.buf[pos] in _DELIMITERS

    def _advance(self, pos: int) -> int:
        if pos < len(self.buf):
            return pos + 1
        raise UnexpectedEof()

    def _read_word_end(self, pos: int) -> int:
        while not self._is_ws_at(pos) and not self._is_delim_at(pos):
            if pos >= len(self.buf):
                break
            pos += 1
        return pos

    def _next_word(self) -> tuple[Substr, int]:
        if self.pos == len(self.buf):
            raise UnexpectedEof()
        pos = self._skip_whitespace(self.pos)
        while self.buf[pos] == ord("%"):
            pos += 1
            newline = self.buf.find(b"\n", pos)
            if newline >= 0:
                pos = newline + 1
            pos = self._skip_whitespace(pos)

        start = pos
        if self._is_delim_at(pos):
            if self.buf[pos] == ord("/"):
                pos = self._read_word_end(self._advance(pos))
                return self.new_substr(start, pos), pos
            if self.buf[pos:pos + 2] in (b"<<", b">>"):
                pos = self._advance(pos)
            pos = self._advance(pos)
            return self.new_substr(start, pos), pos

        pos = self._read_word_end(pos)
        return self.new_substr(start, pos), pos

    def new_substr(self, start: int, end: int) -> Substr:
        """A Substr of the buffer; a backward range is turned around."""
        if start > end:
            start, end = end + 1, start + 1
        return Substr(self.buf[start:end], self.file_offset + start)

    def set_pos(self, wanted_pos: int) -> Substr:
        """Move to ``wanted_pos`` (clamped to the end); return the bytes passed over."""
        new_pos = max(0, min(wanted_pos, len(self.buf)))
        if self.pos < new_pos:
            start, end = self.pos, new_pos
        else:
            start, end = new_pos, self.pos
        self.pos = new_pos
        return self.new_substr(start, end)

    def set_pos_from_end(self, new_pos: int) -> Substr:
        return self.set_pos(max(0, max(0, len(self.buf) - new_pos) - 1))

    def offset_pos(self, offset: int) -> Substr:
        return self.set_pos(self.pos + offset)

    def _incr_pos(self) -> bool:
        if self.pos >= len(self.buf) - 1:
            return False
        self.pos += 1
        return True

    def seek_newline(self) -> Substr:
        """Move to the start of the next line; return the skipped bytes."""
        if self.pos >= len(self.buf):
            raise UnexpectedEof()
        start = self.pos
        while self.buf[self.pos] != 0x0A and self._incr_pos():
            pass
        self._incr_pos()
        return self.new_substr(start, self.pos)

    def seek_substr(self, substr: bytes | str) -> Substr | None:
        """Move past the next ``substr``; return the text before it, or None."""
        if isinstance(substr, str):
            substr = substr.encode("utf-8")
        if not substr:
            raise ValueError("cannot seek an empty string")
        start = self.pos
        matched = 0
        while True:
            if self.pos >= len(self.buf):
                return None
            if self.buf[self.pos] == substr[matched]:
                matched += 1
            else:
                matched = 0
            if matched == len(substr):
                break
            self.pos += 1
        self.pos += 1
        return self.new_substr(start, self.pos - len(substr))

    def seek_substr_back(self, substr: bytes | str) -> Substr:
        """Search backwards for ``substr`` and move to just after it."""
        if isinstance(substr, str):
            substr = substr.encode("utf-8")
        end = self.pos
        start = self.buf.rfind(substr, 0, end)
        if start < 0:
            raise NotFound(substr.decode("utf-8", errors="replace"))
        self.pos = start + len(substr)
        return self.new_substr(self.pos, end)

    def read_n(self, n: int) -> Substr:
        """Read at most ``n`` bytes."""
        start = self.pos
        self.pos += n
        if self.pos >= len(self.buf):
            self.pos = max(len(self.buf) - 1, 0)
        if start < len(self.buf):
            return self.new_substr(start, self.pos)
        return self.new_substr(0, 0)

    def remaining(self) -> bytes:
        """The bytes from the current position to the end."""
        return self.buf[self.pos:]

    def ctx(self) -> str:
        """Text around the current position, for error messages."""
        lo = max(0, self.pos - 40)
        hi = min(len(self.buf), self.pos + 40)
        return self.buf[lo:hi].decode("utf-8", errors="replace")
"""Lexers for the bodies of literal ``(...)`` and hexadecimal ``<...>`` strings."""

from __future__ import annotations

from typing import Iterator

from .errors import HexDecodeError, UnexpectedEof

_SIMPLE_ESCAPES = {
    ord("n"): ord("\n"),
    ord("r"): ord("\r"),
    ord("t"): ord("\t"),
    ord("b"): 0x08,
    ord("f"): 0x0C,
    ord("("): ord("("),
    ord(")"): ord(")"),
    ord("\\"): ord("\\"),
}
_CR = ord("\r")
_LF = ord("\n")


class StringLexer:
    """Yields the bytes of a literal string; ``buf`` starts right after ``(``.

    After iteration, :attr:`offset` is the number of input bytes consumed,
    including the closing parenthesis.
    """

    def __init__(self, buf: bytes) -> None:
        self.buf = bytes(buf)
        self.pos = 0
        self.nested = 0

    @property
    def offset(self) -> int:
        return self.pos

    def __iter__(self) -> Iterator[int]:
        while True:
            b = self.next_lexeme()
            if b is None:
                return
            yield b

    def next_lexeme(self) -> int | None:
        """Return the next byte of the string, or None at its closing parenthesis."""
        while True:
            c = self._next_byte()
            if c == ord("\\"):
                c = self._next_byte()
                if c in _SIMPLE_ESCAPES:
                    return _SIMPLE_ESCAPES[c]
                if c in (_LF, _CR):
                    # A backslash before an end-of-line joins the lines.
                    other = _CR if c == _LF else _LF
                    if self.pos < len(self.buf) and self.buf[self.pos] == other:
                        self.pos += 1
                    continue
                self._back()
                code = 0
                for _ in range(3):
                    d = self._peek_byte()
                    if ord("0") <= d <= ord("7"):
                        self.pos += 1
                        code = code * 8 + (d - ord("0"))
                    else:
                        break
                return code & 0xFF
            if c == ord("("):
                self.nested += 1
                return c
            if c == ord(")"):
                self.nested -= 1
                return None if self.nested < 0 else c
            return c

    def _next_byte(self) -> int:
        if self.pos >= len(self.buf):
            raise UnexpectedEof()
        self.pos += 1
        return self.buf[self.pos - 1]

    def _back(self) -> None:
        if self.pos == 0:
            raise UnexpectedEof()
        self.pos -= 1

    def _peek_byte(self) -> int:
        if self.pos >= len(self.buf):
            raise UnexpectedEof()
        return self.buf[self.pos]


_HEX_WHITESPACE = frozenset(b" \t\n\r\x0c")


def _nibble(c: int) -> int | None:
    if ord("0") <= c <= ord("9"):
        return c - ord("0")
    if ord("A") <= c <= ord("F"):
        return c - ord("A") + 10
    if ord("a") <= c <= ord("f"):
        return c - ord("a") + 10
    return None


class HexStringLexer:
    """Yields the bytes of a hexadecimal string; ``buf`` starts right after ``<``.

    After iteration, :attr:`offset` is the number of input bytes consumed,
    including the closing ``>``.
    """

    def __init__(self, buf: bytes) -> None:
        self.buf = bytes(buf)
        self.pos = 0

    @property
    def offset(self) -> int:
        return self.pos

    def __iter__(self) -> Iterator[int]:
        while True:
            b = self.next_hex_byte()
            if b is None:
                return
            yield b

    def next_hex_byte(self) -> int | None:
        """Return the next decoded byte, or None at the closing ``>``."""
        c1 = self._next_non_whitespace()
        if c1 == ord(">"):
            return None
        high = _nibble(c1)
        if high is None:
            following = self.buf[self.pos] if self.pos < len(self.buf) else 0
            raise HexDecodeError(self.pos, (c1, following))
        c2 = self._next_non_whitespace()
        if c2 == ord(">"):
            # An odd final digit is completed with zero; leave '>' to end the string.
            self.pos -= 1
            return high << 4
        low = _nibble(c2)
        if low is None:
            raise HexDecodeError(self.pos, (c1, c2))
        return (high << 4) | low

    def _next_non_whitespace(self) -> int:
        while True:
            if self.pos >= len(self.buf):
                raise UnexpectedEof()
            b = self.buf[self.pos]
            self.pos += 1
            if b not in _HEX_WHITESPACE:
                return b
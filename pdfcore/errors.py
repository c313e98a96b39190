"""Exceptions raised while reading, parsing and writing PDF data."""

from __future__ import annotations


class PdfError(Exception):
    """Base class of every error raised by this package."""


class UnexpectedEof(PdfError, EOFError):
    """The input ended before a complete token or object was read."""

    def __init__(self, message: str = "unexpected end of file") -> None:
        super().__init__(message)


class UnexpectedPrimitive(PdfError, TypeError):
    """A primitive of one kind was found where another kind was needed."""

    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"expected primitive {expected}, found primitive {found}")


class MissingEntry(PdfError, KeyError):
    """A required dictionary entry is absent."""

    def __init__(self, typ: str, field: str) -> None:
        self.typ = typ
        self.field = field
        super().__init__(f"missing entry {field!r} in {typ}")

    def __str__(self) -> str:
        return self.args[0]


class KeyValueMismatch(PdfError):
    """A dictionary entry holds a different name than the one expected."""

    def __init__(self, key: str, value: str, found: str) -> None:
        self.key = key
        self.value = value
        self.found = found
        super().__init__(f"expected /{key} to be /{value}, found /{found}")


class UnexpectedLexeme(PdfError):
    """The lexer produced a token other than the one expected."""

    def __init__(self, pos: int, lexeme: str, expected: str) -> None:
        self.pos = pos
        self.lexeme = lexeme
        self.expected = expected
        super().__init__(
            f"unexpected lexeme {lexeme!r} at position {pos}, expected {expected}"
        )


class HexDecodeError(PdfError):
    """A pair of bytes could not be read as a hexadecimal number."""

    def __init__(self, pos: int, found_bytes: tuple[int, int]) -> None:
        self.pos = pos
        self.found_bytes = tuple(found_bytes)
        shown = bytes(self.found_bytes)
        super().__init__(f"invalid hex digits {shown!r} at position {pos}")


class PrimitiveNotAllowed(PdfError):
    """The parsed primitive is not among the kinds that were allowed."""

    def __init__(self, allowed: object, found: object) -> None:
        self.allowed = allowed
        self.found = found
        super().__init__(f"primitive not allowed: allowed {allowed!r}, asked for {found!r}")


class MaxDepthExceeded(PdfError):
    """Nested arrays or dictionaries go deeper than the parser permits."""

    def __init__(self, message: str = "maximum nesting depth reached") -> None:
        super().__init__(message)


class UnknownType(PdfError):
    """A token does not start any known kind of primitive."""

    def __init__(self, pos: int, first_lexeme: str, rest: str) -> None:
        self.pos = pos
        self.first_lexeme = first_lexeme
        self.rest = rest
        super().__init__(
            f"unknown type at position {pos}: {first_lexeme!r} followed by {rest!r}"
        )


class NotFound(PdfError, LookupError):
    """A searched-for word does not occur in the input."""

    def __init__(self, word: str) -> None:
        self.word = word
        super().__init__(f"could not find {word!r}")


class XRefStreamTypeError(PdfError):
    """An xref stream entry has a type field other than 0, 1 or 2."""

    def __init__(self, found: int) -> None:
        self.found = found
        super().__init__(f"invalid xref stream entry type {found}")


class UnspecifiedXRefEntry(PdfError, LookupError):
    """An object number has no entry in the cross-reference table."""

    def __init__(self, id: int) -> None:
        self.id = id
        super().__init__(f"no xref entry for object {id}")


class ParseError(PdfError, ValueError):
    """Text could not be converted into the requested value."""
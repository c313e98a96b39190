# pdfcore

`pdfcore` reads and writes the building blocks of PDF data. It needs no third-party libraries.

It provides:

- an object model for names, strings, dictionaries, streams and references;
- a lexer that splits PDF bytes into lexemes;
- a parser that turns lexemes into objects;
- readers and writers for cross-reference tables and xref streams;
- a writer for path operators in content streams.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install ".[test]"
pytest
```

## The object model (`pdfcore.primitive`)

PDF values are ordinary Python values:

| PDF        | Python                               |
|------------|--------------------------------------|
| null       | `None`                               |
| boolean    | `bool`                               |
| integer    | `int`                                |
| real       | `float`                              |
| array      | `list`                               |
| name       | `Name` (a `str` subclass, no slash)  |
| string     | `PdfString` (raw `bytes` in `.data`) |
| dictionary | `Dictionary` (an ordered `dict`)     |
| stream     | `PdfStream`                          |
| reference  | `PlainRef(id, gen)`                  |

- **Type checks.** `as_integer`, `as_u8`, `as_u32`, `as_number`, `as_bool`, `as_name`, `as_string`, `as_array`, `as_dictionary`, `as_reference` and `as_stream` check the kind of a value. On a mismatch they raise `UnexpectedPrimitive`.
- **Kind names.** `debug_name` gives the name of a value's kind.
- **References.** `resolve` follows a reference through a resolver.
- **Writing.** `serialize` writes any value in PDF syntax.
- **Strings.** `PdfString.to_string` decodes a string. A string that starts with the `\xfe\xff` byte-order mark is read as UTF-16BE; any other string is read as UTF-8. Invalid data raises `ParseError`. `PdfString.to_string_lossy` replaces undecodable data instead of raising.
- **Dictionaries.**
  - `Dictionary.require` removes an entry, or raises `MissingEntry` if it is absent.
  - `Dictionary.expect` checks that an entry holds a given name.

A resolver is any object with the methods `resolve`, `resolve_flags`, `stream_data` and `options`.

- `NoResolve` is the resolver to use for self-contained data. Every lookup on it raises `PdfError`.
- `ParseOptions` holds switches that make reading more tolerant: `allow_xref_error` and `allow_missing_endobj`. `ParseOptions.tolerant()` turns both on.

## Parsing (`pdfcore.parser`)

```python
from pdfcore.parser import parse, ParseFlags
from pdfcore.primitive import NoResolve, as_name

value = parse(b"<</Type/Page /Count 3>>", NoResolve(), ParseFlags.DICT)
print(as_name(value["Type"]))   # Page
print(value["Count"])           # 3
```

`ParseFlags` limits which kinds of object a call accepts. Any other kind raises `PrimitiveNotAllowed`. Arrays and dictionaries may be nested at most 20 levels deep; deeper nesting raises `MaxDepthExceeded`.

Streams are parsed as follows:

- Streams are only accepted where a `Context` is given: by `parse_with_lexer_ctx`, `parse_stream`, `parse_indirect_object` and `parse_indirect_stream`.
- A parsed stream records its object reference and its byte range in the input.
- `PdfStream.raw_data` fetches those bytes through the resolver's `stream_data`.

`parse_indirect_object` and `parse_indirect_stream` read `N G obj ... endobj`.

- If a decoder is given, strings are passed to its `decrypt(ref, data)` method.
- With `allow_missing_endobj`, a missing `endobj` is logged rather than raised.

## Lexing (`pdfcore.lexer`, `pdfcore.strlexer`)

```python
from pdfcore.lexer import Lexer

lexer = Lexer(b"[(Hello)20(World)]TJ")
print(lexer.next().to_string())   # [
```

`Lexer` moves forwards (`next`, `peek`, `next_expect`) and backwards (`back`, `seek_substr_back`) through the data. Each lexeme is returned as a `Substr`, which keeps its offset in the file.

`StringLexer` and `HexStringLexer` decode the bodies of literal `( ... )` strings and hex `< ... >` strings. They are iterables of byte values. They handle escapes, octal codes, line continuations and an odd final hex digit.

## Dates (`pdfcore.pdfdate`)

```python
from pdfcore.pdfdate import parse_date
from pdfcore.primitive import NoResolve, PdfString

date = parse_date(PdfString(b"D:199812231952-08'00"), NoResolve())
print(date.year, date.month, date.day, date.rel)   # 1998 12 23 TimeRel.EARLIER
print(date.to_primitive())                         # "D:19981223195200-08'00"
```

## Cross-reference data (`pdfcore.parse_xref`, `pdfcore.xref`)

```python
from pdfcore.lexer import Lexer
from pdfcore.parse_xref import read_xref_and_trailer_at
from pdfcore.primitive import NoResolve
from pdfcore.xref import XRefTable

data = (b"xref\n0 2\n0000000000 65535 f \n0000000017 00000 n \n"
        b"trailer\n<</Size 2>>")
sections, trailer = read_xref_and_trailer_at(Lexer(data), NoResolve())

table = XRefTable(2)
for section in sections:
    table.add_entries_from(section)
print(list(table.ids()))   # [1]
```

`read_xref_and_trailer_at` reads either a classic `xref` table or an xref stream object.

- Xref stream data may be uncompressed or `/FlateDecode`-compressed, with or without a PNG predictor.
- With `allow_xref_error`, short xref stream data is truncated rather than rejected.

`XRefTable` merges sections. When two entries are for the same object, the one with the higher generation wins. `XRefTable.write_stream` encodes the table as xref stream data with an `XRefInfo` dictionary.

## Path construction (`pdfcore.path`)

```python
import io
from pdfcore.path import PathBuilder, FillMode

out = io.StringIO()
path = PathBuilder(out, (0, 0))
path.move_to((10, 10))
path.line_to((20, 10))
path.quadratic((25, 15), (20, 20))
path.close()
path.fill(FillMode.EVEN_ODD)
```

- Quadratic curves are written as the equivalent cubic curve.
- `cubic` uses the short `v` and `y` operators where a control point equals the current point.

## Errors

Every failure raises a subclass of `pdfcore.errors.PdfError`. Examples are `UnexpectedEof`, `UnexpectedLexeme`, `UnexpectedPrimitive`, `MissingEntry` and `XRefStreamTypeError`.

## What it does not do

`pdfcore` works on the pieces of a PDF file, not on whole documents.

- It does not open a file, locate `startxref` or follow the chain of earlier xref sections.
- It does not read object streams, pages or fonts.
- It does not decrypt anything itself. Decryption happens only through a decoder that you pass in.
- It decodes no stream filters other than Flate, and Flate only for xref streams.
- It has no command-line tool.
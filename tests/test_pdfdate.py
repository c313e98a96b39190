import pytest

from pdfcore.errors import ParseError, PdfError, UnexpectedPrimitive
from pdfcore.pdfdate import Date, TimeRel, parse_date
from pdfcore.primitive import NoResolve, PdfString, PlainRef


class _OneObject:
    def __init__(self, obj):
        self.obj = obj

    def resolve(self, ref):
        return self.obj


def test_date_from_source_example():
    d = parse_date(PdfString(b"D:199812231952-08'00"), NoResolve())
    assert d == Date(
        year=1998, month=12, day=23, hour=19, minute=52, second=0,
        rel=TimeRel.EARLIER, tz_hour=8, tz_minute=0,
    )


def test_year_only_uses_defaults():
    d = parse_date(PdfString(b"D:1998"), NoResolve())
    assert d == Date(year=1998, month=1, day=1, hour=0, minute=0, second=0,
                     rel=TimeRel.UNIVERSAL, tz_hour=0, tz_minute=0)


def test_universal_marker():
    d = parse_date(PdfString(b"D:20200102030405Z"), NoResolve())
    assert d.rel is TimeRel.UNIVERSAL
    assert (d.month, d.day, d.hour, d.minute, d.second) == (1, 2, 3, 4, 5)


def test_reference_is_resolved():
    resolver = _OneObject(PdfString(b"D:2001+05'30"))
    d = parse_date(PlainRef(4, 0), resolver)
    assert d.year == 2001
    assert d.rel is TimeRel.LATER
    assert (d.tz_hour, d.tz_minute) == (5, 30)


def test_round_trip():
    d = Date(year=1998, month=12, day=23, hour=19, minute=52, second=0,
             rel=TimeRel.EARLIER, tz_hour=8, tz_minute=0)
    p = d.to_primitive()
    assert p.data == b"D:19981223195200-08'00"
    assert parse_date(p, NoResolve()) == d


def test_invalid_date_cannot_be_written():
    with pytest.raises(PdfError):
        Date(year=2000, hour=24).to_primitive()
    with pytest.raises(PdfError):
        Date(year=10000).to_primitive()


def test_missing_prefix():
    with pytest.raises(PdfError):
        parse_date(PdfString(b"199812231952"), NoResolve())


def test_missing_year():
    with pytest.raises(PdfError):
        parse_date(PdfString(b"D:19"), NoResolve())


def test_bad_year():
    with pytest.raises(ParseError):
        parse_date(PdfString(b"D:19x8"), NoResolve())


def test_not_utf8():
    with pytest.raises(ParseError):
        parse_date(PdfString(b"D:\xff\xfe98"), NoResolve())


def test_not_a_string():
    with pytest.raises(UnexpectedPrimitive):
        parse_date(42, NoResolve())
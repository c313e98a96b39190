"""Writing path construction and painting operators of a content stream."""

from __future__ import annotations

import enum
import math
from decimal import Decimal
from typing import Sequence, TextIO

Point = tuple[float, float]


class FillMode(enum.Enum):
    """The rule deciding which regions a fill paints."""

    NON_ZERO = "f"
    EVEN_ODD = "f*"


def _point(p: Sequence[float]) -> Point:
    x, y = p
    return (float(x), float(y))


def _fmt(x: float) -> str:
    if math.isnan(x) or math.isinf(x):
        raise ValueError(f"coordinate {x!r} is not finite")
    if x.is_integer():
        return str(int(x))
    return format(Decimal(repr(x)), "f")


class PathBuilder:
    """Writes path operators to a text stream, tracking the current point."""

    def __init__(self, out: TextIO, start: Sequence[float]) -> None:
        self.out = out
        self.current: Point = _point(start)

    def _emit(self, *parts: object) -> None:
        words = [_fmt(v) if isinstance(v, float) else str(v) for v in parts]
        self.out.write(" ".join(words) + "\n")

    def move_to(self, p: Sequence[float]) -> None:
        """Begin a new subpath at ``p`` without a connecting segment."""
        p = _point(p)
        self._emit(*p, "m")
        self.current = p

    def line_to(self, p: Sequence[float]) -> None:
        """Append a straight segment from the current point to ``p``."""
        p = _point(p)
        self._emit(*p, "l")
        self.current = p

    def quadratic(self, c: Sequence[float], p: Sequence[float]) -> None:
        """Append a quadratic Bézier curve, written as the equivalent cubic."""
        c, p = _point(c), _point(p)
        cur = self.current
        c1 = ((2 * c[0] + cur[0]) / 3, (2 * c[1] + cur[1]) / 3)
        c2 = ((2 * c[0] + p[0]) / 3, (2 * c[1] + p[1]) / 3)
        self._emit(*c1, *c2, *p, "c")
        self.current = p

    def cubic(self, c1: Sequence[float], c2: Sequence[float], p: Sequence[float]) -> None:
        """Append a cubic Bézier curve, using the short forms where they apply."""
        c1, c2, p = _point(c1), _point(c2), _point(p)
        if c1 == self.current:
            self._emit(*c2, *p, "v")
        elif c2 == self.current:
            self._emit(*c1, *p, "y")
        else:
            self._emit(*c1, *c2, *p, "c")
        self.current = p

    def close(self) -> None:
        """Close the current subpath."""
        self.out.write("h\n")

    def fill(self, mode: FillMode) -> None:
        """Fill the path with the given rule."""
        self.out.write(FillMode(mode).value + "\n")
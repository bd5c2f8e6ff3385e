"""Render a bitmask as wrapped, comma-separated name lines."""

from __future__ import annotations

from collections.abc import Sequence

from cperlib.types import BITS_LINE_WIDTH


def format_bits(
    prefix: str,
    bits: int,
    names: Sequence[str | None],
    width: int = BITS_LINE_WIDTH,
) -> list[str]:
    """Return lines naming every set bit of *bits* that has an entry in *names*.

    Bit ``i`` maps to ``names[i]``. Names are joined with ``", "`` after
    *prefix*; a line is flushed and a fresh one started with *prefix* once the
    next name would push it past *width* columns. Set bits without a name
    (``None`` entries, or positions past the end of *names*) are skipped.

    Example:
        >>> format_bits("  ", 0b1001, ["restartable", "precise IP", "overflow", "corrected"])
        ['  restartable, corrected']
    """
    lines: list[str] = []
    buf = ""
    for i, name in enumerate(names):
        if not bits & (1 << i):
            continue
        if not name:
            continue
        if buf and len(buf) + len(name) + 2 > width:
            lines.append(buf)
            buf = ""
        if not buf:
            buf = f"{prefix}{name}"
        else:
            buf += f", {name}"
    if buf:
        lines.append(buf)
    return lines

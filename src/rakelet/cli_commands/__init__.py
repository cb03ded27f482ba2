"""CLI command implementations and the status marks they print."""

from __future__ import annotations

import sys
from typing import Optional

# (glyph, fallback) per run outcome
_MARKS = {True: ("✓", "[ OK ]"), False: ("✗", "[ FAIL ]")}


def status_mark(ok: bool, encoding: Optional[str] = None) -> str:
    """Mark printed in front of a run summary.

    Falls back to a bracketed word when the output encoding (stdout's by
    default) can't represent the glyph, as on a classic Windows console or
    a latin-1 pipe.
    """
    glyph, fallback = _MARKS[ok]
    encoding = encoding or sys.stdout.encoding
    if not encoding:
        return fallback
    try:
        glyph.encode(encoding)
    except (UnicodeEncodeError, LookupError):
        return fallback
    return glyph

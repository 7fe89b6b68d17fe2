"""
Version ordering for library filename suffixes (pure).

Suffixes are what remains of a file name after the base name, e.g.
``30.34.0`` for ``libgnutls.so.30.34.0``. No I/O.

Ordering rules:
    - dotted segments compare left to right
    - two numeric segments compare as integers
    - a numeric segment ranks above a non-numeric one
    - two non-numeric segments compare lexically
    - when one suffix is a prefix of the other, the longer one wins
    - a suffix with no numeric segment at all (including the empty
      suffix) ranks below every suffix that has one
"""

from __future__ import annotations

_SegmentKey = tuple[int, int, str]


def _is_numeric(segment: str) -> bool:
    return segment.isascii() and segment.isdigit()


def _segment_key(segment: str) -> _SegmentKey:
    if _is_numeric(segment):
        return (1, int(segment), "")
    return (0, 0, segment)


def _segments(suffix: str) -> list[str]:
    cleaned = suffix.strip().strip(".")
    if not cleaned:
        return []
    return cleaned.split(".")


def version_key(suffix: str) -> tuple[int, tuple[_SegmentKey, ...]]:
    """Sort key implementing the suffix ordering.

    Usable directly with ``sorted(..., key=version_key)``.
    """
    segments = _segments(suffix)
    has_numeric = any(_is_numeric(s) for s in segments)
    return (1 if has_numeric else 0, tuple(_segment_key(s) for s in segments))


def compare_versions(a: str, b: str) -> int:
    """Compare two version suffixes.

    Returns:
        ``-1`` if ``a < b``, ``0`` if equal, ``1`` if ``a > b``.
    """
    ka, kb = version_key(a), version_key(b)
    return (ka > kb) - (ka < kb)


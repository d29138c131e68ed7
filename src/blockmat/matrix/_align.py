"""Range alignment to chunk and block boundaries."""

from typing import Tuple

__all__ = ['align_range']


def align_range(first: int, last: int, interval: int, extent: int) -> Tuple[int, int]:
    """Widen ``[first, last)`` to multiples of ``interval``.

    The start is rounded down and the end rounded up, then clamped to
    ``extent``. An ``interval`` of zero, or a range already covering the
    whole axis, is returned unchanged.

    Example:
        >>> align_range(5, 7, 4, 10)
        (4, 8)
        >>> align_range(9, 10, 4, 10)
        (8, 10)
    """
    if interval == 0 or (first == 0 and last == extent):
        return first, last
    new_first = (first // interval) * interval
    new_last = min(extent, -(-last // interval) * interval)
    return new_first, new_last

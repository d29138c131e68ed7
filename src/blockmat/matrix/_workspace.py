"""
Access Sessions (Workspaces)

A workspace caches one aligned dense block of a matrix for a single
traversal direction. It is in one of two states:

- empty: nothing cached yet (or cleared)
- populated: a ``CachedBlock`` holding the primary-axis block range, the
  secondary-axis range and the column-major snapshot of that window

A refresh replaces the whole ``CachedBlock`` at once; there is no way to
update one of its parts. Workspaces are never shared between directions
or between matrices, and one workspace should be driven by one thread.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

__all__ = ['CachedBlock', 'Workspace']


@dataclass(frozen=True)
class CachedBlock:
    """One aligned window of a matrix.

    Attributes:
        primary: ``[start, end)`` along the traversed axis
        secondary: ``[start, end)`` along the orthogonal axis
        snapshot: Read-only column-major array of the window, shaped
            (rows, cols) in matrix orientation
    """
    primary: Tuple[int, int]
    secondary: Tuple[int, int]
    snapshot: np.ndarray

    def covers(self, i: int, first: int, last: int) -> bool:
        """Whether a request can be served from this block."""
        return (self.primary[0] <= i < self.primary[1]
                and first >= self.secondary[0]
                and last <= self.secondary[1])


class Workspace:
    """
    Per-traversal block cache.

    Create through ``UnknownMatrix.new_workspace``; a workspace created for
    rows can only serve row requests, and vice versa.

    Attributes:
        byrow: Traversal direction, fixed at creation
        hits: Requests served from the cached block
        misses: Requests that refreshed the cached block
    """

    __slots__ = ('_byrow', '_owner', '_block', 'hits', 'misses')

    def __init__(self, byrow: bool = True, owner: Any = None):
        self._byrow = bool(byrow)
        self._owner = owner
        self._block: Optional[CachedBlock] = None
        self.hits = 0
        self.misses = 0

    @property
    def byrow(self) -> bool:
        return self._byrow

    @property
    def owner(self) -> Any:
        return self._owner

    @property
    def block(self) -> Optional[CachedBlock]:
        return self._block

    @property
    def is_empty(self) -> bool:
        return self._block is None

    def covers(self, i: int, first: int, last: int) -> bool:
        return self._block is not None and self._block.covers(i, first, last)

    def populate(self, block: CachedBlock) -> None:
        """Replace the cached block, dropping the previous snapshot."""
        block.snapshot.flags.writeable = False
        self._block = block

    def clear(self) -> None:
        """Return to the empty state."""
        self._block = None

    def __repr__(self) -> str:
        direction = 'row' if self._byrow else 'column'
        if self._block is None:
            return f"Workspace({direction}, empty)"
        return (f"Workspace({direction}, primary={self._block.primary}, "
                f"secondary={self._block.secondary}, hits={self.hits}, misses={self.misses})")

"""
Geometry Probe

Queries a backend once for everything the extraction engine needs:
shape, element type, sparsity, chunk geometry and default block spacings.
The result is an immutable ``MatrixGeometry``; nothing is re-queried
afterwards. Any malformed answer aborts construction with a
``ProbeError`` subclass.
"""

import logging
from dataclasses import dataclass
from numbers import Integral
from typing import Any, Optional, Tuple

import numpy as np

from .._errors import BlockError, ChunkError, ElementTypeError, ShapeError, SparsityError
from ._backend import Backend
from ._dtypes import ElementType

__all__ = ['MatrixGeometry', 'probe_geometry']

logger = logging.getLogger("blockmat.probe")


@dataclass(frozen=True)
class MatrixGeometry:
    """Immutable geometry of a backend.

    Attributes:
        nrow, ncol: Matrix dimensions
        element_type: Resolved element type
        sparse: Whether the backend stores the array sparsely
        chunks: Native (rows_per_chunk, cols_per_chunk), or None
        row_block: Row spacing of the row-wise block grid
        col_block: Column spacing of the column-wise block grid
    """
    nrow: int
    ncol: int
    element_type: ElementType
    sparse: bool
    chunks: Optional[Tuple[int, int]]
    row_block: int
    col_block: int

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.nrow, self.ncol)

    def extent(self, byrow: bool) -> int:
        """Length of the primary axis for a traversal direction."""
        return self.nrow if byrow else self.ncol

    def block_spacing(self, byrow: bool) -> int:
        """Primary-axis block spacing for a traversal direction."""
        return self.row_block if byrow else self.col_block

    def chunk_spacing(self, byrow: bool) -> int:
        """Secondary-axis chunk spacing for a traversal direction (0 if unchunked)."""
        if self.chunks is None:
            return 0
        return self.chunks[1] if byrow else self.chunks[0]


# =============================================================================
# Validation Helpers
# =============================================================================

def _is_count(value: Any) -> bool:
    return isinstance(value, (Integral, np.integer)) and not isinstance(value, (bool, np.bool_)) \
        and value >= 0


def _count_pair(value: Any) -> Optional[Tuple[int, int]]:
    """Return value as a pair of non-negative ints, or None if it is not one."""
    if isinstance(value, (str, bytes)):
        return None
    try:
        items = tuple(value)
    except TypeError:
        return None
    if len(items) != 2 or not all(_is_count(x) for x in items):
        return None
    return int(items[0]), int(items[1])


def _scalar(value: Any) -> Any:
    """Unwrap a length-1 sequence; anything else that is not scalar becomes None."""
    if isinstance(value, np.ndarray):
        return value.reshape(-1)[0].item() if value.size == 1 else None
    if isinstance(value, (list, tuple)):
        return value[0] if len(value) == 1 else None
    return value


# =============================================================================
# Probe
# =============================================================================

def probe_geometry(backend: Backend) -> MatrixGeometry:
    """
    Discover the geometry of a backend.

    Args:
        backend: Backend to query

    Returns:
        MatrixGeometry

    Raises:
        ShapeError: Shape is not two non-negative integers
        ElementTypeError: Element type is not a single value
        SparsityError: Sparsity is not a single boolean
        ChunkError: Chunk geometry is neither None nor two non-negative integers
        BlockError: A block spacing is not two non-negative integers
    """
    shape = _count_pair(backend.get_shape())
    if shape is None:
        raise ShapeError("shape should contain two non-negative integers")
    nrow, ncol = shape

    tag = _scalar(backend.get_element_type())
    if tag is None:
        raise ElementTypeError("element type should be a single value")
    element_type = ElementType.parse(tag)

    flag = _scalar(backend.get_sparsity())
    if not isinstance(flag, (bool, np.bool_)):
        raise SparsityError("sparsity should be a single boolean")
    sparse = bool(flag)

    raw_chunks = backend.get_chunk_geometry()
    chunks = None
    if raw_chunks is not None:
        chunks = _count_pair(raw_chunks)
        if chunks is None:
            raise ChunkError("chunk geometry should contain two non-negative integers")

    row_grid = _count_pair(backend.get_block_spacing(True))
    if row_grid is None:
        raise BlockError("row-wise block spacing should contain two non-negative integers")
    col_grid = _count_pair(backend.get_block_spacing(False))
    if col_grid is None:
        raise BlockError("column-wise block spacing should contain two non-negative integers")

    geometry = MatrixGeometry(
        nrow=nrow,
        ncol=ncol,
        element_type=element_type,
        sparse=sparse,
        chunks=chunks,
        row_block=row_grid[0],
        col_block=col_grid[1],
    )
    logger.info(
        "probed %dx%d %s backend (sparse=%s, chunks=%s, blocks=%d/%d)",
        nrow, ncol, element_type, sparse, chunks, geometry.row_block, geometry.col_block,
    )
    return geometry

"""
Extraction Dispatcher

Two ways of pulling one row or column slice out of a backend:

- ``buffered_dense``: serves the request from a workspace. On a miss the
  primary axis is widened to its block grid, the secondary axis to its
  chunk grid, and the aligned window is fetched with one backend call.
- ``quick_dense``: one exact, unaligned backend call per request.

``quick_sparse`` is the uncached sparse counterpart of ``quick_dense``.

All functions take ``byrow`` to pick the primary axis: rows when True,
columns when False. Backend blocks are always (rows, cols) shaped.
"""

import logging
from typing import Any, Tuple

import numpy as np
import scipy.sparse as sp

from .._errors import ExtractionError
from ._align import align_range
from ._backend import Backend, index_selector
from ._dtypes import coerce_block
from ._probe import MatrixGeometry
from ._workspace import CachedBlock, Workspace

__all__ = ['quick_dense', 'buffered_dense', 'quick_sparse']

logger = logging.getLogger("blockmat.extract")


def _orient(byrow: bool, primary: Any, secondary: Any) -> Tuple[Any, Any]:
    """Order a (primary, secondary) pair as (rows, cols)."""
    return (primary, secondary) if byrow else (secondary, primary)


def _check_shape(block: Any, expected: Tuple[int, int]) -> None:
    shape = tuple(np.shape(block)) if not sp.issparse(block) else block.shape
    if shape != expected:
        raise ExtractionError(f"backend returned block of shape {shape}, expected {expected}")


# =============================================================================
# Quick Path
# =============================================================================

def quick_dense(backend: Backend, geometry: MatrixGeometry, byrow: bool,
                i: int, first: int, last: int, dtype: np.dtype,
                validate: bool = True) -> np.ndarray:
    """Extract ``[first, last)`` of row/column ``i`` with one exact backend call.

    Returns:
        1-D array of length ``last - first``
    """
    secondary_extent = geometry.extent(not byrow)
    primary = np.array([i + 1], dtype=np.int64)
    secondary = index_selector(first, last, secondary_extent)

    rows, cols = _orient(byrow, primary, secondary)
    block = backend.extract_dense(rows, cols)
    if validate:
        _check_shape(block, _orient(byrow, 1, last - first))

    return coerce_block(block, geometry.element_type, dtype).reshape(-1, order='F')


# =============================================================================
# Buffered Path
# =============================================================================

def _refresh(backend: Backend, geometry: MatrixGeometry, work: Workspace,
             i: int, first: int, last: int, dtype: np.dtype, validate: bool) -> None:
    byrow = work.byrow
    primary_extent = geometry.extent(byrow)
    secondary_extent = geometry.extent(not byrow)

    primary = align_range(i, i + 1, geometry.block_spacing(byrow), primary_extent)
    secondary = align_range(first, last, geometry.chunk_spacing(byrow), secondary_extent)

    rows, cols = _orient(
        byrow,
        index_selector(primary[0], primary[1], primary_extent),
        index_selector(secondary[0], secondary[1], secondary_extent),
    )
    logger.debug(
        "refreshing %s workspace: primary=%s secondary=%s",
        'row' if byrow else 'column', primary, secondary,
    )
    block = backend.extract_dense(rows, cols)
    shape = _orient(byrow, primary[1] - primary[0], secondary[1] - secondary[0])
    if validate:
        _check_shape(block, shape)

    # Column-major values in a flat block still fill the window.
    snapshot = coerce_block(block, geometry.element_type, dtype).reshape(shape, order='F')
    work.populate(CachedBlock(primary, secondary, snapshot))


def buffered_dense(backend: Backend, geometry: MatrixGeometry, work: Workspace,
                   i: int, first: int, last: int, dtype: np.dtype,
                   validate: bool = True) -> np.ndarray:
    """Serve ``[first, last)`` of row/column ``i`` from a workspace.

    The workspace's direction selects rows or columns. The caller is
    responsible for checking that direction against the request.

    Returns:
        Read-only 1-D view into the workspace snapshot
    """
    if work.covers(i, first, last):
        work.hits += 1
    else:
        _refresh(backend, geometry, work, i, first, last, dtype, validate)
        work.misses += 1

    block = work.block
    offset = i - block.primary[0]
    start = first - block.secondary[0]
    end = last - block.secondary[0]
    if work.byrow:
        return block.snapshot[offset, start:end]
    return block.snapshot[start:end, offset]


# =============================================================================
# Sparse Passthrough
# =============================================================================

def quick_sparse(backend: Backend, geometry: MatrixGeometry, byrow: bool,
                 i: int, first: int, last: int, dtype: np.dtype,
                 validate: bool = True) -> Tuple[np.ndarray, np.ndarray]:
    """Extract the non-zeros of ``[first, last)`` in row/column ``i``.

    Returns:
        Tuple of (values, indices); indices are absolute positions along
        the secondary axis, in increasing order
    """
    secondary_extent = geometry.extent(not byrow)
    primary = np.array([i + 1], dtype=np.int64)
    secondary = index_selector(first, last, secondary_extent)

    rows, cols = _orient(byrow, primary, secondary)
    block = backend.extract_sparse(rows, cols)
    if validate:
        _check_shape(block, _orient(byrow, 1, last - first))

    coo = sp.coo_matrix(block)
    coo.sum_duplicates()
    positions = coo.col if byrow else coo.row
    order = np.argsort(positions, kind='stable')

    storage = geometry.element_type.storage_dtype
    values = np.asarray(coo.data[order]).astype(storage).astype(dtype)
    indices = positions[order].astype(np.int64) + first
    return values, indices

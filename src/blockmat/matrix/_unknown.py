"""
Unknown Matrix

Dense row/column access over a backend that only supports bulk
rectangular extraction.

Access Patterns:

1. Uncached: ``mat.row(i)`` issues one exact backend call per request.
2. Cached: ``mat.row(i, work=mat.new_workspace(row=True))`` pulls a
   block-aligned window once and serves neighbouring rows from it until
   a request falls outside the window.

Example:

    >>> mat = UnknownMatrix(ArrayBackend(data, chunks=(100, 100)))
    >>> work = mat.new_workspace(row=True)
    >>> for r in range(mat.nrow):
    ...     values = mat.row(r, buffer, work=work)

Threading:
    Geometry is immutable, so one matrix can be read from many threads as
    long as each thread uses its own workspace. If the backend is not
    thread-safe, wrap it in ``SerializedBackend``.
"""

from typing import Any, Iterator, NamedTuple, Optional, Tuple

import numpy as np

from .._config import config
from .._errors import (
    BufferSizeMismatch,
    DirectionMismatch,
    ForeignWorkspace,
    check_index,
    check_range,
)
from ._backend import Backend
from ._dtypes import ElementType
from ._extract import buffered_dense, quick_dense, quick_sparse
from ._probe import MatrixGeometry, probe_geometry
from ._workspace import Workspace

__all__ = ['UnknownMatrix', 'SparseRange']


class SparseRange(NamedTuple):
    """Non-zeros of one row or column slice."""
    number: int
    value: np.ndarray
    index: np.ndarray


class UnknownMatrix:
    """
    Matrix view over an opaque backend.

    The backend's geometry is probed once, at construction; a backend that
    answers any geometry query with malformed output cannot be wrapped.

    Args:
        backend: Backend implementing the ``Backend`` contract
        dtype: Output dtype of extracted slices (config default if None)

    Raises:
        ProbeError: A geometry query returned malformed output
    """

    __slots__ = ('_backend', '_geometry', '_dtype', '_validate')

    def __init__(self, backend: Backend, dtype: Any = None):
        self._backend = backend
        self._geometry = probe_geometry(backend)
        self._dtype = config.dtype if dtype is None else np.dtype(dtype)
        self._validate = config.extract.validate_blocks

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def geometry(self) -> MatrixGeometry:
        return self._geometry

    @property
    def nrow(self) -> int:
        return self._geometry.nrow

    @property
    def ncol(self) -> int:
        return self._geometry.ncol

    @property
    def shape(self) -> Tuple[int, int]:
        return self._geometry.shape

    @property
    def sparse(self) -> bool:
        return self._geometry.sparse

    @property
    def prefer_rows(self) -> bool:
        # Backend blocks are always column-major.
        return False

    @property
    def element_type(self) -> ElementType:
        return self._geometry.element_type

    @property
    def chunk_shape(self) -> Optional[Tuple[int, int]]:
        return self._geometry.chunks

    @property
    def block_spacing(self) -> Tuple[int, int]:
        """(row_block, col_block) used to align cached windows."""
        return (self._geometry.row_block, self._geometry.col_block)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    # =========================================================================
    # Workspaces
    # =========================================================================

    def new_workspace(self, row: bool = True) -> Workspace:
        """Create a workspace for row-wise (``row=True``) or column-wise access."""
        return Workspace(row, owner=self)

    # =========================================================================
    # Dense Access
    # =========================================================================

    def row(self, r: int, buffer: Optional[np.ndarray] = None, first: int = 0,
            last: Optional[int] = None, work: Optional[Workspace] = None) -> np.ndarray:
        """Extract columns ``[first, last)`` of row ``r``.

        Args:
            r: Row index
            buffer: Output array of at least ``last - first`` elements
                (allocated in ``self.dtype`` if None)
            first: First column
            last: One past the last column (``ncol`` if None)
            work: Row workspace from ``new_workspace(row=True)``

        Returns:
            ``buffer``, with its first ``last - first`` elements filled
        """
        return self._fetch(True, r, buffer, first, last, work)

    def column(self, c: int, buffer: Optional[np.ndarray] = None, first: int = 0,
               last: Optional[int] = None, work: Optional[Workspace] = None) -> np.ndarray:
        """Extract rows ``[first, last)`` of column ``c``.

        See ``row`` for the arguments.
        """
        return self._fetch(False, c, buffer, first, last, work)

    def read_row(self, i: int, first: int, last: int, buffer: Optional[np.ndarray] = None,
                 work: Optional[Workspace] = None) -> np.ndarray:
        return self._fetch(True, i, buffer, first, last, work)

    def read_column(self, i: int, first: int, last: int, buffer: Optional[np.ndarray] = None,
                    work: Optional[Workspace] = None) -> np.ndarray:
        return self._fetch(False, i, buffer, first, last, work)

    def _fetch(self, byrow: bool, i: int, buffer: Optional[np.ndarray], first: int,
               last: Optional[int], work: Optional[Workspace]) -> np.ndarray:
        geometry = self._geometry
        if last is None:
            last = geometry.extent(not byrow)

        check_index(i, geometry.extent(byrow), 'row' if byrow else 'column')
        check_range(first, last, geometry.extent(not byrow), 'column' if byrow else 'row')

        length = last - first
        if buffer is None:
            buffer = np.empty(length, dtype=self._dtype)
        elif len(buffer) < length:
            raise BufferSizeMismatch(
                f"buffer holds {len(buffer)} elements, {length} requested"
            )

        if work is not None:
            if work.owner is not self:
                raise ForeignWorkspace()
            if work.byrow != byrow:
                raise DirectionMismatch(
                    f"workspace should have been created with row={byrow}"
                )

        if length == 0:
            return buffer

        if work is None:
            values = quick_dense(self._backend, geometry, byrow, i, first, last,
                                 self._dtype, self._validate)
        else:
            values = buffered_dense(self._backend, geometry, work, i, first, last,
                                    self._dtype, self._validate)
        buffer[:length] = values
        return buffer

    # =========================================================================
    # Sparse Access
    # =========================================================================

    def sparse_row(self, r: int, first: int = 0, last: Optional[int] = None) -> SparseRange:
        """Non-zeros of columns ``[first, last)`` in row ``r`` (uncached)."""
        return self._fetch_sparse(True, r, first, last)

    def sparse_column(self, c: int, first: int = 0, last: Optional[int] = None) -> SparseRange:
        """Non-zeros of rows ``[first, last)`` in column ``c`` (uncached)."""
        return self._fetch_sparse(False, c, first, last)

    def _fetch_sparse(self, byrow: bool, i: int, first: int,
                      last: Optional[int]) -> SparseRange:
        geometry = self._geometry
        if last is None:
            last = geometry.extent(not byrow)
        check_index(i, geometry.extent(byrow), 'row' if byrow else 'column')
        check_range(first, last, geometry.extent(not byrow), 'column' if byrow else 'row')

        if first == last:
            return SparseRange(i, np.empty(0, dtype=self._dtype), np.empty(0, dtype=np.int64))
        values, indices = quick_sparse(self._backend, geometry, byrow, i, first, last,
                                       self._dtype, self._validate)
        return SparseRange(i, values, indices)

    # =========================================================================
    # Traversal
    # =========================================================================

    def iter_rows(self, first: int = 0, last: Optional[int] = None) -> Iterator[np.ndarray]:
        """Yield columns ``[first, last)`` of every row, through one workspace."""
        work = self.new_workspace(row=True)
        for r in range(self.nrow):
            yield self.row(r, first=first, last=last, work=work)

    def iter_columns(self, first: int = 0, last: Optional[int] = None) -> Iterator[np.ndarray]:
        """Yield rows ``[first, last)`` of every column, through one workspace."""
        work = self.new_workspace(row=False)
        for c in range(self.ncol):
            yield self.column(c, first=first, last=last, work=work)

    def __repr__(self) -> str:
        return (f"UnknownMatrix(shape={self.shape}, type={self.element_type}, "
                f"sparse={self.sparse}, chunks={self.chunk_shape}, "
                f"blocks={self.block_spacing})")

"""
Backend Contract and Reference Backends

A backend is the external array behind an ``UnknownMatrix``. It can only
be queried through geometry metadata and bulk "extract a rectangular
region" calls, each of which may be expensive (crossing into another
runtime, reading from disk, triggering lazy computation).

Use Cases:

1. Out-of-core arrays: HDF5/Zarr datasets read block by block
2. Delayed arrays: computation realised only for the requested region
3. Remote arrays: regions fetched from a service

Example:

    import h5py

    class HDF5Backend(Backend):
        '''Dense 2-D dataset in an HDF5 file.'''

        def __init__(self, filepath, dataset_name):
            self.f = h5py.File(filepath, 'r')
            self.ds = self.f[dataset_name]

        def get_shape(self):
            return self.ds.shape

        def get_element_type(self):
            return element_type_of(self.ds.dtype)

        def get_sparsity(self):
            return False

        def get_chunk_geometry(self):
            return self.ds.chunks

        def get_block_spacing(self, byrow):
            nrow, ncol = self.ds.shape
            return (self.ds.chunks[0], ncol) if byrow else (nrow, self.ds.chunks[1])

        def extract_dense(self, rows, cols):
            nrow, ncol = self.ds.shape
            block = self.ds[to_zero_based(rows, nrow), :]
            return block[:, to_zero_based(cols, ncol)]

    mat = UnknownMatrix(HDF5Backend('data.h5', 'X'))

Selectors:
    Every extraction call receives one selector per axis. ``ALL`` means
    the whole axis; anything else is an ordered ``int64`` array of
    1-based positions. Backends that special-case full-axis reads should
    test ``selector is ALL``.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple, Union

import numpy as np
import scipy.sparse as sp

from .._config import config
from ._dtypes import element_type_of

__all__ = [
    'ALL',
    'Selector',
    'index_selector',
    'selector_length',
    'to_zero_based',
    'Backend',
    'ArrayBackend',
    'SerializedBackend',
]


# =============================================================================
# Selectors
# =============================================================================

class _AllSelector:
    """Sentinel selecting a whole axis."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'ALL'

    def __reduce__(self):
        return 'ALL'


ALL = _AllSelector()

Selector = Union[_AllSelector, np.ndarray]


def index_selector(first: int, last: int, extent: int) -> Selector:
    """Build the selector for ``[first, last)`` on an axis of ``extent``.

    Returns ``ALL`` for a full-axis range, otherwise the 1-based positions
    ``first + 1 .. last``.
    """
    if first == 0 and last == extent:
        return ALL
    return np.arange(first + 1, last + 1, dtype=np.int64)


def selector_length(selector: Selector, extent: int) -> int:
    """Number of positions picked by a selector."""
    if selector is ALL:
        return extent
    return len(selector)


def to_zero_based(selector: Selector, extent: int) -> Union[slice, np.ndarray]:
    """Convert a selector into a numpy indexer.

    Args:
        selector: ``ALL`` or 1-based positions
        extent: Length of the axis

    Returns:
        ``slice(0, extent)`` for ``ALL``, else 0-based ``intp`` positions
    """
    if selector is ALL:
        return slice(0, extent)
    return np.asarray(selector, dtype=np.intp) - 1


# =============================================================================
# Backend Contract
# =============================================================================

class Backend(ABC):
    """
    Capability contract of an external array.

    Subclass this and implement the required methods. Geometry methods are
    called exactly once, when an ``UnknownMatrix`` is built; extraction
    methods are called once per cache refresh (or per uncached request).

    Required Methods to Implement:
        get_shape() -> (rows, cols)
        get_element_type() -> "boolean" | "integer" | anything else
        get_sparsity() -> bool
        get_chunk_geometry() -> None | (rows_per_chunk, cols_per_chunk)
        get_block_spacing(byrow) -> (row_spacing, col_spacing)
        extract_dense(rows, cols) -> 2-D block

    Optional Methods to Override:
        extract_sparse(rows, cols): Sparse block (default densifies)
    """

    @abstractmethod
    def get_shape(self) -> Tuple[int, int]:
        """Return matrix dimensions (rows, cols)."""
        ...

    @abstractmethod
    def get_element_type(self) -> str:
        """Return the element type tag."""
        ...

    @abstractmethod
    def get_sparsity(self) -> bool:
        """Return whether the array is stored sparsely."""
        ...

    @abstractmethod
    def get_chunk_geometry(self) -> Optional[Tuple[int, int]]:
        """Return native chunk dimensions, or None when unchunked."""
        ...

    @abstractmethod
    def get_block_spacing(self, byrow: bool) -> Tuple[int, int]:
        """Return default block spacings for row-wise or column-wise grids.

        Args:
            byrow: True for the row-major grid, False for column-major

        Returns:
            Tuple of (row_spacing, col_spacing)
        """
        ...

    @abstractmethod
    def extract_dense(self, rows: Selector, cols: Selector) -> Any:
        """Extract a dense block.

        Args:
            rows: Row selector
            cols: Column selector

        Returns:
            2-D array-like of shape (len(rows), len(cols))
        """
        ...

    def extract_sparse(self, rows: Selector, cols: Selector) -> sp.spmatrix:
        """Extract a sparse block.

        Default implementation densifies through ``extract_dense``.
        """
        return sp.csc_matrix(np.asarray(self.extract_dense(rows, cols)))


# =============================================================================
# In-Memory Backend
# =============================================================================

class ArrayBackend(Backend):
    """
    Backend over an in-memory numpy array or scipy sparse matrix.

    Block grids are derived from a byte budget: a row-wise block holds as
    many full rows as fit in ``block_size`` bytes, rounded to whole chunks
    when the array is chunked. Column-wise blocks are symmetric.

    Args:
        array: 2-D ``numpy.ndarray`` or ``scipy.sparse`` matrix
        chunks: Optional (rows_per_chunk, cols_per_chunk)
        block_size: Bytes per automatic block (config default if None)
    """

    def __init__(self, array: Any, chunks: Optional[Tuple[int, int]] = None,
                 block_size: Optional[int] = None):
        if sp.issparse(array):
            self._array = sp.csr_matrix(array)
            self._sparse = True
        else:
            self._array = np.asarray(array)
            self._sparse = False
        if self._array.ndim != 2:
            raise ValueError(f"Expected 2-D array, got {self._array.ndim}-D")

        self._chunks = None if chunks is None else (int(chunks[0]), int(chunks[1]))
        self._block_size = config.block_size if block_size is None else int(block_size)

    @property
    def array(self) -> Any:
        return self._array

    def get_shape(self) -> Tuple[int, int]:
        return self._array.shape

    def get_element_type(self) -> str:
        return element_type_of(self._array.dtype)

    def get_sparsity(self) -> bool:
        return self._sparse

    def get_chunk_geometry(self) -> Optional[Tuple[int, int]]:
        return self._chunks

    def get_block_spacing(self, byrow: bool) -> Tuple[int, int]:
        nrow, ncol = self._array.shape
        if byrow:
            span, width = nrow, ncol
            chunk = self._chunks[0] if self._chunks else 0
        else:
            span, width = ncol, nrow
            chunk = self._chunks[1] if self._chunks else 0

        itemsize = self._array.dtype.itemsize
        spacing = max(1, self._block_size // max(1, width * itemsize))
        if chunk:
            spacing = max(chunk, (spacing // chunk) * chunk)
        spacing = min(spacing, span)

        return (spacing, ncol) if byrow else (nrow, spacing)

    def extract_dense(self, rows: Selector, cols: Selector) -> np.ndarray:
        block = self._select(rows, cols)
        if self._sparse:
            return block.toarray()
        return block

    def extract_sparse(self, rows: Selector, cols: Selector) -> sp.spmatrix:
        return sp.csc_matrix(self._select(rows, cols))

    def _select(self, rows: Selector, cols: Selector) -> Any:
        nrow, ncol = self._array.shape
        block = self._array[to_zero_based(rows, nrow), :]
        return block[:, to_zero_based(cols, ncol)]

    def __repr__(self) -> str:
        kind = 'sparse' if self._sparse else 'dense'
        return (f"ArrayBackend(shape={self._array.shape}, {kind}, "
                f"dtype={self._array.dtype}, chunks={self._chunks})")


# =============================================================================
# Serialized Backend
# =============================================================================

class SerializedBackend(Backend):
    """
    Wrap a backend so that every call holds one lock.

    Many runtimes behind a backend only tolerate one caller at a time.
    Sessions on different threads can still share one matrix: only cache
    refreshes and uncached requests reach the backend, and those are
    serialized here, while cache hits never take the lock.

    Args:
        backend: Backend to wrap
        lock: Lock to use (a new ``threading.Lock`` if None)
    """

    def __init__(self, backend: Backend, lock: Optional[Any] = None):
        self._backend = backend
        self._lock = threading.Lock() if lock is None else lock

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def lock(self) -> Any:
        return self._lock

    def get_shape(self) -> Tuple[int, int]:
        with self._lock:
            return self._backend.get_shape()

    def get_element_type(self) -> str:
        with self._lock:
            return self._backend.get_element_type()

    def get_sparsity(self) -> bool:
        with self._lock:
            return self._backend.get_sparsity()

    def get_chunk_geometry(self) -> Optional[Tuple[int, int]]:
        with self._lock:
            return self._backend.get_chunk_geometry()

    def get_block_spacing(self, byrow: bool) -> Tuple[int, int]:
        with self._lock:
            return self._backend.get_block_spacing(byrow)

    def extract_dense(self, rows: Selector, cols: Selector) -> Any:
        with self._lock:
            return self._backend.extract_dense(rows, cols)

    def extract_sparse(self, rows: Selector, cols: Selector) -> sp.spmatrix:
        with self._lock:
            return self._backend.extract_sparse(rows, cols)

"""
blockmat - Block-Cached Matrix Access

Uniform dense row/column access to arrays whose storage lives in an
external backend that can only be queried through bulk rectangular
extraction calls:

- Geometry (shape, type, sparsity, chunks, block grids) probed once
- Requests widened to chunk/block boundaries and cached per workspace
- Uncached single-shot path when no workspace is supplied

Example:
    >>> import numpy as np
    >>> from blockmat import UnknownMatrix, ArrayBackend
    >>>
    >>> mat = UnknownMatrix(ArrayBackend(np.arange(50.0).reshape(10, 5)))
    >>> work = mat.new_workspace(row=True)
    >>> mat.row(3, work=work)
    array([15., 16., 17., 18., 19.])
"""

__version__ = '0.1.0'

from . import matrix
from ._config import (
    ExtractConfig,
    GridConfig,
    BlockmatConfig,
    config,
    get_config,
    set_dtype,
    set_block_size,
)
from ._errors import (
    BlockmatError,
    ProbeError,
    ShapeError,
    ElementTypeError,
    SparsityError,
    ChunkError,
    BlockError,
    DirectionMismatch,
    OutOfRange,
    BufferSizeMismatch,
    ForeignWorkspace,
    ExtractionError,
)
from .matrix import (
    ALL,
    Backend,
    ArrayBackend,
    SerializedBackend,
    ElementType,
    MatrixGeometry,
    Workspace,
    UnknownMatrix,
    SparseRange,
    align_range,
)

__all__ = [
    # Version
    '__version__',

    # Modules
    'matrix',

    # Configuration
    'ExtractConfig',
    'GridConfig',
    'BlockmatConfig',
    'config',
    'get_config',
    'set_dtype',
    'set_block_size',

    # Errors
    'BlockmatError',
    'ProbeError',
    'ShapeError',
    'ElementTypeError',
    'SparsityError',
    'ChunkError',
    'BlockError',
    'DirectionMismatch',
    'OutOfRange',
    'BufferSizeMismatch',
    'ForeignWorkspace',
    'ExtractionError',

    # Matrix
    'ALL',
    'Backend',
    'ArrayBackend',
    'SerializedBackend',
    'ElementType',
    'MatrixGeometry',
    'Workspace',
    'UnknownMatrix',
    'SparseRange',
    'align_range',
]

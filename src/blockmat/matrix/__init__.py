"""blockmat Matrix Module.

Block-caching dense access to arrays that live behind an expensive,
bulk-extraction-only backend.

Components:

    Backend (ABC)                 # Capability contract of the external array
    ├── ArrayBackend              # In-memory numpy / scipy.sparse backend
    └── SerializedBackend         # Lock around every call of another backend

    UnknownMatrix                 # Public matrix view over one backend
    ├── MatrixGeometry            # Probed once at construction
    └── Workspace                 # Per-traversal cache of one aligned block

Quick Start:
    >>> from blockmat.matrix import UnknownMatrix, ArrayBackend
    >>>
    >>> mat = UnknownMatrix(ArrayBackend(data, chunks=(64, 64)))
    >>> work = mat.new_workspace(row=True)
    >>> first_row = mat.row(0, work=work)   # one backend call
    >>> second_row = mat.row(1, work=work)  # served from the workspace
"""

# =============================================================================
# Backends and Selectors
# =============================================================================
from ._backend import (
    ALL,
    Selector,
    index_selector,
    selector_length,
    to_zero_based,
    Backend,
    ArrayBackend,
    SerializedBackend,
)

# =============================================================================
# Element Types
# =============================================================================
from ._dtypes import ElementType, coerce_block, element_type_of

# =============================================================================
# Engine
# =============================================================================
from ._align import align_range
from ._probe import MatrixGeometry, probe_geometry
from ._workspace import CachedBlock, Workspace
from ._unknown import UnknownMatrix, SparseRange

__all__ = [
    # Backends
    'ALL',
    'Selector',
    'index_selector',
    'selector_length',
    'to_zero_based',
    'Backend',
    'ArrayBackend',
    'SerializedBackend',
    # Element types
    'ElementType',
    'coerce_block',
    'element_type_of',
    # Engine
    'align_range',
    'MatrixGeometry',
    'probe_geometry',
    'CachedBlock',
    'Workspace',
    'UnknownMatrix',
    'SparseRange',
]

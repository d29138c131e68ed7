"""
Pytest configuration and shared fixtures for blockmat tests.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from blockmat import config
from blockmat.matrix import Backend, UnknownMatrix, to_zero_based


_MISSING = object()


# =============================================================================
# Recording Backend
# =============================================================================

class StubBackend(Backend):
    """In-memory backend with scripted geometry that records every extraction.

    Geometry answers default to the wrapped array; any of them can be
    replaced with a raw value (malformed or not) through keyword
    overrides: shape, element_type, sparsity, chunk_geometry, row_grid,
    col_grid.
    """

    def __init__(self, array, chunks=None, row_block=None, col_block=None, **overrides):
        self.array = np.asarray(array)
        self.chunks = chunks
        self.row_block = row_block
        self.col_block = col_block
        self.overrides = overrides
        self.calls = []
        self.sparse_calls = []

    def _answer(self, key, default):
        value = self.overrides.get(key, _MISSING)
        return default if value is _MISSING else value

    def get_shape(self):
        return self._answer('shape', self.array.shape)

    def get_element_type(self):
        kind = self.array.dtype.kind
        default = 'logical' if kind == 'b' else 'integer' if kind in 'iu' else 'double'
        return self._answer('element_type', default)

    def get_sparsity(self):
        return self._answer('sparsity', False)

    def get_chunk_geometry(self):
        return self._answer('chunk_geometry', self.chunks)

    def get_block_spacing(self, byrow):
        nrow, ncol = self.array.shape
        if byrow:
            block = nrow if self.row_block is None else self.row_block
            return self._answer('row_grid', (block, ncol))
        block = ncol if self.col_block is None else self.col_block
        return self._answer('col_grid', (nrow, block))

    def extract_dense(self, rows, cols):
        self.calls.append((rows, cols))
        nrow, ncol = self.array.shape
        return self.array[to_zero_based(rows, nrow), :][:, to_zero_based(cols, ncol)]

    def extract_sparse(self, rows, cols):
        self.sparse_calls.append((rows, cols))
        return super().extract_sparse(rows, cols)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_config():
    """Restore global configuration after every test."""
    yield
    config.reset()


@pytest.fixture
def dense_10x5():
    """10x5 float matrix with value 10*r + c at (r, c)."""
    return (10.0 * np.arange(10)[:, None] + np.arange(5)[None, :])


@pytest.fixture
def block4_backend(dense_10x5):
    """Unchunked 10x5 backend with a row block spacing of 4."""
    return StubBackend(dense_10x5, row_block=4, col_block=2)


@pytest.fixture
def block4_matrix(block4_backend):
    return UnknownMatrix(block4_backend)


@pytest.fixture
def chunked_backend():
    """10x6 backend with (2, 3) chunks, row blocks of 4 and column blocks of 2."""
    data = np.arange(60, dtype=np.float64).reshape(10, 6)
    return StubBackend(data, chunks=(2, 3), row_block=4, col_block=2)


@pytest.fixture
def chunked_matrix(chunked_backend):
    return UnknownMatrix(chunked_backend)


@pytest.fixture
def random_dense():
    """Random 37x23 matrix, sized so that blocks and chunks do not divide it."""
    rng = np.random.default_rng(42)
    return rng.standard_normal((37, 23))


# =============================================================================
# Helper Functions
# =============================================================================

def selector_positions(selector, extent):
    """0-based positions of a selector, for asserting on recorded calls."""
    return np.arange(extent)[to_zero_based(selector, extent)].tolist()

"""Tests for uncached sparse row/column access."""

import pytest
import numpy as np
import scipy.sparse as sp

from blockmat import OutOfRange, UnknownMatrix
from blockmat.matrix import ALL, ArrayBackend, SparseRange

from conftest import StubBackend


@pytest.fixture
def sparse_data():
    return np.array([
        [0.0, 1.0, 0.0, 2.0],
        [0.0, 0.0, 0.0, 0.0],
        [3.0, 0.0, 4.0, 0.0],
    ])


class TestSparseRows:
    """Test sparse_row over dense and sparse backends."""

    def test_full_row(self, sparse_data):
        mat = UnknownMatrix(ArrayBackend(sp.csr_matrix(sparse_data)))
        result = mat.sparse_row(0)

        assert isinstance(result, SparseRange)
        assert result.number == 0
        np.testing.assert_array_equal(result.value, [1.0, 2.0])
        np.testing.assert_array_equal(result.index, [1, 3])

    def test_indices_are_absolute(self, sparse_data):
        mat = UnknownMatrix(ArrayBackend(sparse_data))
        result = mat.sparse_row(2, 1, 4)

        np.testing.assert_array_equal(result.value, [4.0])
        np.testing.assert_array_equal(result.index, [2])

    def test_empty_row(self, sparse_data):
        mat = UnknownMatrix(ArrayBackend(sp.csr_matrix(sparse_data)))
        result = mat.sparse_row(1)
        assert len(result.value) == 0
        assert len(result.index) == 0

    def test_default_densifying_backend(self, sparse_data):
        backend = StubBackend(sparse_data)
        mat = UnknownMatrix(backend)
        result = mat.sparse_row(2)

        np.testing.assert_array_equal(result.value, [3.0, 4.0])
        np.testing.assert_array_equal(result.index, [0, 2])
        rows, cols = backend.sparse_calls[0]
        assert rows.tolist() == [3]
        assert cols is ALL


class TestSparseColumns:
    """Test sparse_column."""

    def test_column(self, sparse_data):
        mat = UnknownMatrix(ArrayBackend(sp.csr_matrix(sparse_data)))
        result = mat.sparse_column(0)

        np.testing.assert_array_equal(result.value, [3.0])
        np.testing.assert_array_equal(result.index, [2])

    def test_column_sub_range(self, sparse_data):
        mat = UnknownMatrix(ArrayBackend(sparse_data))
        result = mat.sparse_column(3, 0, 2)

        np.testing.assert_array_equal(result.value, [2.0])
        np.testing.assert_array_equal(result.index, [0])

    def test_boolean_values(self):
        data = np.array([[True, False], [True, True]])
        mat = UnknownMatrix(ArrayBackend(data))
        result = mat.sparse_column(0)

        assert result.value.dtype == np.float64
        np.testing.assert_array_equal(result.value, [1.0, 1.0])
        np.testing.assert_array_equal(result.index, [0, 1])


class TestSparseErrors:
    """Test argument checks."""

    def test_out_of_range(self, sparse_data):
        mat = UnknownMatrix(ArrayBackend(sparse_data))
        with pytest.raises(OutOfRange):
            mat.sparse_row(3)
        with pytest.raises(OutOfRange):
            mat.sparse_column(0, 2, 5)

    def test_empty_range_skips_backend(self, sparse_data):
        backend = StubBackend(sparse_data)
        mat = UnknownMatrix(backend)
        result = mat.sparse_row(0, 2, 2)

        assert len(result.value) == 0
        assert backend.sparse_calls == []

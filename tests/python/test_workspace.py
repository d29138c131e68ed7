"""
Tests for workspace state handling.
"""

import pytest
import numpy as np

from blockmat.matrix import CachedBlock, Workspace


def make_block():
    snapshot = np.asfortranarray(np.arange(12.0).reshape(4, 3))
    return CachedBlock(primary=(4, 8), secondary=(0, 3), snapshot=snapshot)


class TestCachedBlock:
    """Test window coverage."""

    def test_covers_inside(self):
        block = make_block()
        assert block.covers(4, 0, 3)
        assert block.covers(7, 1, 2)

    def test_primary_outside(self):
        block = make_block()
        assert not block.covers(3, 0, 3)
        assert not block.covers(8, 0, 3)

    def test_secondary_outside(self):
        block = make_block()
        assert not block.covers(5, 0, 4)

    def test_frozen(self):
        block = make_block()
        with pytest.raises(AttributeError):
            block.primary = (0, 4)


class TestWorkspace:
    """Test empty/populated transitions."""

    def test_starts_empty(self):
        work = Workspace(byrow=True)
        assert work.is_empty
        assert work.block is None
        assert not work.covers(0, 0, 0)
        assert work.hits == 0 and work.misses == 0

    def test_direction_fixed(self):
        assert Workspace(byrow=False).byrow is False
        with pytest.raises(AttributeError):
            Workspace().byrow = False

    def test_populate(self):
        work = Workspace()
        block = make_block()
        work.populate(block)

        assert not work.is_empty
        assert work.block is block
        assert work.covers(5, 1, 3)

    def test_snapshot_read_only(self):
        work = Workspace()
        work.populate(make_block())
        with pytest.raises(ValueError):
            work.block.snapshot[0, 0] = 1.0

    def test_populate_replaces_wholesale(self):
        work = Workspace()
        work.populate(make_block())
        replacement = CachedBlock((0, 4), (1, 2), np.zeros((4, 1), order='F'))
        work.populate(replacement)

        assert work.block is replacement
        assert not work.covers(5, 1, 2)

    def test_clear(self):
        work = Workspace()
        work.populate(make_block())
        work.clear()
        assert work.is_empty

    def test_repr(self):
        work = Workspace(byrow=False)
        assert 'column' in repr(work)
        assert 'empty' in repr(work)
        work.populate(make_block())
        assert '(4, 8)' in repr(work)

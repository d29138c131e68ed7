"""
Error handling for blockmat.

Errors fall into two groups:

- Probe errors, raised while an ``UnknownMatrix`` discovers the geometry
  of its backend. They are fatal: no matrix is constructed.
- Request errors, raised by a single row/column request. They leave the
  matrix and any workspace untouched, so the caller may retry.

Exceptions raised inside a backend are never wrapped; they propagate to
the caller unchanged.
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

BLOCKMAT_OK = 0

# General errors (1-9)
BLOCKMAT_ERROR_UNKNOWN = 1

# Probe errors (10-19)
BLOCKMAT_ERROR_SHAPE = 10
BLOCKMAT_ERROR_ELEMENT_TYPE = 11
BLOCKMAT_ERROR_SPARSITY = 12
BLOCKMAT_ERROR_CHUNK = 13
BLOCKMAT_ERROR_BLOCK = 14

# Request errors (20-29)
BLOCKMAT_ERROR_DIRECTION_MISMATCH = 20
BLOCKMAT_ERROR_OUT_OF_RANGE = 21
BLOCKMAT_ERROR_BUFFER_SIZE = 22
BLOCKMAT_ERROR_FOREIGN_WORKSPACE = 23

# Backend errors (30-39)
BLOCKMAT_ERROR_EXTRACTION = 30


_ERROR_MESSAGES = {
    BLOCKMAT_OK: "Success",
    BLOCKMAT_ERROR_UNKNOWN: "Unknown error",
    BLOCKMAT_ERROR_SHAPE: "Invalid backend shape",
    BLOCKMAT_ERROR_ELEMENT_TYPE: "Invalid backend element type",
    BLOCKMAT_ERROR_SPARSITY: "Invalid backend sparsity flag",
    BLOCKMAT_ERROR_CHUNK: "Invalid backend chunk geometry",
    BLOCKMAT_ERROR_BLOCK: "Invalid backend block spacing",
    BLOCKMAT_ERROR_DIRECTION_MISMATCH: "Workspace direction mismatch",
    BLOCKMAT_ERROR_OUT_OF_RANGE: "Index out of range",
    BLOCKMAT_ERROR_BUFFER_SIZE: "Output buffer too small",
    BLOCKMAT_ERROR_FOREIGN_WORKSPACE: "Workspace belongs to another matrix",
    BLOCKMAT_ERROR_EXTRACTION: "Malformed backend extraction",
}


# =============================================================================
# Exception Classes
# =============================================================================

class BlockmatError(Exception):
    """
    Base exception for all blockmat errors.

    Every subclass carries a default ``code``; the message defaults to the
    generic text registered for that code.
    """

    code = BLOCKMAT_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        if code is not None:
            self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(self.code, f"Unknown error (code={self.code})")
        self.message = message
        super().__init__(message)

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "BlockmatError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(msg, code=code)


class ProbeError(BlockmatError):
    """Backend geometry could not be discovered."""


class ShapeError(ProbeError):
    """Backend shape is not a pair of non-negative integers."""
    code = BLOCKMAT_ERROR_SHAPE


class ElementTypeError(ProbeError, TypeError):
    """Backend element type is not a single scalar classification."""
    code = BLOCKMAT_ERROR_ELEMENT_TYPE


class SparsityError(ProbeError):
    """Backend sparsity flag is not exactly one boolean."""
    code = BLOCKMAT_ERROR_SPARSITY


class ChunkError(ProbeError):
    """Backend chunk geometry is malformed."""
    code = BLOCKMAT_ERROR_CHUNK


class BlockError(ProbeError):
    """Backend default block spacing is malformed."""
    code = BLOCKMAT_ERROR_BLOCK


class DirectionMismatch(BlockmatError, ValueError):
    """Workspace traversal direction disagrees with the request."""
    code = BLOCKMAT_ERROR_DIRECTION_MISMATCH


class OutOfRange(BlockmatError, IndexError):
    """Requested index or range lies outside the matrix."""
    code = BLOCKMAT_ERROR_OUT_OF_RANGE


class BufferSizeMismatch(BlockmatError, ValueError):
    """Caller-supplied output buffer cannot hold the requested slice."""
    code = BLOCKMAT_ERROR_BUFFER_SIZE


class ForeignWorkspace(BlockmatError, ValueError):
    """Workspace was created by a different matrix."""
    code = BLOCKMAT_ERROR_FOREIGN_WORKSPACE


class ExtractionError(BlockmatError):
    """Backend returned a block that does not match the request."""
    code = BLOCKMAT_ERROR_EXTRACTION


# =============================================================================
# Checking Functions
# =============================================================================

def check_range(first: int, last: int, extent: int, axis: str) -> None:
    """
    Check that ``[first, last)`` is a valid range over an axis.

    Raises:
        OutOfRange: If the range is reversed, negative or exceeds ``extent``
    """
    if first < 0 or first > last:
        raise OutOfRange(f"invalid {axis} range [{first}, {last})")
    if last > extent:
        raise OutOfRange(f"{axis} range [{first}, {last}) exceeds extent {extent}")


def check_index(i: int, extent: int, axis: str) -> None:
    """
    Check that ``i`` indexes an axis of length ``extent``.

    Raises:
        OutOfRange: If ``i`` is negative or not below ``extent``
    """
    if i < 0 or i >= extent:
        raise OutOfRange(f"{axis} index {i} out of range for extent {extent}")


__all__ = [
    "BLOCKMAT_OK",
    "BlockmatError",
    "ProbeError",
    "ShapeError",
    "ElementTypeError",
    "SparsityError",
    "ChunkError",
    "BlockError",
    "DirectionMismatch",
    "OutOfRange",
    "BufferSizeMismatch",
    "ForeignWorkspace",
    "ExtractionError",
    "check_range",
    "check_index",
]

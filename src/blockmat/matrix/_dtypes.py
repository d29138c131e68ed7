"""
Element Type Definitions

Backends classify their elements as boolean, integer or anything else.
The classification is resolved once per matrix into an ``ElementType``,
which also selects how extracted blocks are coerced into numbers.
"""

import logging
from enum import Enum
from typing import Any

import numpy as np
import scipy.sparse as sp

__all__ = ['ElementType', 'coerce_block', 'element_type_of']

logger = logging.getLogger("blockmat.probe")


class ElementType(Enum):
    """
    Element classification reported by a backend.

    BOOLEAN and INTEGER blocks are read through ``int64`` (so booleans
    become 0/1), FLOAT blocks through ``float64``.

    Example:
        >>> ElementType.parse("logical")
        ElementType.BOOLEAN
        >>> ElementType.parse("double")
        ElementType.FLOAT
    """

    BOOLEAN = 'boolean'
    INTEGER = 'integer'
    FLOAT = 'float'

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"ElementType.{self.name}"

    @property
    def storage_dtype(self) -> np.dtype:
        """Intermediate dtype blocks pass through before the output dtype."""
        if self is ElementType.FLOAT:
            return np.dtype(np.float64)
        return np.dtype(np.int64)

    @classmethod
    def parse(cls, tag: Any) -> 'ElementType':
        """Map a backend type tag onto an element type.

        Unrecognised tags, including non-string scalars, collapse to FLOAT.
        """
        if isinstance(tag, ElementType):
            return tag
        if tag in ('boolean', 'logical', 'bool'):
            return cls.BOOLEAN
        if tag == 'integer':
            return cls.INTEGER
        if tag not in ('float', 'double', 'numeric', 'other'):
            logger.debug("element type %r treated as floating point", tag)
        return cls.FLOAT


def element_type_of(dtype: Any) -> str:
    """Classify a numpy dtype as a backend type tag."""
    kind = np.dtype(dtype).kind
    if kind == 'b':
        return 'boolean'
    if kind in ('i', 'u'):
        return 'integer'
    return 'double'


def coerce_block(block: Any, element_type: ElementType, dtype: Any) -> np.ndarray:
    """
    Coerce a backend block into a dense column-major array.

    Args:
        block: Array-like or scipy sparse block from a backend
        element_type: Element type of the backend
        dtype: Output dtype

    Returns:
        New Fortran-ordered ``numpy`` array of ``dtype``, never sharing
        memory with ``block``
    """
    if sp.issparse(block):
        block = block.toarray()
    values = np.asarray(block).astype(element_type.storage_dtype, copy=False)
    return np.array(values, dtype=dtype, order='F')

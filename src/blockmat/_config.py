"""
blockmat Config - Global Extraction Settings

Provides the output dtype, block validation and automatic block grid
settings used by ``UnknownMatrix`` and ``ArrayBackend``. Settings can be
changed globally or overridden per thread inside a ``with`` block.

Environment variables (read once at import):
    BLOCKMAT_DTYPE        default output dtype (e.g. "float32")
    BLOCKMAT_BLOCK_SIZE   bytes per automatic block
    BLOCKMAT_NO_VALIDATE  "1"/"true"/"yes" disables block shape checks
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List

import numpy as np


# =============================================================================
# Configuration Classes
# =============================================================================

@dataclass
class ExtractConfig:
    """Configuration for dense extraction."""
    dtype: str = "float64"         # Output dtype of row/column buffers
    validate_blocks: bool = True   # Check backend block shapes


@dataclass
class GridConfig:
    """Configuration for automatic block grids."""
    block_size: int = 100_000_000  # Bytes per automatic block


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


def _default_extract() -> ExtractConfig:
    cfg = ExtractConfig()
    env_dtype = os.environ.get('BLOCKMAT_DTYPE')
    if env_dtype:
        cfg.dtype = np.dtype(env_dtype).name
    if _env_flag('BLOCKMAT_NO_VALIDATE'):
        cfg.validate_blocks = False
    return cfg


def _default_grid() -> GridConfig:
    cfg = GridConfig()
    env_size = os.environ.get('BLOCKMAT_BLOCK_SIZE')
    if env_size:
        cfg.block_size = int(env_size)
    return cfg


# =============================================================================
# Global Configuration Manager
# =============================================================================

class BlockmatConfig:
    """
    Global configuration manager for blockmat.

    Provides thread-local configuration with context manager support.

    Example:
        # Global configuration
        blockmat.config.extract = ExtractConfig(dtype="float32")

        # Local configuration (context manager)
        with blockmat.config.local(grid=GridConfig(block_size=4096)):
            backend = ArrayBackend(data)
        # Back to global config
    """

    def __init__(self):
        self._global_extract = _default_extract()
        self._global_grid = _default_grid()

        # Thread-local storage for context overrides
        self._local = threading.local()

    # -------------------------------------------------------------------------
    # Property Accessors (with thread-local override support)
    # -------------------------------------------------------------------------

    @property
    def extract(self) -> ExtractConfig:
        """Get extraction configuration."""
        if getattr(self._local, "extract", None) is not None:
            return self._local.extract
        return self._global_extract

    @extract.setter
    def extract(self, value: ExtractConfig):
        self._global_extract = value

    @property
    def grid(self) -> GridConfig:
        """Get block grid configuration."""
        if getattr(self._local, "grid", None) is not None:
            return self._local.grid
        return self._global_grid

    @grid.setter
    def grid(self, value: GridConfig):
        self._global_grid = value

    # -------------------------------------------------------------------------
    # Convenience Properties
    # -------------------------------------------------------------------------

    @property
    def dtype(self) -> np.dtype:
        """Output dtype for extracted slices."""
        return np.dtype(self.extract.dtype)

    @property
    def block_size(self) -> int:
        """Bytes per automatic block."""
        return self.grid.block_size

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    def local(self, **kwargs) -> "_LocalConfigContext":
        """
        Create a local configuration context.

        Args:
            **kwargs: Configuration overrides (extract, grid)

        Returns:
            Context manager
        """
        unknown = set(kwargs) - {"extract", "grid"}
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")
        return _LocalConfigContext(self, **kwargs)

    def _set_local(self, **kwargs):
        for key, value in kwargs.items():
            if value is not None:
                setattr(self._local, key, value)

    def _clear_local(self, keys: List[str]):
        for key in keys:
            if hasattr(self._local, key):
                setattr(self._local, key, None)

    # -------------------------------------------------------------------------
    # Reset / Serialization
    # -------------------------------------------------------------------------

    def reset(self):
        """Reset all configurations to defaults (environment included)."""
        self._global_extract = _default_extract()
        self._global_grid = _default_grid()

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "extract": {
                "dtype": self.extract.dtype,
                "validate_blocks": self.extract.validate_blocks,
            },
            "grid": {
                "block_size": self.grid.block_size,
            },
        }

    def __repr__(self) -> str:
        return f"BlockmatConfig({self.to_dict()})"


class _LocalConfigContext:
    """Context manager for local configuration override."""

    def __init__(self, config: BlockmatConfig, **kwargs):
        self._config = config
        self._kwargs = kwargs
        self._keys = list(kwargs.keys())

    def __enter__(self):
        self._config._set_local(**self._kwargs)
        return self._config

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._config._clear_local(self._keys)
        return False


# =============================================================================
# Global Instance
# =============================================================================

config = BlockmatConfig()


def get_config() -> BlockmatConfig:
    """Get the global configuration instance."""
    return config


def set_dtype(dtype: Any) -> None:
    """Set the default output dtype globally."""
    config.extract = replace(config.extract, dtype=np.dtype(dtype).name)


def set_block_size(block_size: int) -> None:
    """Set the automatic block size (bytes) globally."""
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")
    config.grid = GridConfig(block_size=int(block_size))


__all__ = [
    "ExtractConfig",
    "GridConfig",
    "BlockmatConfig",
    "config",
    "get_config",
    "set_dtype",
    "set_block_size",
]

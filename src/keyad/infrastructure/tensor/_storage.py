"""
Flat buffer storage shared by tensor views.

A `Storage` owns a single 1-D NumPy array. Tensors never own memory
directly; each Tensor is a (storage, offset, shape) descriptor over a
storage handle. Several Tensors may reference the same storage, which is
how zero-copy reshape views are expressed: ownership is explicit (the
`Storage` object) and mutation visibility follows from sharing it.

Configuration
-------------
The element dtype of newly allocated storage defaults to ``float64`` and can
be overridden with the ``KEYAD_DTYPE`` environment variable (any NumPy
floating dtype name, e.g. ``float32``). The variable is read once at import.
"""

from __future__ import annotations

import os

import numpy as np


def _resolve_default_dtype() -> np.dtype:
    name = os.environ.get("KEYAD_DTYPE", "float64")
    try:
        dtype = np.dtype(name)
    except TypeError as e:
        raise ValueError(f"KEYAD_DTYPE must name a NumPy dtype, got {name!r}") from e
    if not np.issubdtype(dtype, np.floating):
        raise ValueError(f"KEYAD_DTYPE must be a floating dtype, got {name!r}")
    return dtype


DEFAULT_DTYPE: np.dtype = _resolve_default_dtype()


class Storage:
    """
    Handle to a flat, contiguous buffer.

    Parameters
    ----------
    buffer : np.ndarray
        One-dimensional array backing this storage. It is used as-is (not
        copied), so callers that need isolation must pass a fresh array.

    Notes
    -----
    - The buffer length is fixed for the lifetime of the storage.
    - `Storage` does not track which views reference it; the last holder
      keeps it alive.
    """

    __slots__ = ("_buffer",)

    def __init__(self, buffer: np.ndarray) -> None:
        if buffer.ndim != 1:
            raise ValueError(f"Storage buffer must be 1-D, got ndim={buffer.ndim}")
        self._buffer = buffer

    @classmethod
    def allocate(cls, size: int, *, dtype=None) -> "Storage":
        """
        Allocate a zero-filled storage of `size` elements.
        """
        return cls(np.zeros(int(size), dtype=DEFAULT_DTYPE if dtype is None else dtype))

    @property
    def buffer(self) -> np.ndarray:
        return self._buffer

    @property
    def dtype(self) -> np.dtype:
        return self._buffer.dtype

    def __len__(self) -> int:
        return int(self._buffer.shape[0])

    def __repr__(self) -> str:
        return f"Storage(size={len(self)}, dtype={self._buffer.dtype})"

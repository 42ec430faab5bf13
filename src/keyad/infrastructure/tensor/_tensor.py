"""
Concrete Tensor value type (NumPy backend).

This module provides `Tensor`, the dense value kind differentiated by keyad.
A Tensor is a view descriptor: a shape plus an offset into a shared
`Storage` buffer. All elementwise arithmetic, unary math, reductions and
shaping helpers operate on the flat buffer returned by `Tensor.data`.

Design notes
------------
- Tensors carry no autograd state. Differentiation is layered on top by
  `Node`, which wraps a primal value and its gradient accumulator.
- Binary operations require identical shapes when both operands are
  tensors; a plain number operand is applied to every element. No other
  broadcasting is performed.
- `reshape` and `ref_clone` never copy; they return new descriptors over
  the same storage. `range`, `copy` and all arithmetic produce or write
  independent buffers.
- Floating-point domain errors follow NumPy semantics (NaN / inf results).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Sequence, Union

import numpy as np
from typing_extensions import Self

from ...domain._errors import (
    IndexOutOfBoundsError,
    InvalidReshapeError,
    ShapeMismatchError,
)
from ._storage import DEFAULT_DTYPE, Storage

Number = Union[int, float]


def ieee_errstate() -> np.errstate:
    """
    Floating-point error state used around every kernel.

    Domain errors (``sqrt(-1)``, ``log(0)``, ``1/0``, overflow) produce
    NaN/inf silently instead of emitting NumPy ``RuntimeWarning``s.
    """
    return np.errstate(divide="ignore", invalid="ignore", over="ignore")


def _round_half_up(x: np.ndarray) -> np.ndarray:
    # halves round toward +inf: 0.5 -> 1, 2.5 -> 3, -2.5 -> -2
    return np.floor(x + 0.5)


def _sigmoid(x: np.ndarray) -> np.ndarray:
    # tanh form stays finite for large |x|
    return 0.5 * (1.0 + np.tanh(0.5 * x))


UNARY_KERNELS: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "neg": np.negative,
    "floor": np.floor,
    "ceil": np.ceil,
    "round": _round_half_up,
    "sqrt": np.sqrt,
    "exp": np.exp,
    "log": np.log,
    "abs": np.abs,
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "asinh": np.arcsinh,
    "acosh": np.arccosh,
    "atanh": np.arctanh,
    "sigmoid": _sigmoid,
}
"""Elementwise unary kernels keyed by operation name."""

BINARY_KERNELS: dict[str, Callable[[Any, Any], np.ndarray]] = {
    "add": np.add,
    "sub": np.subtract,
    "mul": np.multiply,
    "div": np.divide,
    "pow": np.power,
    "min": np.minimum,
    "max": np.maximum,
    "atan2": np.arctan2,
}
"""Elementwise binary kernels keyed by operation name."""


def _normalize_shape(dims: Union[int, Iterable[int]]) -> tuple[int, ...]:
    if isinstance(dims, (int, np.integer)):
        dims = (dims,)
    shape = tuple(int(d) for d in dims)
    if any(d <= 0 for d in shape):
        raise ValueError(f"Tensor dimensions must be positive integers, got {shape}")
    return shape


def _numel(shape: Sequence[int]) -> int:
    n = 1
    for d in shape:
        n *= d
    return n


class Tensor:
    """
    Dense tensor backed by a flat NumPy buffer.

    Parameters
    ----------
    shape : int or Sequence[int]
        Dimensions of the tensor. Every dimension must be positive.
    storage : Optional[Storage], optional
        Existing storage to view. If omitted, a zero-filled storage of the
        right size is allocated.
    offset : int, optional
        Position of the first element inside `storage`. Defaults to 0.
    dtype : optional
        Element dtype of newly allocated storage. Ignored when `storage` is
        given. Defaults to the configured ``KEYAD_DTYPE``.

    Notes
    -----
    The constructor never copies an existing storage; two tensors built over
    the same storage observe each other's writes.
    """

    __slots__ = ("_shape", "_size", "_storage", "_offset")

    def __init__(
        self,
        shape: Union[int, Sequence[int]],
        *,
        storage: Optional[Storage] = None,
        offset: int = 0,
        dtype=None,
    ) -> None:
        self._shape = _normalize_shape(shape)
        self._size = _numel(self._shape)
        if storage is None:
            storage = Storage.allocate(self._size, dtype=dtype)
            offset = 0
        if offset < 0 or offset + self._size > len(storage):
            raise IndexOutOfBoundsError("view", (offset, offset + self._size), len(storage))
        self._storage = storage
        self._offset = int(offset)

    # ----------------------------
    # Factories
    # ----------------------------
    @classmethod
    def zeros(cls, shape: Union[int, Sequence[int]], *, dtype=None) -> "Tensor":
        return cls(shape, dtype=dtype)

    @classmethod
    def ones(cls, shape: Union[int, Sequence[int]], *, dtype=None) -> "Tensor":
        return cls(shape, dtype=dtype).fill(1.0)

    @classmethod
    def from_numpy(cls, arr: Any) -> "Tensor":
        """
        Build a tensor holding a copy of a NumPy array (or array-like).

        Integer and boolean inputs are converted to the default float dtype;
        floating and boolean arrays produced by kernels keep their dtype.
        """
        arr = np.asarray(arr)
        if not (np.issubdtype(arr.dtype, np.floating) or arr.dtype == np.bool_):
            arr = arr.astype(DEFAULT_DTYPE)
        shape = arr.shape if arr.ndim > 0 else (1,)
        flat = np.array(arr, copy=True).reshape(-1)
        return cls(shape, storage=Storage(flat))

    @classmethod
    def from_list(
        cls, values: Sequence[Number], shape: Optional[Sequence[int]] = None
    ) -> "Tensor":
        """
        Build a tensor from a flat sequence of numbers.

        Parameters
        ----------
        values : Sequence[Number]
            Elements in linear (row-major) order.
        shape : Optional[Sequence[int]], optional
            Target shape. Defaults to ``(len(values),)``.
        """
        flat = np.asarray(values, dtype=DEFAULT_DTYPE).reshape(-1)
        t = cls.from_numpy(flat)
        if shape is not None:
            return t.reshape(shape)
        return t

    @classmethod
    def _wrap(cls, flat: np.ndarray, shape: tuple[int, ...]) -> "Tensor":
        flat = np.ascontiguousarray(flat).reshape(-1)
        return cls(shape, storage=Storage(flat))

    # ----------------------------
    # Descriptors
    # ----------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def dtype(self) -> np.dtype:
        return self._storage.dtype

    @property
    def data(self) -> np.ndarray:
        """
        Flat, writable view over this tensor's span of the storage.

        Returns
        -------
        np.ndarray
            A 1-D NumPy view. Writing through it mutates the shared storage.
        """
        return self._storage.buffer[self._offset : self._offset + self._size]

    @data.setter
    def data(self, values: Any) -> None:
        # Writes in place so views sharing the storage stay in sync.
        view = self._storage.buffer[self._offset : self._offset + self._size]
        view[...] = values

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"Tensor(shape={self._shape}, data={self.data.tolist()})"

    def to_numpy(self) -> np.ndarray:
        """
        Return a copy of the elements shaped like the tensor.
        """
        return self.data.reshape(self._shape).copy()

    def tolist(self) -> list:
        return self.data.tolist()

    # ----------------------------
    # Storage-level helpers
    # ----------------------------
    def ref_clone(self) -> "Tensor":
        """
        Return a new descriptor over the same storage, shape and offset.
        """
        return Tensor(self._shape, storage=self._storage, offset=self._offset)

    def reshape(self, dims: Union[int, Sequence[int]]) -> "Tensor":
        """
        Return a zero-copy view of this tensor under a new shape.

        Parameters
        ----------
        dims : int or Sequence[int]
            New dimensions. Their product must equal ``len(self)``.

        Returns
        -------
        Tensor
            A tensor sharing this tensor's storage.

        Raises
        ------
        InvalidReshapeError
            If the element count would change or a dimension is not positive.
        """
        try:
            shape = _normalize_shape(dims)
        except (TypeError, ValueError) as e:
            bad = (dims,) if isinstance(dims, (int, np.integer)) else tuple(dims)
            raise InvalidReshapeError(self._shape, bad) from e
        if _numel(shape) != self._size:
            raise InvalidReshapeError(self._shape, shape)
        return Tensor(shape, storage=self._storage, offset=self._offset)

    def fill(self, value: Number) -> Self:
        self.data = value
        return self

    def copy(self, src: "Tensor", offset: int = 0) -> Self:
        """
        Copy `src`'s elements into this tensor starting at linear `offset`.

        Raises
        ------
        IndexOutOfBoundsError
            If ``src`` does not fit inside this tensor at `offset`.
        """
        n = len(src)
        if offset < 0 or offset + n > self._size:
            raise IndexOutOfBoundsError("copy", (offset, offset + n), self._size)
        self.data[offset : offset + n] = src.data
        return self

    def get(self, i: int) -> float:
        """
        Return the element at linear index `i`.

        Raises
        ------
        IndexOutOfBoundsError
            If ``i`` is not in ``[0, len(self))``.
        """
        if not 0 <= i < self._size:
            raise IndexOutOfBoundsError("get", i, self._size)
        return float(self.data[i])

    def range(self, start: int, end: int) -> "Tensor":
        """
        Return a 1-D copy of the elements in ``[start, end)``.

        Raises
        ------
        IndexOutOfBoundsError
            If the range is empty, reversed or outside the buffer.
        """
        if not 0 <= start < end <= self._size:
            raise IndexOutOfBoundsError("range", (start, end), self._size)
        return Tensor._wrap(self.data[start:end].copy(), (end - start,))

    # ----------------------------
    # Elementwise kernels
    # ----------------------------
    def _operand(self, other: Union["Tensor", Number], op: str) -> Any:
        if isinstance(other, Tensor):
            if other.shape != self._shape:
                raise ShapeMismatchError(op, self._shape, other.shape)
            return other.data
        if isinstance(other, (int, float, np.number)) and not isinstance(other, bool):
            return other
        raise TypeError(f"{op}: unsupported operand type {type(other).__name__!r}")

    def unary(self, name: str) -> "Tensor":
        """
        Apply the registered unary kernel `name` elementwise.
        """
        with ieee_errstate():
            out = UNARY_KERNELS[name](self.data)
        return Tensor._wrap(out, self._shape)

    def binary(self, name: str, other: Union["Tensor", Number]) -> "Tensor":
        """
        Apply the registered binary kernel `name` elementwise.

        Raises
        ------
        ShapeMismatchError
            If `other` is a tensor of a different shape.
        """
        rhs = self._operand(other, name)
        with ieee_errstate():
            out = BINARY_KERNELS[name](self.data, rhs)
        return Tensor._wrap(out, self._shape)

    def rbinary(self, name: str, other: Number) -> "Tensor":
        lhs = self._operand(other, name)
        with ieee_errstate():
            out = BINARY_KERNELS[name](lhs, self.data)
        return Tensor._wrap(out, self._shape)

    def neg(self) -> "Tensor":
        return self.unary("neg")

    def add(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("add", other)

    def sub(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("sub", other)

    def mul(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("mul", other)

    def div(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("div", other)

    def pow(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("pow", other)

    def min(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("min", other)

    def max(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("max", other)

    def atan2(self, other: Union["Tensor", Number]) -> "Tensor":
        return self.binary("atan2", other)

    def floor(self) -> "Tensor":
        return self.unary("floor")

    def ceil(self) -> "Tensor":
        return self.unary("ceil")

    def round(self) -> "Tensor":
        return self.unary("round")

    def sqrt(self) -> "Tensor":
        return self.unary("sqrt")

    def exp(self) -> "Tensor":
        return self.unary("exp")

    def log(self) -> "Tensor":
        return self.unary("log")

    def abs(self) -> "Tensor":
        return self.unary("abs")

    def sin(self) -> "Tensor":
        return self.unary("sin")

    def cos(self) -> "Tensor":
        return self.unary("cos")

    def tan(self) -> "Tensor":
        return self.unary("tan")

    def asin(self) -> "Tensor":
        return self.unary("asin")

    def acos(self) -> "Tensor":
        return self.unary("acos")

    def atan(self) -> "Tensor":
        return self.unary("atan")

    def sinh(self) -> "Tensor":
        return self.unary("sinh")

    def cosh(self) -> "Tensor":
        return self.unary("cosh")

    def tanh(self) -> "Tensor":
        return self.unary("tanh")

    def asinh(self) -> "Tensor":
        return self.unary("asinh")

    def acosh(self) -> "Tensor":
        return self.unary("acosh")

    def atanh(self) -> "Tensor":
        return self.unary("atanh")

    def sigmoid(self) -> "Tensor":
        return self.unary("sigmoid")

    def _binary_op(self, name: str, other: Any) -> Any:
        # defer to the other operand (e.g. a graph Node) for unknown types
        if isinstance(other, bool) or not isinstance(other, (Tensor, int, float, np.number)):
            return NotImplemented
        return self.binary(name, other)

    def _rbinary_op(self, name: str, other: Any) -> Any:
        if isinstance(other, bool) or not isinstance(other, (int, float, np.number)):
            return NotImplemented
        return self.rbinary(name, other)

    def __neg__(self) -> "Tensor":
        return self.neg()

    def __add__(self, other):
        return self._binary_op("add", other)

    def __radd__(self, other):
        return self._rbinary_op("add", other)

    def __sub__(self, other):
        return self._binary_op("sub", other)

    def __rsub__(self, other):
        return self._rbinary_op("sub", other)

    def __mul__(self, other):
        return self._binary_op("mul", other)

    def __rmul__(self, other):
        return self._rbinary_op("mul", other)

    def __truediv__(self, other):
        return self._binary_op("div", other)

    def __rtruediv__(self, other):
        return self._rbinary_op("div", other)

    def __pow__(self, other):
        return self._binary_op("pow", other)

    def __rpow__(self, other):
        return self._rbinary_op("pow", other)

    def is_nan(self) -> "Tensor":
        return Tensor._wrap(np.isnan(self.data), self._shape)

    def is_finite(self) -> "Tensor":
        return Tensor._wrap(np.isfinite(self.data), self._shape)

    # ----------------------------
    # Reductions
    # ----------------------------
    def sumreduce(self) -> float:
        with ieee_errstate():
            return float(np.sum(self.data))

    def allreduce(self) -> bool:
        return bool(np.all(self.data))

    def anyreduce(self) -> bool:
        return bool(np.any(self.data))

    def softmax(self) -> "Tensor":
        """
        Normalized exponential over all elements.

        The maximum is subtracted before exponentiation for numerical
        stability; the result has this tensor's shape and sums to 1.
        """
        x = self.data
        with ieee_errstate():
            e = np.exp(x - np.max(x))
            out = e / np.sum(e)
        return Tensor._wrap(out, self._shape)


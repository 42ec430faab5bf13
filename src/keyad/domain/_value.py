"""
Value-kind definitions.

keyad differentiates over exactly two primal representations:

- Scalars, represented by plain Python numbers, and
- Tensors, represented by any object satisfying the `ITensor` protocol.

This module defines the `OutputKind` enum used by the function lifter to
select the scalar or tensor half of a derivative rule, and the `ITensor`
protocol describing the capability surface the core consumes from the
tensor value type. The protocol uses structural typing so the domain layer
does not import NumPy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, Sequence, runtime_checkable


class OutputKind(Enum):
    """
    Kind of primal value produced by a lifted operation.

    The kind decides how the output Node's gradient accumulator is created
    (``0.0`` vs. a zero tensor) and which half of a two-variant derivative
    rule is bound.
    """

    SCALAR = "scalar"
    TENSOR = "tensor"


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor capability interface.

    An `ITensor` is a shape plus a flat buffer of numbers whose length equals
    the product of the shape.

    Notes
    -----
    - `data` is a flat, writable view over the underlying storage; in-place
      updates through it (``t.data += g``) must be visible to every tensor
      sharing the storage.
    - Only the surface the differentiation core relies on is listed here.
    """

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.
        """
        ...

    @property
    def data(self) -> Any:
        """
        Return the flat, writable buffer view.
        """
        ...

    def __len__(self) -> int:
        """
        Return the number of elements.
        """
        ...

    def get(self, i: int) -> float: ...

    def range(self, start: int, end: int) -> "ITensor": ...

    def copy(self, src: "ITensor", offset: int = 0) -> "ITensor": ...

    def reshape(self, dims: Sequence[int]) -> "ITensor": ...

    def ref_clone(self) -> "ITensor": ...

    def fill(self, value: float) -> "ITensor": ...

    def sumreduce(self) -> float: ...

    def softmax(self) -> "ITensor": ...

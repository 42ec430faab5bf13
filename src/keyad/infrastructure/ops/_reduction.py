"""
Tensor reductions (Tensor -> Scalar).

- ``sumreduce`` is differentiable: the Jacobian of a full sum is the
  all-ones row vector, so every input entry receives the output gradient.
- ``allreduce`` / ``anyreduce`` are logical reductions with no gradient path.

Min/max reductions are not provided.
"""

from __future__ import annotations

from ...domain._value import OutputKind
from .._function import lift_unary_function, new_unary_function
from .._node import Node
from ..tensor._tensor import Tensor


def _sumreduce_forward(t: Tensor) -> float:
    if not isinstance(t, Tensor):
        raise TypeError(f"tensor.sumreduce expects a Tensor, got {type(t).__name__!r}")
    return t.sumreduce()


def _sumreduce_backward(out: Node, t: Node) -> None:
    t.dx.data += out.dx


sumreduce = new_unary_function(
    output_kind=OutputKind.SCALAR,
    name="tensor.sumreduce",
    forward=_sumreduce_forward,
    backward=_sumreduce_backward,
)

allreduce = lift_unary_function(Tensor.allreduce, "allreduce")

anyreduce = lift_unary_function(Tensor.anyreduce, "anyreduce")

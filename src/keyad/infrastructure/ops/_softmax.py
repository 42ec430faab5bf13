"""
Softmax over a tensor's flat buffer.

Backward is the softmax Jacobian-vector product, computed in two passes:

    s = sum_i y[i] * g[i]
    dx[j] += y[j] * (g[j] - s)

where ``y`` is the softmax output and ``g`` its gradient. The scalar ``s``
must be formed before any entry is updated, because every output depends on
every input.
"""

from __future__ import annotations

import numpy as np

from ...domain._value import OutputKind
from .._function import new_unary_function
from .._node import Node
from ..tensor._tensor import Tensor


def _softmax_forward(t: Tensor) -> Tensor:
    if not isinstance(t, Tensor):
        raise TypeError(f"tensor.softmax expects a Tensor, got {type(t).__name__!r}")
    return t.softmax()


def _softmax_backward(out: Node, t: Node) -> None:
    y = out.x.data
    g = out.dx.data
    s = np.dot(y, g)
    t.dx.data += y * (g - s)


softmax = new_unary_function(
    output_kind=OutputKind.TENSOR,
    name="tensor.softmax",
    forward=_softmax_forward,
    backward=_softmax_backward,
)

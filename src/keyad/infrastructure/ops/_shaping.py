"""
Scalar/tensor shaping operations.

Primitives built on the function lifter:

- ``get``          : one entry by linear index (Tensor -> Scalar)
- ``range``        : contiguous sub-tensor copy
- ``from_scalars`` : N scalars -> length-N tensor (variadic)
- ``concat``       : tensors -> one flat tensor (variadic)

Conveniences composed from them (no graph node of their own):

- ``to_scalars`` : N ``get`` calls
- ``split``      : ``range`` calls at increasing offsets

``reshape`` is the one shaping operation that bypasses the lifter: it builds
a view Node whose primal and gradient alias the source Node's storage, so no
derivative has to be computed for it.

Notes
-----
Every backward routine here adds into the parent accumulators (scatter-add);
none of them overwrite.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Union

import numpy as np

from ...domain._value import OutputKind
from .._function import nary_get_parents, new_function
from .._node import Node, value
from ..tensor._tensor import Tensor


def _require_tensor(op: str, t: Any) -> Tensor:
    if not isinstance(t, Tensor):
        raise TypeError(f"{op} expects a Tensor, got {type(t).__name__!r}")
    return t


# ----------------------------
# get / to_scalars
# ----------------------------
def _get_forward(t: Tensor, i: int) -> float:
    return _require_tensor("tensor.get", t).get(i)


def _get_backward(out: Node, t: Any, i: int) -> None:
    if isinstance(t, Node):
        t.dx.data[i] += out.dx


def _single_tensor_parent(t: Any, *rest: Any) -> list:
    return [t] if isinstance(t, Node) else []


get = new_function(
    output_kind=OutputKind.SCALAR,
    name="tensor.get",
    forward=_get_forward,
    backward=_get_backward,
    get_parents=_single_tensor_parent,
)


def to_scalars(t: Union[Tensor, Node]) -> List[Any]:
    """
    Split a tensor into the list of its scalar entries (via ``get``).
    """
    return [get(t, i) for i in range(len(value(t)))]


# ----------------------------
# range / split
# ----------------------------
def _range_forward(t: Tensor, start: int, end: int) -> Tensor:
    return _require_tensor("tensor.range", t).range(start, end)


def _range_backward(out: Node, t: Any, start: int, end: int) -> None:
    if isinstance(t, Node):
        t.dx.data[start:end] += out.dx.data


tensor_range = new_function(
    output_kind=OutputKind.TENSOR,
    name="tensor.range",
    forward=_range_forward,
    backward=_range_backward,
    get_parents=_single_tensor_parent,
)


def split(t: Union[Tensor, Node], lengths: Sequence[int]) -> List[Any]:
    """
    Split a tensor into consecutive pieces of the given lengths.

    Raises
    ------
    IndexOutOfBoundsError
        If the lengths run past the end of the tensor.
    """
    pieces = []
    start = 0
    for length in lengths:
        pieces.append(tensor_range(t, start, start + length))
        start += length
    return pieces


# ----------------------------
# from_scalars / concat
# ----------------------------
def _from_scalars_forward(*xs: Any) -> Tensor:
    if not xs:
        raise ValueError("tensor.from_scalars requires at least one operand")
    return Tensor.from_list([float(x) for x in xs])


def _from_scalars_backward(out: Node, *args: Any) -> None:
    g = out.dx.data
    for n, arg in enumerate(args):
        if isinstance(arg, Node):
            arg.dx += float(g[n])


from_scalars = new_function(
    output_kind=OutputKind.TENSOR,
    name="tensor.from_scalars",
    forward=_from_scalars_forward,
    backward=_from_scalars_backward,
    get_parents=nary_get_parents,
    variadic=True,
)


def _concat_forward(*ts: Tensor) -> Tensor:
    if not ts:
        raise ValueError("tensor.concat requires at least one operand")
    for t in ts:
        _require_tensor("tensor.concat", t)
    size = sum(len(t) for t in ts)
    out = Tensor((size,), dtype=np.result_type(*(t.dtype for t in ts)))
    offset = 0
    for t in ts:
        out.copy(t, offset)
        offset += len(t)
    return out


def _concat_backward(out: Node, *args: Any) -> None:
    g = out.dx.data
    offset = 0
    for arg in args:
        n = len(value(arg))
        if isinstance(arg, Node):
            arg.dx.data += g[offset : offset + n]
        offset += n


concat = new_function(
    output_kind=OutputKind.TENSOR,
    name="tensor.concat",
    forward=_concat_forward,
    backward=_concat_backward,
    get_parents=nary_get_parents,
    variadic=True,
)


# ----------------------------
# reshape
# ----------------------------
def reshape(t: Union[Tensor, Node], dims: Union[int, Sequence[int]]) -> Union[Tensor, Node]:
    """
    Reshape a tensor without copying.

    Parameters
    ----------
    t : Tensor or Node
        Source tensor, or a Node holding one.
    dims : int or Sequence[int]
        New dimensions; the element count must not change.

    Returns
    -------
    Tensor or Node
        For a raw Tensor, a view sharing its storage. For a Node, a new Node
        whose ``x`` and ``dx`` are views over the source Node's ``x`` and
        ``dx`` storage. Gradients accumulated into the view's ``dx`` are
        therefore already in the source's ``dx``; the view's backward is a
        no-op and it lists the source as its only parent so traversal
        continues through it.

    Raises
    ------
    InvalidReshapeError
        If the element count would change.
    TypeError
        If `t` does not hold a Tensor.
    """
    if isinstance(t, Node):
        _require_tensor("tensor.reshape", t.x)
        return Node(
            t.x.reshape(dims),
            t.dx.reshape(dims),
            parents=(t,),
            name="tensor.reshape",
        )
    return _require_tensor("tensor.reshape", t).reshape(dims)

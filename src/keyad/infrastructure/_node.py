"""
Computation-graph nodes.

A `Node` wraps a primal value (Scalar or Tensor) produced during the forward
pass together with a gradient accumulator of the same shape. Nodes are
created by lifted operations (see `._function`) or directly by `lift` for
leaf variables, and they record everything the backward engine needs:

- ``parents``: the Node arguments the forward computation depended on
  (raw constants are never recorded),
- ``index``: a creation sequence number; a Node can only be built from
  Nodes with a smaller index, so descending index order is a valid
  reverse-topological order,
- the producing primitive and the raw call arguments, through which
  `Node.backward` dispatches to the primitive's gradient routine.

Notes
-----
- ``x`` is read-only once the Node exists. ``dx`` starts at the additive
  identity and is only ever incremented by backward routines (or explicitly
  reset by the caller).
- Reshape views are Nodes whose ``x``/``dx`` alias the source Node's
  storage; their backward is a no-op because gradients already land in the
  shared buffer.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional, Sequence, Union

from ..domain._errors import ShapeMismatchError
from ..domain._value import ITensor
from .tensor._tensor import Tensor

Value = Union[float, ITensor]

_SEQUENCE = itertools.count()


def zeros_like(x: Any) -> Value:
    """
    Return the additive identity matching a primal value.

    Parameters
    ----------
    x : float or Tensor
        Primal value.

    Returns
    -------
    float or Tensor
        ``0.0`` for scalars, a zero tensor of the same shape and dtype for
        tensors.

    Raises
    ------
    TypeError
        If `x` is neither a number nor a Tensor.
    """
    if isinstance(x, Tensor):
        return Tensor.zeros(x.shape, dtype=x.dtype)
    if isinstance(x, (int, float)) or hasattr(x, "__float__"):
        return 0.0
    raise TypeError(f"Cannot build a gradient accumulator for {type(x).__name__!r}")


class Node:
    """
    A vertex of the computation graph.

    Parameters
    ----------
    x : float or Tensor
        Primal value computed by the forward pass.
    dx : Optional[float or Tensor], optional
        Initial gradient accumulator. Defaults to ``zeros_like(x)``.
    parents : Sequence[Node], optional
        Node arguments the forward computation depended on.
    name : str, optional
        Name of the producing primitive, for debugging.
    fn : optional
        The lifted function that produced this Node. ``None`` for leaves and
        reshape views.
    args : tuple, optional
        Raw arguments of the producing call, replayed by `backward`.
    """

    __slots__ = ("_x", "dx", "parents", "index", "name", "_fn", "_args")

    def __init__(
        self,
        x: Value,
        dx: Optional[Value] = None,
        *,
        parents: Sequence["Node"] = (),
        name: str = "lift",
        fn: Any = None,
        args: tuple = (),
    ) -> None:
        if dx is None:
            dx = zeros_like(x)
        elif isinstance(x, Tensor) and (
            not isinstance(dx, Tensor) or dx.shape != x.shape
        ):
            raise ShapeMismatchError("node", x.shape, getattr(dx, "shape", ()))

        self._x = x
        self.dx = dx
        self.parents: tuple[Node, ...] = tuple(parents)
        self.index: int = next(_SEQUENCE)
        self.name = name
        self._fn = fn
        self._args = tuple(args)

    @property
    def x(self) -> Value:
        return self._x

    @property
    def is_tensor(self) -> bool:
        return isinstance(self._x, Tensor)

    def __repr__(self) -> str:
        return f"Node(name={self.name!r}, index={self.index}, x={self._x!r}, dx={self.dx!r})"

    # ----------------------------
    # Autograd
    # ----------------------------
    def backward(self) -> None:
        """
        Propagate this Node's accumulated ``dx`` into its parents.

        Dispatches to the producing primitive's gradient routine with this
        Node as context and the original raw arguments. Leaves and reshape
        views have nothing to propagate.

        Notes
        -----
        Must be called at most once per backward pass, after every consumer
        of this Node has contributed to ``dx``. The engine guarantees this;
        calling it by hand is the caller's responsibility.
        """
        if self._fn is not None:
            self._fn.run_backward(self, self._args)

    def backprop(self) -> None:
        """
        Seed this Node's gradient with ones and back-propagate through its graph.
        """
        from ._engine import backprop

        backprop(self)

    def zero_derivatives(self) -> None:
        """
        Reset ``dx`` of this Node and every ancestor to zero.
        """
        from ._engine import zero_derivatives

        zero_derivatives(self)

    # ----------------------------
    # Operators
    # ----------------------------
    def __neg__(self):
        return _dispatch("neg", self)

    def __add__(self, other):
        return _dispatch("add", self, other)

    def __radd__(self, other):
        return _dispatch("add", other, self)

    def __sub__(self, other):
        return _dispatch("sub", self, other)

    def __rsub__(self, other):
        return _dispatch("sub", other, self)

    def __mul__(self, other):
        return _dispatch("mul", self, other)

    def __rmul__(self, other):
        return _dispatch("mul", other, self)

    def __truediv__(self, other):
        return _dispatch("div", self, other)

    def __rtruediv__(self, other):
        return _dispatch("div", other, self)

    def __pow__(self, other):
        return _dispatch("pow", self, other)

    def __rpow__(self, other):
        return _dispatch("pow", other, self)


def _dispatch(name: str, *operands: Any) -> Any:
    from .ops import scalar, tensor

    table = tensor if any(isinstance(value(o), Tensor) for o in operands) else scalar
    return table[name](*operands)


def lift(x: Value) -> Node:
    """
    Create a leaf variable Node from a raw value.

    Parameters
    ----------
    x : Number or Tensor
        Primal value. Python ints are stored as floats.

    Returns
    -------
    Node
        A Node with no parents and a zero gradient accumulator.

    Raises
    ------
    TypeError
        If `x` is already a Node.
    """
    if isinstance(x, Node):
        raise TypeError("lift() expects a raw value, got a Node")
    if not isinstance(x, Tensor):
        x = float(x)
    return Node(x)


def value(x: Any) -> Any:
    """Return the primal of a Node, or `x` itself for raw values."""
    return x.x if isinstance(x, Node) else x


def derivative(x: Node) -> Value:
    """Return a Node's gradient accumulator."""
    return x.dx


def is_lifted(x: Any) -> bool:
    return isinstance(x, Node)

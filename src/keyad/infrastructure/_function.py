"""
Function lifting: turning plain forward computations into graph operations.

A lifted function is called with any mix of raw values and Nodes. It unwraps
every argument to its primal, runs the forward computation eagerly (exactly
once), and then:

- returns the raw result when no argument is a Node, so constant-only
  subexpressions never allocate graph nodes, or
- returns a new `Node` holding the result, a zeroed accumulator chosen by
  the function's `OutputKind`, the Node arguments as parents, and a
  reference back to the lifted function so the backward rule can be
  replayed later against the original raw arguments.

Backward rules have the signature ``backward(out, *args)`` where ``out`` is
the output Node and ``args`` the raw call arguments. Rules increment
``parent.dx`` in place; they never return gradients.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from ..domain._value import OutputKind
from ._node import Node, value
from .tensor._tensor import Tensor


def _zero_accumulator(kind: OutputKind, x: Any) -> Any:
    if kind is OutputKind.TENSOR:
        if not isinstance(x, Tensor):
            raise TypeError(
                f"Tensor-valued operation produced {type(x).__name__!r}, expected Tensor"
            )
        return Tensor.zeros(x.shape, dtype=x.dtype)
    return 0.0


def _operand_sequence(args: tuple) -> tuple:
    # f(a, b, c) and f([a, b, c]) are the same call
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        return tuple(args[0])
    return args


def nary_get_parents(*args: Any) -> list:
    """
    Return the Node operands of a variadic call, in argument order.
    """
    return [a for a in _operand_sequence(args) if isinstance(a, Node)]


class LiftedFunction:
    """
    A differentiable operation produced by the lifting helpers.

    Parameters
    ----------
    output_kind : OutputKind
        Kind of value the forward computation returns.
    name : str
        Operation name (e.g., ``"tensor.concat"``), recorded on output Nodes.
    forward : Callable[..., Any]
        Forward computation over primal values only.
    backward : Callable[..., None]
        Gradient routine ``backward(out, *args)``; responsible for every
        Node argument.
    get_parents : Callable[..., list]
        Returns exactly the Node arguments of a call, in the order the
        backward routine addresses them.
    variadic : bool, optional
        If True, the operation takes an ordered operand sequence passed
        either as loose arguments or as a single list/tuple.

    Notes
    -----
    Instances are shared by every Node they produce; per-call state lives on
    the Node (its primal, accumulator and recorded arguments).
    """

    def __init__(
        self,
        *,
        output_kind: OutputKind,
        name: str,
        forward: Callable[..., Any],
        backward: Callable[..., None],
        get_parents: Callable[..., list],
        variadic: bool = False,
    ) -> None:
        self.output_kind = output_kind
        self.name = name
        self.forward = forward
        self._backward = backward
        self.get_parents = get_parents
        self.variadic = variadic

    def __repr__(self) -> str:
        return f"LiftedFunction(name={self.name!r}, output_kind={self.output_kind.value})"

    def __call__(self, *args: Any) -> Any:
        if self.variadic:
            args = _operand_sequence(args)
        out = self.forward(*(value(a) for a in args))
        parents = self.get_parents(*args)
        if not parents:
            return out
        return Node(
            out,
            _zero_accumulator(self.output_kind, out),
            parents=parents,
            name=self.name,
            fn=self,
            args=args,
        )

    def run_backward(self, out: Node, args: tuple) -> None:
        """
        Replay the backward rule for an output Node of this function.
        """
        self._backward(out, *args)


def new_function(
    *,
    output_kind: OutputKind,
    name: str,
    forward: Callable[..., Any],
    backward: Callable[..., None],
    get_parents: Callable[..., list],
    variadic: bool = False,
) -> LiftedFunction:
    """
    Lift an N-ary operation.

    The backward rule receives the output Node and the raw arguments and is
    responsible for checking which arguments are Nodes.

    Returns
    -------
    LiftedFunction
        The graph-aware operation.
    """
    return LiftedFunction(
        output_kind=output_kind,
        name=name,
        forward=forward,
        backward=backward,
        get_parents=get_parents,
        variadic=variadic,
    )


def new_unary_function(
    *,
    output_kind: OutputKind,
    name: str,
    forward: Callable[[Any], Any],
    backward: Callable[[Node, Node], None],
) -> LiftedFunction:
    """
    Lift a unary operation.

    `backward(out, a)` is only invoked when the operand is a Node.
    """

    def _backward(out: Node, a: Any) -> None:
        if isinstance(a, Node):
            backward(out, a)

    def _get_parents(a: Any) -> list:
        return [a] if isinstance(a, Node) else []

    return new_function(
        output_kind=output_kind,
        name=name,
        forward=forward,
        backward=_backward,
        get_parents=_get_parents,
    )


def new_binary_function(
    *,
    output_kind: OutputKind,
    name: str,
    forward: Callable[[Any, Any], Any],
    backward1: Callable[[Node, Any, Any], None],
    backward2: Callable[[Node, Any, Any], None],
) -> LiftedFunction:
    """
    Lift a binary operation with one backward contribution per operand.

    `backward1(out, a, b)` runs when `a` is a Node and `backward2(out, a, b)`
    when `b` is a Node. When the same Node is passed as both operands, both
    contributions are accumulated.
    """

    def _backward(out: Node, a: Any, b: Any) -> None:
        if isinstance(a, Node):
            backward1(out, a, b)
        if isinstance(b, Node):
            backward2(out, a, b)

    def _get_parents(a: Any, b: Any) -> list:
        return [p for p in (a, b) if isinstance(p, Node)]

    return new_function(
        output_kind=output_kind,
        name=name,
        forward=forward,
        backward=_backward,
        get_parents=_get_parents,
    )


def lift_unary_function(fn: Callable[[Any], Any], name: Optional[str] = None) -> Callable[[Any], Any]:
    """
    Wrap a non-differentiable unary function (e.g., a predicate).

    The wrapper unwraps Node arguments to their primal value and returns
    `fn`'s raw result. It never allocates a Node.
    """

    @wraps(fn)
    def lifted(x: Any) -> Any:
        return fn(value(x))

    if name is not None:
        lifted.__name__ = name
    return lifted


__all__ = [
    "LiftedFunction",
    "new_function",
    "new_unary_function",
    "new_binary_function",
    "lift_unary_function",
    "nary_get_parents",
]

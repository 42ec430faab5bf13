"""
Derivative rule registry and the local-derivative rule implementation.

This module defines the concrete `DerivativeTable` used by the primitive
library to look up the (scalar, tensor) backward routines of arithmetic and
math operations by name.

Design
------
- A rule is registered by decorating a *local derivative* function: given the
  primal output ``y`` and the primal inputs ``*xs``, it returns the partial
  derivative of ``y`` with respect to each input (a single value for unary
  operations, a tuple for binary ones).
- `LocalDerivativeRule` turns that function into the two halves the lifter
  needs: a scalar half that multiplies by ``out.dx`` as a number, and a
  tensor half that multiplies elementwise over the flat buffers.
- Local derivative functions use NumPy ufuncs, so the same expression works
  for NumPy scalars and flat arrays alike. They run under `ieee_errstate`,
  so singular points give NaN/inf gradients without warnings.

Usage example
-------------
Registering a rule:

    @DerivativeTable.register_rule("sin")
    def _sin(y, x):
        return np.cos(x)

Looking it up:

    backward = DerivativeTable.get("sin").select(OutputKind.TENSOR)[0]

Notes
-----
- Registration keys must be unique unless explicitly overwritten.
- Operations whose gradient needs structural bookkeeping (reductions,
  indexing, concatenation, softmax) are not table driven; their backward
  routines live next to their forward definitions in ``ops``.
"""

from __future__ import annotations

import warnings
from typing import Any, Callable, ClassVar, Dict, Tuple, TypeVar

import numpy as np

from ...domain._errors import UnknownDerivativeError
from ...domain._function import BackwardFn, DerivativeRule
from .._node import Node, value
from ..tensor._tensor import Tensor, ieee_errstate

F = TypeVar("F", bound=Callable[..., Any])


def _as_scalar(x: Any) -> np.float64:
    # float64 arithmetic yields inf/nan instead of raising ZeroDivisionError
    return np.float64(x)


def _as_flat(x: Any) -> Any:
    if isinstance(x, Tensor):
        return x.data
    return np.float64(x)


def accumulate(node: Node, grad: Any) -> None:
    """
    Add a gradient contribution into a parent Node's accumulator.

    Parameters
    ----------
    node : Node
        Parent Node receiving the contribution.
    grad : float or np.ndarray
        Contribution shaped like the *output* buffer. When the parent is a
        Scalar Node used as an operand of a tensor operation, the
        contribution is summed.
    """
    if isinstance(node.dx, Tensor):
        node.dx.data += grad
    else:
        node.dx += float(np.sum(grad))


class LocalDerivativeRule(DerivativeRule):
    """
    Derivative rule built from a local derivative function.

    Parameters
    ----------
    partials : Callable[..., Any]
        ``partials(y, *xs)`` returning the local derivative with respect to
        each input. Unary rules return a single value; rules with
        ``arity > 1`` return a tuple with one entry per input.
    arity : int
        Number of inputs.
    """

    def __init__(self, partials: Callable[..., Any], arity: int) -> None:
        if arity < 1:
            raise ValueError(f"arity must be positive, got {arity}")
        self._partials = partials
        self._arity = arity
        self._scalar = tuple(self._scalar_routine(i) for i in range(arity))
        self._tensor = tuple(self._tensor_routine(i) for i in range(arity))

    @property
    def arity(self) -> int:
        return self._arity

    def partials(self, y: Any, *xs: Any) -> Tuple[Any, ...]:
        """
        Evaluate the local derivatives, always returned as a tuple.
        """
        d = self._partials(y, *xs)
        if self._arity == 1:
            return (d,)
        return tuple(d)

    def _scalar_routine(self, i: int) -> BackwardFn:
        def backward(out: Node, *args: Any) -> None:
            xs = [_as_scalar(value(a)) for a in args]
            with ieee_errstate():
                d = self.partials(_as_scalar(out.x), *xs)[i]
                contribution = float(out.dx * d)
            args[i].dx += contribution

        return backward

    def _tensor_routine(self, i: int) -> BackwardFn:
        def backward(out: Node, *args: Any) -> None:
            xs = [_as_flat(value(a)) for a in args]
            with ieee_errstate():
                d = self.partials(out.x.data, *xs)[i]
                accumulate(args[i], out.dx.data * d)

        return backward

    def scalar(self) -> Tuple[BackwardFn, ...]:
        return self._scalar

    def tensor(self) -> Tuple[BackwardFn, ...]:
        return self._tensor


class DerivativeTable:
    """
    Registry of derivative rules keyed by operation name.

    Usage
    -----
    Register:
        @DerivativeTable.register_rule("mul", arity=2)
        def _mul(y, a, b):
            return b, a

    Lookup:
        rule = DerivativeTable.get("mul")
        backward1, backward2 = rule.select(OutputKind.SCALAR)
    """

    RULES: ClassVar[Dict[str, DerivativeRule]] = {}

    @classmethod
    def register(cls, name: str, rule: DerivativeRule, *, overwrite: bool = False) -> None:
        """
        Register an already-built rule under `name`.

        Raises
        ------
        ValueError
            If `name` is empty, or already registered and `overwrite` is False.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Derivative rule name must be a non-empty string")
        if name in cls.RULES:
            if not overwrite:
                raise ValueError(f"Derivative rule already registered: {name!r}")
            warnings.warn(
                f"Overwriting derivative rule {name!r}",
                RuntimeWarning,
                stacklevel=2,
            )
        cls.RULES[name] = rule

    @classmethod
    def register_rule(
        cls, name: str, *, arity: int = 1, overwrite: bool = False
    ) -> Callable[[F], F]:
        """
        Decorator registering a local derivative function under `name`.

        Parameters
        ----------
        name:
            Operation name, matching the forward kernel name.
        arity:
            Number of inputs the operation differentiates.
        overwrite:
            If False (default), raises if `name` is already registered.
        """

        def decorator(func: F) -> F:
            cls.register(name, LocalDerivativeRule(func, arity), overwrite=overwrite)
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered rule names (sorted)."""
        return tuple(sorted(cls.RULES))

    @classmethod
    def get(cls, name: str) -> DerivativeRule:
        try:
            return cls.RULES[name]
        except KeyError:
            raise UnknownDerivativeError(name, cls.available()) from None

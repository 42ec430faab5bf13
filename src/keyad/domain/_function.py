"""
Derivative rule interface definitions.

This module defines the abstract base class for derivative rules consumed by
the function lifter. A rule bundles, for one primitive operation, the
backward routines used when the operation produces a Scalar and when it
produces a Tensor. The two halves differ only in how the gradient
accumulator is addressed: a single number for scalars, a flat buffer for
tensors.

Backward routine contract
-------------------------
Each routine has the signature ``backward(out, *args) -> None`` where:

- ``out`` is the output Node (exposing its primal ``x`` and accumulated
  gradient ``dx``), and
- ``args`` are the raw arguments of the original call (Nodes and constants).

A rule provides one routine per differentiable operand; routine ``i`` must
increment ``args[i].dx`` and is only invoked when ``args[i]`` is a Node.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Tuple

from ._value import OutputKind

BackwardFn = Callable[..., None]


class DerivativeRule(ABC):
    """
    Abstract base class for a (scalar, tensor) pair of backward routines.

    Subclasses must implement both `scalar` and `tensor`. Each returns a
    tuple with one backward routine per operand, ordered like the operands
    of the forward call.

    Notes
    -----
    - Rules are stateless and shared by every Node produced by the
      operation; per-call state lives on the output Node and its arguments.
    """

    @abstractmethod
    def scalar(self) -> Tuple[BackwardFn, ...]:
        """
        Return the per-operand backward routines for Scalar outputs.

        Returns
        -------
        tuple[Callable[..., None], ...]
            Routines operating on ``out.dx`` as a number.
        """
        ...

    @abstractmethod
    def tensor(self) -> Tuple[BackwardFn, ...]:
        """
        Return the per-operand backward routines for Tensor outputs.

        Returns
        -------
        tuple[Callable[..., None], ...]
            Routines operating elementwise over ``out.dx.data``.
        """
        ...

    @property
    @abstractmethod
    def arity(self) -> int:
        """
        Number of operands the rule differentiates.
        """
        ...

    def select(self, kind: Any) -> Tuple[BackwardFn, ...]:
        """
        Return the half of the rule matching an output kind.

        Parameters
        ----------
        kind : OutputKind
            Kind of value produced by the lifted operation.

        Returns
        -------
        tuple[Callable[..., None], ...]
            `tensor()` for ``OutputKind.TENSOR``, otherwise `scalar()`.
        """
        if kind is OutputKind.TENSOR:
            return self.tensor()
        return self.scalar()

"""
Arithmetic and math primitives, lifted once per output kind.

`make_functions` builds the ``scalar`` or ``tensor`` function table:

- unary ``neg`` and the transcendental set (``floor`` ... ``sigmoid``),
- binary ``add sub mul div`` and ``pow min max atan2``,
- the non-differentiable predicates ``is_nan`` and ``is_finite``.

Forward kernels are the NumPy ufuncs registered on `Tensor`; scalar forwards
evaluate the same kernel on a float64 value and return a Python float, so
scalars and tensors share IEEE semantics (``sqrt(-1)`` is NaN, not an
exception). Backward routines come from `DerivativeTable`, selecting the half
that matches the output kind.
"""

from __future__ import annotations

import math
from typing import Any, Callable

import numpy as np

from ...domain._value import OutputKind
from .._function import lift_unary_function, new_binary_function, new_unary_function
from ..derivatives import DerivativeTable
from ..tensor._tensor import BINARY_KERNELS, UNARY_KERNELS, Tensor, ieee_errstate
from ._table import FunctionTable

UNARY_OPS = (
    "neg",
    "floor",
    "ceil",
    "round",
    "sqrt",
    "exp",
    "log",
    "abs",
    "sin",
    "cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "sinh",
    "cosh",
    "tanh",
    "asinh",
    "acosh",
    "atanh",
    "sigmoid",
)

BINARY_OPS = ("add", "sub", "mul", "div", "pow", "min", "max", "atan2")

MATH_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
    "inf": math.inf,
    "nan": math.nan,
    "LN2": math.log(2.0),
    "LN10": math.log(10.0),
    "LOG2E": math.log2(math.e),
    "LOG10E": math.log10(math.e),
    "SQRT2": math.sqrt(2.0),
    "SQRT1_2": math.sqrt(0.5),
}


def _scalar_unary(name: str) -> Callable[[Any], float]:
    kernel = UNARY_KERNELS[name]

    def forward(x: Any) -> float:
        with ieee_errstate():
            return float(kernel(np.float64(x)))

    return forward


def _scalar_binary(name: str) -> Callable[[Any, Any], float]:
    kernel = BINARY_KERNELS[name]

    def forward(a: Any, b: Any) -> float:
        with ieee_errstate():
            return float(kernel(np.float64(a), np.float64(b)))

    return forward


def _tensor_unary(name: str) -> Callable[[Tensor], Tensor]:
    def forward(x: Tensor) -> Tensor:
        if not isinstance(x, Tensor):
            raise TypeError(f"tensor.{name} expects a Tensor, got {type(x).__name__!r}")
        return x.unary(name)

    return forward


def _tensor_binary(name: str) -> Callable[[Any, Any], Tensor]:
    def forward(a: Any, b: Any) -> Tensor:
        if isinstance(a, Tensor):
            return a.binary(name, b)
        if isinstance(b, Tensor):
            return b.rbinary(name, a)
        raise TypeError(f"tensor.{name} expects at least one Tensor operand")

    return forward


def make_functions(kind: OutputKind) -> FunctionTable:
    """
    Build the arithmetic/math function table for an output kind.

    Parameters
    ----------
    kind : OutputKind
        ``SCALAR`` for the scalar table, ``TENSOR`` for the tensor table.

    Returns
    -------
    FunctionTable
        Table holding the lifted operations and predicates.
    """
    table = FunctionTable(kind)
    prefix = f"{kind.value}."
    is_tensor = kind is OutputKind.TENSOR

    for name in UNARY_OPS:
        (backward,) = DerivativeTable.get(name).select(kind)
        table.register(
            name,
            new_unary_function(
                output_kind=kind,
                name=prefix + name,
                forward=_tensor_unary(name) if is_tensor else _scalar_unary(name),
                backward=backward,
            ),
        )

    for name in BINARY_OPS:
        backward1, backward2 = DerivativeTable.get(name).select(kind)
        table.register(
            name,
            new_binary_function(
                output_kind=kind,
                name=prefix + name,
                forward=_tensor_binary(name) if is_tensor else _scalar_binary(name),
                backward1=backward1,
                backward2=backward2,
            ),
        )

    if is_tensor:
        table.register("is_nan", lift_unary_function(Tensor.is_nan, "is_nan"))
        table.register("is_finite", lift_unary_function(Tensor.is_finite, "is_finite"))
    else:
        table.register("is_nan", lift_unary_function(math.isnan, "is_nan"))
        table.register("is_finite", lift_unary_function(math.isfinite, "is_finite"))

    return table


def register_constants(table: FunctionTable) -> None:
    """
    Re-export math constants on a table (for convenience, not differentiable).
    """
    for name, constant in MATH_CONSTANTS.items():
        if name not in table:
            table.register(name, constant)

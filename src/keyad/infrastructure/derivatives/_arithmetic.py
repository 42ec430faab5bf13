"""
Local derivatives of the arithmetic and binary math operations.

Each function receives the primal output ``y`` followed by the primal inputs
and returns the partial derivatives of ``y`` with respect to the inputs.

Tie-breaking
------------
``min``/``max`` are not differentiable where both inputs are equal. The
gradient is routed entirely to the first operand in that case.
"""

import numpy as np

from ._base import DerivativeTable


@DerivativeTable.register_rule("neg")
def _neg(y, x):
    return -1.0


@DerivativeTable.register_rule("add", arity=2)
def _add(y, a, b):
    return 1.0, 1.0


@DerivativeTable.register_rule("sub", arity=2)
def _sub(y, a, b):
    return 1.0, -1.0


@DerivativeTable.register_rule("mul", arity=2)
def _mul(y, a, b):
    return b, a


@DerivativeTable.register_rule("div", arity=2)
def _div(y, a, b):
    return 1.0 / b, -y / b


@DerivativeTable.register_rule("pow", arity=2)
def _pow(y, a, b):
    # d/db a**b = a**b * log(a) is only real for a > 0; zero elsewhere
    positive = a > 0
    log_a = np.log(np.where(positive, a, 1.0))
    return b * np.power(a, b - 1.0), np.where(positive, y * log_a, 0.0)


@DerivativeTable.register_rule("min", arity=2)
def _min(y, a, b):
    first = a <= b
    return np.where(first, 1.0, 0.0), np.where(first, 0.0, 1.0)


@DerivativeTable.register_rule("max", arity=2)
def _max(y, a, b):
    first = a >= b
    return np.where(first, 1.0, 0.0), np.where(first, 0.0, 1.0)


@DerivativeTable.register_rule("atan2", arity=2)
def _atan2(y, a, b):
    denom = a * a + b * b
    return b / denom, -a / denom

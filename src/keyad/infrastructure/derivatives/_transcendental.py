"""
Local derivatives of the unary math functions.

Where the derivative is cheaper in terms of the output (``exp``, ``tanh``,
``sigmoid``, ``sqrt``, ``tan``) the primal output ``y`` is reused.
``floor``, ``ceil`` and ``round`` are piecewise constant and contribute
zero gradient.
"""

import numpy as np

from ._base import DerivativeTable


@DerivativeTable.register_rule("floor")
def _floor(y, x):
    return 0.0


@DerivativeTable.register_rule("ceil")
def _ceil(y, x):
    return 0.0


@DerivativeTable.register_rule("round")
def _round(y, x):
    return 0.0


@DerivativeTable.register_rule("sqrt")
def _sqrt(y, x):
    return 0.5 / y


@DerivativeTable.register_rule("exp")
def _exp(y, x):
    return y


@DerivativeTable.register_rule("log")
def _log(y, x):
    return 1.0 / x


@DerivativeTable.register_rule("abs")
def _abs(y, x):
    return np.sign(x)


@DerivativeTable.register_rule("sin")
def _sin(y, x):
    return np.cos(x)


@DerivativeTable.register_rule("cos")
def _cos(y, x):
    return -np.sin(x)


@DerivativeTable.register_rule("tan")
def _tan(y, x):
    return 1.0 + y * y


@DerivativeTable.register_rule("asin")
def _asin(y, x):
    return 1.0 / np.sqrt(1.0 - x * x)


@DerivativeTable.register_rule("acos")
def _acos(y, x):
    return -1.0 / np.sqrt(1.0 - x * x)


@DerivativeTable.register_rule("atan")
def _atan(y, x):
    return 1.0 / (1.0 + x * x)


@DerivativeTable.register_rule("sinh")
def _sinh(y, x):
    return np.cosh(x)


@DerivativeTable.register_rule("cosh")
def _cosh(y, x):
    return np.sinh(x)


@DerivativeTable.register_rule("tanh")
def _tanh(y, x):
    return 1.0 - y * y


@DerivativeTable.register_rule("asinh")
def _asinh(y, x):
    return 1.0 / np.sqrt(x * x + 1.0)


@DerivativeTable.register_rule("acosh")
def _acosh(y, x):
    return 1.0 / np.sqrt(x * x - 1.0)


@DerivativeTable.register_rule("atanh")
def _atanh(y, x):
    return 1.0 / (1.0 - x * x)


@DerivativeTable.register_rule("sigmoid")
def _sigmoid(y, x):
    return y * (1.0 - y)

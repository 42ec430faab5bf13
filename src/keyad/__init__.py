"""
keyad: reverse-mode automatic differentiation over scalars and tensors.

Public API
----------
Values and graph
    ``Tensor``, ``Node``, ``OutputKind``, ``lift``, ``value``,
    ``derivative``, ``is_lifted``
Function lifting
    ``new_function``, ``new_unary_function``, ``new_binary_function``,
    ``lift_unary_function``, ``nary_get_parents``
Backward engine
    ``seed``, ``backward``, ``backprop``, ``zero_derivatives``
Primitive library
    ``scalar``, ``tensor`` (function tables), ``DerivativeTable``
Errors
    ``KeyADError``, ``ShapeMismatchError``, ``IndexOutOfBoundsError``,
    ``InvalidReshapeError``, ``UnknownDerivativeError``

Example
-------
>>> from keyad import Tensor, lift, backprop, tensor
>>> x = lift(Tensor.from_list([1.0, 2.0, 3.0]))
>>> y = tensor.sumreduce(x * x)
>>> backprop(y)
>>> x.dx.tolist()
[2.0, 4.0, 6.0]
"""

from .domain._errors import (
    IndexOutOfBoundsError,
    InvalidReshapeError,
    KeyADError,
    ShapeMismatchError,
    UnknownDerivativeError,
)
from .domain._value import OutputKind
from .infrastructure._engine import backprop, backward, seed, zero_derivatives
from .infrastructure._function import (
    lift_unary_function,
    nary_get_parents,
    new_binary_function,
    new_function,
    new_unary_function,
)
from .infrastructure._node import Node, derivative, is_lifted, lift, value
from .infrastructure.derivatives import DerivativeTable
from .infrastructure.ops import scalar, tensor
from .infrastructure.tensor import Tensor

__version__ = "0.1.0"

__all__ = [
    "Tensor",
    "Node",
    "OutputKind",
    "lift",
    "value",
    "derivative",
    "is_lifted",
    "new_function",
    "new_unary_function",
    "new_binary_function",
    "lift_unary_function",
    "nary_get_parents",
    "seed",
    "backward",
    "backprop",
    "zero_derivatives",
    "scalar",
    "tensor",
    "DerivativeTable",
    "KeyADError",
    "ShapeMismatchError",
    "IndexOutOfBoundsError",
    "InvalidReshapeError",
    "UnknownDerivativeError",
]

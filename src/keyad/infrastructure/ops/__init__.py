"""
Primitive operation library.

This package assembles the two public function tables:

- ``scalar`` : arithmetic/math lifted for Scalar outputs, the NaN/finite
  predicates and re-exported math constants,
- ``tensor`` : arithmetic/math lifted for Tensor outputs, the predicates,
  reductions (``sumreduce``, ``allreduce``, ``anyreduce``), shaping
  operations (``get``, ``to_scalars``, ``range``, ``split``,
  ``from_scalars``, ``concat``, ``reshape``) and ``softmax``.
"""

from ...domain._value import OutputKind
from ._math import make_functions, register_constants
from ._reduction import allreduce, anyreduce, sumreduce
from ._shaping import (
    concat,
    from_scalars,
    get,
    reshape,
    split,
    tensor_range,
    to_scalars,
)
from ._softmax import softmax
from ._table import FunctionTable

scalar = make_functions(OutputKind.SCALAR)
register_constants(scalar)

tensor = make_functions(OutputKind.TENSOR)
tensor.register("sumreduce", sumreduce)
tensor.register("allreduce", allreduce)
tensor.register("anyreduce", anyreduce)
tensor.register("get", get)
tensor.register("to_scalars", to_scalars)
tensor.register("range", tensor_range)
tensor.register("split", split)
tensor.register("from_scalars", from_scalars)
tensor.register("concat", concat)
tensor.register("reshape", reshape)
tensor.register("softmax", softmax)

__all__ = [
    FunctionTable.__name__,
    "scalar",
    "tensor",
]

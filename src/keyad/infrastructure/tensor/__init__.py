"""
Tensor value type and its backing storage.

Public API
----------
- ``Tensor``  : dense tensor view over a flat buffer
- ``Storage`` : shared buffer handle referenced by tensor views
"""

from ._storage import DEFAULT_DTYPE, Storage
from ._tensor import Tensor

__all__ = [
    Tensor.__name__,
    Storage.__name__,
    "DEFAULT_DTYPE",
]

"""
Graph- and tensor-related exceptions for keyad.

This module defines the custom errors raised by the tensor value type, the
derivative table and the shaping primitives. Every error derives from
`KeyADError` and, where a built-in exception already describes the failure
category, from that built-in as well, so callers can catch either the
framework-specific type or the familiar Python one.

These errors are raised at the primitive boundary and propagated unchanged
through lifted operations and the backward engine.
"""


class KeyADError(Exception):
    """
    Base class for all keyad errors.
    """


class ShapeMismatchError(KeyADError, ValueError):
    """
    Raised when an elementwise operation receives tensors of different shape.

    keyad performs no broadcasting between tensors: binary operations and
    copy-into require exact shape (or length) agreement.

    Attributes
    ----------
    op : str
        The name of the operation that was attempted (e.g., "add", "copy").
    shape_a : tuple[int, ...]
        Shape of the first operand.
    shape_b : tuple[int, ...]
        Shape of the second operand.
    """

    def __init__(self, op: str, shape_a: tuple, shape_b: tuple) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            The operation name.
        shape_a : tuple[int, ...]
            Shape of the first operand.
        shape_b : tuple[int, ...]
            Shape of the second operand.
        """
        super().__init__(f"{op}: shape mismatch {shape_a} vs {shape_b}.")
        self.op = op
        self.shape_a = tuple(shape_a)
        self.shape_b = tuple(shape_b)


class IndexOutOfBoundsError(KeyADError, IndexError):
    """
    Raised when a linear index or range falls outside a tensor's buffer.

    Indices are never clamped; `get`, `range` and `copy` fail fast instead.
    """

    def __init__(self, op: str, index, length: int) -> None:
        """
        Initialize the IndexOutOfBoundsError.

        Parameters
        ----------
        op : str
            The operation name (e.g., "get", "range").
        index : int or tuple[int, int]
            The offending index, or ``(start, end)`` for ranges.
        length : int
            Number of elements in the indexed tensor.
        """
        super().__init__(f"{op}: index {index!r} out of bounds for length {length}.")
        self.op = op
        self.index = index
        self.length = length


class InvalidReshapeError(KeyADError, ValueError):
    """
    Raised when a reshape would change the number of elements.
    """

    def __init__(self, shape_from: tuple, shape_to: tuple) -> None:
        super().__init__(f"Invalid reshape from {tuple(shape_from)} to {tuple(shape_to)}.")
        self.shape_from = tuple(shape_from)
        self.shape_to = tuple(shape_to)


class UnknownDerivativeError(KeyADError, KeyError):
    """
    Raised when the derivative table has no rule for an operation name.
    """

    def __init__(self, name: str, available: tuple) -> None:
        super().__init__(
            f"No derivative rule registered for {name!r}. "
            f"Available: {', '.join(available) or '<none>'}"
        )
        self.name = name

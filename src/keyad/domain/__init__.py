"""
Domain layer: value kinds, derivative-rule contracts and errors.

Nothing in this package depends on NumPy or on the concrete Tensor type.
"""

"""
Derivative rule table public API.

Importing this package registers the built-in rules for the arithmetic and
math primitives into `DerivativeTable` via import side effects.

Exports
-------
- DerivativeTable:
    Registry mapping operation names to (scalar, tensor) backward rules.
- LocalDerivativeRule:
    Rule implementation built from a local derivative function.
"""

from ._arithmetic import *
from ._transcendental import *
from ._base import DerivativeTable, LocalDerivativeRule, accumulate

__all__ = [
    DerivativeTable.__name__,
    LocalDerivativeRule.__name__,
    "accumulate",
]

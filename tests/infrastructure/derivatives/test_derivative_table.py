import unittest
import warnings

import numpy as np

from keyad.domain._errors import UnknownDerivativeError
from keyad.domain._value import OutputKind
from keyad.infrastructure._node import lift
from keyad.infrastructure.derivatives import (
    DerivativeTable,
    LocalDerivativeRule,
    accumulate,
)
from keyad.infrastructure.tensor import Tensor


class TestDerivativeTableRegistry(unittest.TestCase):
    def tearDown(self) -> None:
        DerivativeTable.RULES.pop("test.identity", None)

    def test_builtin_rules_registered(self):
        names = DerivativeTable.available()
        for name in ("neg", "add", "mul", "pow", "atan2", "sin", "sigmoid"):
            self.assertIn(name, names)
        self.assertEqual(list(names), sorted(names))

    def test_unknown_name_raises(self):
        with self.assertRaises(UnknownDerivativeError):
            DerivativeTable.get("no_such_op")
        with self.assertRaises(KeyError):
            DerivativeTable.get("no_such_op")

    def test_duplicate_registration_raises(self):
        DerivativeTable.register_rule("test.identity")(lambda y, x: 1.0)
        with self.assertRaises(ValueError):
            DerivativeTable.register_rule("test.identity")(lambda y, x: 2.0)

    def test_overwrite_warns_and_replaces(self):
        DerivativeTable.register_rule("test.identity")(lambda y, x: 1.0)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            DerivativeTable.register_rule("test.identity", overwrite=True)(
                lambda y, x: 2.0
            )
        self.assertTrue(any(issubclass(w.category, RuntimeWarning) for w in caught))
        self.assertEqual(DerivativeTable.get("test.identity").partials(0.0, 0.0), (2.0,))

    def test_empty_name_rejected(self):
        with self.assertRaises(ValueError):
            DerivativeTable.register("", LocalDerivativeRule(lambda y, x: 1.0, 1))

    def test_decorator_returns_function_unchanged(self):
        def f(y, x):
            return 1.0

        self.assertIs(DerivativeTable.register_rule("test.identity")(f), f)


class TestLocalDerivativeRule(unittest.TestCase):
    def test_arity_must_be_positive(self):
        with self.assertRaises(ValueError):
            LocalDerivativeRule(lambda y: (), 0)

    def test_partials_always_tuple(self):
        unary = LocalDerivativeRule(lambda y, x: 3.0, 1)
        binary = LocalDerivativeRule(lambda y, a, b: (b, a), 2)
        self.assertEqual(unary.partials(0.0, 1.0), (3.0,))
        self.assertEqual(binary.partials(0.0, 2.0, 5.0), (5.0, 2.0))
        self.assertEqual(binary.arity, 2)

    def test_select_halves(self):
        rule = DerivativeTable.get("mul")
        self.assertEqual(len(rule.select(OutputKind.SCALAR)), 2)
        self.assertIs(rule.select(OutputKind.SCALAR), rule.scalar())
        self.assertIs(rule.select(OutputKind.TENSOR), rule.tensor())


class TestAccumulate(unittest.TestCase):
    def test_scalar_parent_sums_tensor_contribution(self):
        s = lift(1.0)
        accumulate(s, np.array([1.0, 2.0, 3.0]))
        self.assertEqual(s.dx, 6.0)

    def test_tensor_parent_adds_elementwise(self):
        t = lift(Tensor.zeros(3))
        accumulate(t, np.array([1.0, 2.0, 3.0]))
        accumulate(t, np.array([1.0, 1.0, 1.0]))
        self.assertEqual(t.dx.tolist(), [2.0, 3.0, 4.0])


if __name__ == "__main__":
    unittest.main()

import math
import unittest
import warnings
from unittest import TestCase

import numpy as np

from keyad.infrastructure._engine import backprop
from keyad.infrastructure._node import Node, lift
from keyad.infrastructure.ops import scalar


# Inputs chosen inside each function's domain and away from kinks.
UNARY_POINTS = {
    "neg": 0.3,
    "floor": 0.3,
    "ceil": 0.3,
    "round": 0.3,
    "sqrt": 2.0,
    "exp": 0.5,
    "log": 1.5,
    "abs": -0.7,
    "sin": 0.3,
    "cos": 0.3,
    "tan": 0.3,
    "asin": 0.3,
    "acos": 0.3,
    "atan": 0.3,
    "sinh": 0.3,
    "cosh": 0.3,
    "tanh": 0.3,
    "asinh": 0.3,
    "acosh": 1.5,
    "atanh": 0.3,
    "sigmoid": 0.3,
}

BINARY_POINTS = {
    "add": (1.3, 0.7),
    "sub": (1.3, 0.7),
    "mul": (1.3, 0.7),
    "div": (1.3, 0.7),
    "pow": (1.3, 0.7),
    "min": (0.3, 0.8),
    "max": (0.3, 0.8),
    "atan2": (0.3, 0.8),
}


def central_diff(f, x: float, eps: float = 1e-6) -> float:
    return (f(x + eps) - f(x - eps)) / (2.0 * eps)


class TestScalarUnaryGradients(TestCase):
    def test_every_unary_matches_finite_difference(self):
        for name, x0 in UNARY_POINTS.items():
            with self.subTest(op=name):
                fn = scalar[name]
                x = lift(x0)
                y = fn(x)
                self.assertIsInstance(y, Node)
                self.assertAlmostEqual(y.x, fn(x0))
                backprop(y)
                expected = central_diff(fn, x0)
                np.testing.assert_allclose(x.dx, expected, rtol=1e-5, atol=1e-6)

    def test_forward_values(self):
        self.assertEqual(scalar.floor(1.7), 1.0)
        self.assertEqual(scalar.neg(2.0), -2.0)
        self.assertAlmostEqual(scalar.sigmoid(0.0), 0.5)
        self.assertAlmostEqual(scalar.atan2(1.0, 1.0), math.pi / 4)


class TestScalarBinaryGradients(TestCase):
    def test_every_binary_matches_finite_difference(self):
        for name, (a0, b0) in BINARY_POINTS.items():
            with self.subTest(op=name):
                fn = scalar[name]
                a = lift(a0)
                b = lift(b0)
                backprop(fn(a, b))
                np.testing.assert_allclose(
                    a.dx, central_diff(lambda v: fn(v, b0), a0), rtol=1e-5, atol=1e-6
                )
                np.testing.assert_allclose(
                    b.dx, central_diff(lambda v: fn(a0, v), b0), rtol=1e-5, atol=1e-6
                )

    def test_min_max_tie_routes_to_first_operand(self):
        for name in ("min", "max"):
            with self.subTest(op=name):
                a = lift(1.0)
                b = lift(1.0)
                backprop(scalar[name](a, b))
                self.assertEqual((a.dx, b.dx), (1.0, 0.0))

    def test_pow_exponent_gradient_zero_for_non_positive_base(self):
        b = lift(2.0)
        backprop(scalar.pow(-3.0, b))
        self.assertEqual(b.dx, 0.0)


class TestScalarIEEESemantics(TestCase):
    def test_domain_errors_produce_nan_and_inf(self):
        self.assertTrue(math.isnan(scalar.sqrt(-1.0)))
        self.assertTrue(math.isinf(scalar.div(1.0, 0.0)))
        self.assertTrue(scalar.is_nan(scalar.log(-1.0)))
        self.assertFalse(scalar.is_finite(scalar.log(0.0)))

    def test_domain_errors_emit_no_warnings(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            scalar.sqrt(-1.0)
            scalar.log(0.0)
            scalar.div(1.0, 0.0)
            scalar.exp(1000.0)
            x = lift(0.0)
            backprop(scalar.log(x))
        self.assertEqual([str(w.message) for w in caught], [])
        self.assertTrue(math.isinf(x.dx))


class TestScalarRound(TestCase):
    def test_halves_round_up(self):
        self.assertEqual([scalar.round(v) for v in (0.5, 2.5, -2.5)], [1.0, 3.0, -2.0])
        self.assertEqual([scalar.round(v) for v in (1.4, -1.6)], [1.0, -2.0])

    def test_gradient_is_zero(self):
        x = lift(2.5)
        backprop(scalar.round(x))
        self.assertEqual(x.dx, 0.0)


if __name__ == "__main__":
    unittest.main()

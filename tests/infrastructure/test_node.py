import unittest
from unittest import TestCase

import numpy as np

from keyad.domain._errors import ShapeMismatchError
from keyad.domain._value import ITensor
from keyad.infrastructure._node import (
    Node,
    derivative,
    is_lifted,
    lift,
    value,
    zeros_like,
)
from keyad.infrastructure.tensor import Tensor


class TestLift(TestCase):
    def test_lift_scalar_stores_float_and_zero_gradient(self):
        a = lift(3)
        self.assertIsInstance(a.x, float)
        self.assertEqual(a.x, 3.0)
        self.assertEqual(a.dx, 0.0)
        self.assertEqual(a.parents, ())
        self.assertEqual(a.name, "lift")
        self.assertFalse(a.is_tensor)

    def test_lift_tensor_allocates_separate_zero_gradient(self):
        x = Tensor.from_list([1, 2, 3, 4], (2, 2))
        a = lift(x)
        self.assertTrue(a.is_tensor)
        self.assertIsInstance(a.x, ITensor)
        self.assertIsInstance(a.dx, ITensor)
        self.assertIs(a.x, x)
        self.assertEqual(a.dx.shape, (2, 2))
        self.assertIsNot(a.dx.storage, x.storage)
        np.testing.assert_array_equal(a.dx.data, np.zeros(4))

    def test_lift_rejects_node(self):
        with self.assertRaises(TypeError):
            lift(lift(1.0))

    def test_creation_index_is_strictly_increasing(self):
        a = lift(1.0)
        b = lift(2.0)
        c = a + b
        self.assertLess(a.index, b.index)
        self.assertLess(b.index, c.index)

    def test_mismatched_gradient_shape_raises(self):
        with self.assertRaises(ShapeMismatchError):
            Node(Tensor.zeros(3), Tensor.zeros(2))
        with self.assertRaises(ShapeMismatchError):
            Node(Tensor.zeros(3), 0.0)

    def test_zeros_like(self):
        self.assertEqual(zeros_like(2.5), 0.0)
        z = zeros_like(Tensor.ones((2, 1)))
        self.assertEqual(z.shape, (2, 1))
        with self.assertRaises(TypeError):
            zeros_like("abc")


class TestAccessors(TestCase):
    def test_value_derivative_is_lifted(self):
        a = lift(2.0)
        a.dx = 5.0
        self.assertEqual(value(a), 2.0)
        self.assertEqual(value(7.0), 7.0)
        self.assertEqual(derivative(a), 5.0)
        self.assertTrue(is_lifted(a))
        self.assertFalse(is_lifted(2.0))

    def test_leaf_backward_is_noop(self):
        a = lift(2.0)
        a.dx = 1.0
        a.backward()
        self.assertEqual(a.dx, 1.0)


class TestOperators(TestCase):
    def test_scalar_operators(self):
        a = lift(3.0)
        b = lift(2.0)
        self.assertEqual((a + 2).x, 5.0)
        self.assertEqual((2 - a).x, -1.0)
        self.assertEqual((a * b).x, 6.0)
        self.assertEqual((a / b).x, 1.5)
        self.assertEqual((1 / b).x, 0.5)
        self.assertEqual((a ** 2).x, 9.0)
        self.assertEqual((2 ** b).x, 4.0)
        self.assertEqual((-a).x, -3.0)
        self.assertEqual((a * b).name, "scalar.mul")

    def test_tensor_operand_selects_tensor_table(self):
        t = lift(Tensor.from_list([1, 2, 3]))
        s = lift(2.0)
        y = t * s
        self.assertEqual(y.name, "tensor.mul")
        self.assertEqual(y.x.tolist(), [2.0, 4.0, 6.0])
        z = Tensor.from_list([1, 1, 1]) + s
        self.assertEqual(z.name, "tensor.add")
        self.assertEqual(z.parents, (s,))

    def test_raw_operands_are_not_parents(self):
        a = lift(1.0)
        y = a * 4.0
        self.assertEqual(y.parents, (a,))


if __name__ == "__main__":
    unittest.main()

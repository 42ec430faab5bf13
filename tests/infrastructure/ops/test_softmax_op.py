import unittest
from unittest import TestCase

import numpy as np

from keyad.infrastructure._engine import backprop, backward
from keyad.infrastructure._node import lift
from keyad.infrastructure.ops import tensor
from keyad.infrastructure.tensor import Tensor


def stable_softmax_np(x: np.ndarray) -> np.ndarray:
    e = np.exp(x - np.max(x))
    return e / np.sum(e)


def finite_diff_grad_x(loss_fn, x_np: np.ndarray, eps: float = 1e-6) -> np.ndarray:
    grad = np.zeros_like(x_np)
    for k in range(x_np.size):
        plus = x_np.copy()
        minus = x_np.copy()
        plus[k] += eps
        minus[k] -= eps
        grad[k] = (loss_fn(plus) - loss_fn(minus)) / (2.0 * eps)
    return grad


class TestSoftmaxForward(TestCase):
    def test_matches_numpy_and_sums_to_one(self):
        x = np.array([1.0, 2.0, 3.0, -4.0])
        y = tensor.softmax(lift(Tensor.from_numpy(x)))
        np.testing.assert_allclose(y.x.data, stable_softmax_np(x), rtol=1e-12)
        self.assertAlmostEqual(tensor.sumreduce(y.x), 1.0, places=12)

    def test_preserves_shape(self):
        y = tensor.softmax(Tensor.from_list([1, 2, 3, 4], (2, 2)))
        self.assertEqual(y.shape, (2, 2))
        self.assertAlmostEqual(y.sumreduce(), 1.0, places=12)

    def test_rejects_scalar(self):
        with self.assertRaises(TypeError):
            tensor.softmax(lift(1.0))


class TestSoftmaxBackward(TestCase):
    def test_uniform_upstream_gradient_cancels(self):
        x = lift(Tensor.from_list([1, 2, 3]))
        y = tensor.softmax(x)
        backprop(y)
        np.testing.assert_allclose(x.dx.data, np.zeros(3), atol=1e-12)

    def test_matches_finite_difference(self):
        w = np.array([0.3, -1.2, 0.7, 2.0])
        x0 = np.array([0.5, -0.1, 1.2, 0.0])

        def loss(x_np):
            return tensor.sumreduce(
                tensor.softmax(Tensor.from_numpy(x_np)) * Tensor.from_numpy(w)
            )

        x = lift(Tensor.from_numpy(x0))
        backprop(tensor.sumreduce(tensor.softmax(x) * Tensor.from_numpy(w)))
        np.testing.assert_allclose(
            x.dx.data, finite_diff_grad_x(loss, x0), rtol=1e-5, atol=1e-7
        )

    def test_jacobian_vector_product(self):
        x0 = np.array([0.1, 0.2, 0.3])
        g = np.array([1.0, 0.0, -2.0])
        x = lift(Tensor.from_numpy(x0))
        y = tensor.softmax(x)
        y.dx.data = g
        backward(y)
        s = stable_softmax_np(x0)
        jac = np.diag(s) - np.outer(s, s)
        np.testing.assert_allclose(x.dx.data, jac @ g, rtol=1e-12, atol=1e-14)


if __name__ == "__main__":
    unittest.main()

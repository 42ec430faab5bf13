"""
Backward engine.

Drives gradient propagation from a chosen output Node back through every
ancestor reachable via ``parents``.

Traversal order
---------------
Nodes are processed in strictly descending creation index. A Node can only
be built from Nodes that already exist, so every consumer of a Node has a
larger index than the Node itself; by the time a Node's `backward` runs its
``dx`` holds the contributions of all its consumers. This holds for any DAG,
including shared subexpressions (fan-out).

Notes
-----
- The engine never seeds gradients on its own (`backward`); callers either
  set the root's ``dx`` or use `backprop`, which seeds with ones first.
- Running `backward` on an unseeded root yields zero gradients; this is not
  an error.
- There is no cycle detection: graphs are acyclic by construction.
- Accumulation is not atomic. Concurrent passes over overlapping graphs need
  external synchronization.
"""

from __future__ import annotations

from operator import attrgetter
from typing import List

from ._node import Node
from .tensor._tensor import Tensor


def collect(root: Node) -> List[Node]:
    """
    Return every Node reachable from `root` (including `root`), each once.

    The walk is iterative, so arbitrarily deep graphs do not hit the
    interpreter recursion limit.

    Parameters
    ----------
    root : Node
        Output Node to start from.

    Returns
    -------
    list[Node]
        Reachable Nodes sorted by descending creation index.
    """
    if not isinstance(root, Node):
        raise TypeError(f"Expected a Node, got {type(root).__name__!r}")

    seen: set[int] = set()
    nodes: List[Node] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        nodes.append(node)
        stack.extend(node.parents)

    nodes.sort(key=attrgetter("index"), reverse=True)
    return nodes


def seed(node: Node) -> None:
    """
    Set a Node's gradient to the multiplicative identity.

    Tensor accumulators are filled in place so reshape views sharing the
    buffer observe the seed.
    """
    if isinstance(node.dx, Tensor):
        node.dx.fill(1.0)
    else:
        node.dx = 1.0


def backward(root: Node) -> None:
    """
    Propagate gradients from `root` into every ancestor's ``dx``.

    Each reachable Node's backward routine is invoked exactly once, in
    descending creation order. `root`'s ``dx`` must already hold the
    incoming gradient.
    """
    for node in collect(root):
        node.backward()


def backprop(root: Node) -> None:
    """
    Seed `root` with ones, then run `backward`.
    """
    seed(root)
    backward(root)


def zero_derivatives(root: Node) -> None:
    """
    Reset ``dx`` to zero for `root` and every ancestor.

    Use this before running another backward pass over Nodes that already
    hold gradients; accumulators are never cleared implicitly.
    """
    for node in collect(root):
        if isinstance(node.dx, Tensor):
            node.dx.fill(0.0)
        else:
            node.dx = 0.0

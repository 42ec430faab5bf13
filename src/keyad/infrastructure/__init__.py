"""
Infrastructure layer: the NumPy-backed Tensor, graph Nodes, the function
lifter, the backward engine and the primitive library.
"""

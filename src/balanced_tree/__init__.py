from .errors import EmptyTreeError, InvariantError
from .tree import BalancedTree, NodeView, Rotation, RotationObserver

__all__ = [
    "BalancedTree",
    "EmptyTreeError",
    "InvariantError",
    "NodeView",
    "Rotation",
    "RotationObserver",
]

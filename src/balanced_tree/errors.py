class EmptyTreeError(ValueError):
    """Raised when a min/max query is made on a tree with no keys."""


class InvariantError(RuntimeError):
    """Raised by BalancedTree.validate when a node breaks an AVL or BST invariant."""

    def __init__(self, key: object, reason: str) -> None:
        super().__init__(f"node {key!r}: {reason}")
        self.key = key
        self.reason = reason

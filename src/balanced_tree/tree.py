import logging
from enum import Enum
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

from .errors import EmptyTreeError, InvariantError

T = TypeVar('T')

logger = logging.getLogger(__name__)


class Rotation(Enum):
    LEFT = "left"
    RIGHT = "right"
    LEFT_RIGHT = "left-right"
    RIGHT_LEFT = "right-left"


# Called as observer(kind, pivot_key) each time a rotation fires.
RotationObserver = Callable[[Rotation, Any], None]


class BalancedTree(Generic[T]):
    """AVL tree of unique keys.

    Keys only need ``==`` and ``<``. An empty subtree has height -1 and a
    leaf has height 0. After every insert or remove each node's balance
    factor (left height minus right height) is in {-1, 0, 1}.

    ``on_rotation``, if given, is called with ``(Rotation, pivot_key)``
    for each rotation an insert or remove performed, once that operation
    has finished. A double rotation reports itself before its two single
    rotations.
    """

    class Node:
        def __init__(self, value: T) -> None:
            self.value: T = value
            self.left: Optional['BalancedTree.Node'] = None
            self.right: Optional['BalancedTree.Node'] = None
            self.height: int = 0

    def __init__(self, on_rotation: Optional[RotationObserver] = None) -> None:
        self._root: Optional[BalancedTree.Node] = None
        self._size: int = 0
        self._on_rotation = on_rotation
        self._rotations: List[Tuple[Rotation, Any]] = []

    def _get_height(self, node: Optional[Node]) -> int:
        if node is None:
            return -1
        return node.height

    def _get_balance(self, node: Optional[Node]) -> int:
        if node is None:
            return 0
        return self._get_height(node.left) - self._get_height(node.right)

    def _update_height(self, node: Node) -> Node:
        node.height = 1 + max(self._get_height(node.left), self._get_height(node.right))
        return node

    def _notify(self, kind: Rotation, pivot: Node) -> None:
        logger.debug("%s rotation at %r", kind.value, pivot.value)
        if self._on_rotation is not None:
            self._rotations.append((kind, pivot.value))

    def _flush_rotations(self) -> None:
        # observers only ever see the tree after the operation has finished
        events, self._rotations = self._rotations, []
        if self._on_rotation is None:
            return
        for kind, pivot in events:
            self._on_rotation(kind, pivot)

    def _rotate_left(self, k1: Node) -> Node:
        k2 = k1.right
        assert k2 is not None
        self._notify(Rotation.LEFT, k1)

        k1.right = k2.left
        k2.left = k1

        self._update_height(k1)
        self._update_height(k2)

        return k2

    def _rotate_right(self, k2: Node) -> Node:
        k1 = k2.left
        assert k1 is not None
        self._notify(Rotation.RIGHT, k2)

        k2.left = k1.right
        k1.right = k2

        self._update_height(k2)
        self._update_height(k1)

        return k1

    def _rotate_left_right(self, node: Node) -> Node:
        assert node.left is not None
        self._notify(Rotation.LEFT_RIGHT, node)
        node.left = self._rotate_left(node.left)
        return self._rotate_right(node)

    def _rotate_right_left(self, node: Node) -> Node:
        assert node.right is not None
        self._notify(Rotation.RIGHT_LEFT, node)
        node.right = self._rotate_right(node.right)
        return self._rotate_left(node)

    def _rebalance(self, node: Node) -> Node:
        balance = self._get_balance(node)

        # >= 0 and <= 0 keep a single rotation for the equal-height child case
        if balance > 1:
            if self._get_balance(node.left) >= 0:
                return self._rotate_right(node)
            return self._rotate_left_right(node)

        if balance < -1:
            if self._get_balance(node.right) <= 0:
                return self._rotate_left(node)
            return self._rotate_right_left(node)

        return node

    def _insert(self, node: Optional[Node], value: T) -> Node:
        if node is None:
            self._size += 1
            return BalancedTree.Node(value)

        if value == node.value:
            return node

        if value < node.value:
            node.left = self._insert(node.left, value)
        else:
            node.right = self._insert(node.right, value)

        return self._rebalance(self._update_height(node))

    def insert(self, value: T) -> None:
        self._rotations = []
        self._root = self._insert(self._root, value)
        self._flush_rotations()

    def _find_min_node(self, node: Node) -> Node:
        while node.left is not None:
            node = node.left
        return node

    def _find_max_node(self, node: Node) -> Node:
        while node.right is not None:
            node = node.right
        return node

    def _remove(self, node: Optional[Node], value: T) -> Optional[Node]:
        if node is None:
            return None

        if value == node.value:
            if node.left is None or node.right is None:
                # the surviving subtree is untouched, ancestors rebalance
                child = node.left if node.left is not None else node.right
                node.left = node.right = None
                self._size -= 1
                return child

            successor = self._find_min_node(node.right)
            node.value = successor.value
            node.right = self._remove(node.right, successor.value)
        elif value < node.value:
            node.left = self._remove(node.left, value)
        else:
            node.right = self._remove(node.right, value)

        return self._rebalance(self._update_height(node))

    def remove(self, value: T) -> None:
        self._rotations = []
        self._root = self._remove(self._root, value)
        self._flush_rotations()

    def contains(self, value: T) -> bool:
        node = self._root
        while node is not None:
            if value == node.value:
                return True
            node = node.left if value < node.value else node.right
        return False

    def find_min(self) -> T:
        if self._root is None:
            raise EmptyTreeError("min from empty tree")
        return self._find_min_node(self._root).value

    def find_max(self) -> T:
        if self._root is None:
            raise EmptyTreeError("max from empty tree")
        return self._find_max_node(self._root).value

    def size(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def height(self) -> int:
        return self._get_height(self._root)

    @property
    def root(self) -> Optional['NodeView[T]']:
        if self._root is None:
            return None
        return NodeView(self._root)

    def clear(self) -> None:
        # detach children before parents so every node is released once
        for node in self._post_order_nodes():
            node.left = None
            node.right = None
        self._root = None
        self._size = 0

    def traverse(self) -> List[T]:
        result: List[T] = []
        stack: List[BalancedTree.Node] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            result.append(node.value)
            node = node.right
        return result

    def pre_order(self) -> List[T]:
        result: List[T] = []
        if self._root is None:
            return result
        stack: List[BalancedTree.Node] = [self._root]
        while stack:
            node = stack.pop()
            result.append(node.value)
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)
        return result

    def _post_order_nodes(self) -> List[Node]:
        nodes: List[BalancedTree.Node] = []
        if self._root is None:
            return nodes
        stack: List[BalancedTree.Node] = [self._root]
        while stack:
            node = stack.pop()
            nodes.append(node)
            if node.left is not None:
                stack.append(node.left)
            if node.right is not None:
                stack.append(node.right)
        nodes.reverse()
        return nodes

    def post_order(self) -> List[T]:
        return [node.value for node in self._post_order_nodes()]

    def _clone_node(self, node: Node) -> Node:
        clone = BalancedTree.Node(node.value)
        clone.height = node.height
        return clone

    def copy(self) -> 'BalancedTree[T]':
        """Return an independent tree with the same shape and no observer."""
        clone: BalancedTree[T] = BalancedTree()
        if self._root is None:
            return clone
        clone._root = self._clone_node(self._root)
        clone._size = self._size
        stack: List[Tuple[BalancedTree.Node, BalancedTree.Node]] = [(self._root, clone._root)]
        while stack:
            source, target = stack.pop()
            if source.left is not None:
                target.left = self._clone_node(source.left)
                stack.append((source.left, target.left))
            if source.right is not None:
                target.right = self._clone_node(source.right)
                stack.append((source.right, target.right))
        return clone

    def _is_balanced(self, node: Optional[Node]) -> bool:
        if node is None:
            return True
        balance = self._get_balance(node)
        if abs(balance) > 1:
            return False
        return self._is_balanced(node.left) and self._is_balanced(node.right)

    def is_balanced(self) -> bool:
        return self._is_balanced(self._root)

    def _validate(self, node: Optional[Node], low: Optional[Node], high: Optional[Node]) -> int:
        if node is None:
            return -1
        if low is not None and not low.value < node.value:
            raise InvariantError(node.value, f"not greater than ancestor {low.value!r}")
        if high is not None and not node.value < high.value:
            raise InvariantError(node.value, f"not less than ancestor {high.value!r}")

        left_height = self._validate(node.left, low, node)
        right_height = self._validate(node.right, node, high)

        expected = 1 + max(left_height, right_height)
        if node.height != expected:
            raise InvariantError(node.value, f"cached height {node.height}, expected {expected}")
        if abs(left_height - right_height) > 1:
            raise InvariantError(node.value, f"balance factor {left_height - right_height}")
        return expected

    def validate(self) -> None:
        """Check cached heights, AVL balance and strict key order of every node.

        Raises InvariantError for the first offending node found.
        """
        self._validate(self._root, None, None)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, value: T) -> bool:
        return self.contains(value)

    def __iter__(self) -> Iterator[T]:
        return iter(self.traverse())

    def __repr__(self) -> str:
        return f"BalancedTree({self.traverse()})"

    def __str__(self) -> str:
        return f"BalancedTree(size={self._size}, height={self.height()})"


class NodeView(Generic[T]):
    """Read-only view of a tree node, for code that renders or inspects shape."""

    def __init__(self, node: BalancedTree.Node) -> None:
        self._node = node

    @property
    def key(self) -> T:
        return self._node.value

    @property
    def height(self) -> int:
        return self._node.height

    @property
    def balance(self) -> int:
        left, right = self._node.left, self._node.right
        left_height = left.height if left is not None else -1
        right_height = right.height if right is not None else -1
        return left_height - right_height

    @property
    def left(self) -> Optional['NodeView[T]']:
        if self._node.left is None:
            return None
        return NodeView(self._node.left)

    @property
    def right(self) -> Optional['NodeView[T]']:
        if self._node.right is None:
            return None
        return NodeView(self._node.right)

    def __repr__(self) -> str:
        return f"NodeView(key={self.key!r}, height={self.height}, balance={self.balance})"

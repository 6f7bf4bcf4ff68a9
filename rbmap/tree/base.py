from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import (
    Any,
    Generic,
    Iterable,
    Iterator,
    NamedTuple,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from .iter import TreeIter

K = TypeVar("K")
V = TypeVar("V")

logger = logging.getLogger(__name__)

_MISSING = object()


class Removal(NamedTuple):
    """Result of a structural removal.

    `removed` is the node that was physically spliced out of the tree. When the
    target had two children this is its in-order successor, not the node that
    held the key.
    """

    value: Any
    removed: "TreeNode"
    replacement: Optional["TreeNode"]
    parent: Optional["TreeNode"]
    was_left: bool


class TreeNode(Generic[K, V]):
    def __init__(
        self,
        key: K,
        tree: Tree[K, V],
        parent: Optional[TreeNode[K, V]],
        value: V = None,
    ):
        self._key: K = key
        self.value: V = value

        self_cls = self.__class__

        self._parent: Optional[self_cls[K, V]] = parent
        self._left: Optional[self_cls[K, V]] = None
        self._right: Optional[self_cls[K, V]] = None
        self._size: int = 1
        self._tree: Tree[K, V] = tree

    @classmethod
    def _placeholder(cls, tree: Tree[K, V]) -> TreeNode[K, V]:
        """Create a keyless stand-in for a vacated child slot.

        Placeholders count as an empty subtree (size 0) and are never left in a
        tree once the operation that created them has returned.
        """
        node = cls(None, tree, None)
        node._size = 0
        return node

    @property
    def key(self) -> K:
        """The key associated with this node.

        This property is immutable.
        """
        return self._key

    @property
    def size(self) -> int:
        """Number of nodes in the subtree rooted at this node."""
        return self._size

    @property
    def prev(self) -> Optional[TreeNode[K, V]]:
        """This node's in-order predecessor in the tree, if any."""
        if self._left is not None:
            return self._left._maximum()

        node = self
        while node._is_left_child():
            node = node._parent
        return node._parent

    @property
    def next(self) -> Optional[TreeNode[K, V]]:
        """This node's in-order successor in the tree, if any."""
        if self._right is not None:
            return self._right._minimum()

        node = self
        while node._is_right_child():
            node = node._parent
        return node._parent

    def _set_left_child(self, child: Optional[TreeNode[K, V]]):
        self._left = child
        if child is not None:
            child._parent = self

    def _set_right_child(self, child: Optional[TreeNode[K, V]]):
        self._right = child
        if child is not None:
            child._parent = self

    def _is_left_child(self) -> bool:
        return (self._parent is not None) and (self._parent._left is self)

    def _is_right_child(self) -> bool:
        return (self._parent is not None) and (self._parent._right is self)

    def _copy_data(self, other: TreeNode[K, V]):
        self._key = other._key
        self.value = other.value

    def _sibling(self) -> Optional[TreeNode[K, V]]:
        parent = self._parent
        if parent is None:
            return None
        elif parent._left is self:
            return parent._right
        else:
            return parent._left

    def _update_size(self):
        self._size = 1
        if self._left is not None:
            self._size += self._left._size
        if self._right is not None:
            self._size += self._right._size

    def _replace_with(
        self,
        parent: Optional[TreeNode[K, V]],
        was_left: bool,
        new_child: Optional[TreeNode[K, V]],
    ):
        """Put `new_child` into the slot under `parent` this node occupied."""
        if parent is not None:
            if was_left:
                parent._set_left_child(new_child)
            else:
                parent._set_right_child(new_child)
        else:
            # this was the root node:
            if new_child is not None:
                new_child._parent = None
            self._tree._root = new_child

    def _rotate_left(self) -> TreeNode[K, V]:
        """Promote this node's right child into its place.

        Returns the promoted node.
        """
        pivot: TreeNode[K, V] = self._right
        assert pivot is not None, "cannot rotate {} left without a right child".format(
            self.key
        )

        parent = self._parent
        was_left = self._is_left_child()

        self._set_right_child(pivot._left)
        pivot._set_left_child(self)
        self._replace_with(parent, was_left, pivot)

        self._update_size()
        pivot._update_size()
        return pivot

    def _rotate_right(self) -> TreeNode[K, V]:
        """Promote this node's left child into its place.

        Returns the promoted node.
        """
        pivot: TreeNode[K, V] = self._left
        assert pivot is not None, "cannot rotate {} right without a left child".format(
            self.key
        )

        parent = self._parent
        was_left = self._is_left_child()

        self._set_left_child(pivot._right)
        pivot._set_right_child(self)
        self._replace_with(parent, was_left, pivot)

        self._update_size()
        pivot._update_size()
        return pivot

    def _minimum(self) -> TreeNode[K, V]:
        node = self
        while node._left is not None:
            node = node._left
        return node

    def _maximum(self) -> TreeNode[K, V]:
        node = self
        while node._right is not None:
            node = node._right
        return node

    def _height(self) -> int:
        # level-by-level walk; an unbalanced tree can be deeper than the
        # recursion limit
        height = 0
        level = [self]
        while level:
            height += 1
            level = [
                child
                for node in level
                for child in (node._left, node._right)
                if child is not None
            ]
        return height

    def _find_node(self, key: K) -> Optional[TreeNode[K, V]]:
        cur = self
        while cur is not None:
            if cur.key == key:
                return cur
            elif key < cur.key:
                cur = cur._left
            else:
                cur = cur._right

        return None

    def _insert_node(self, key: K, value: V) -> Tuple[bool, TreeNode[K, V]]:
        """Attach a new node for `key` below this one.

        Every node on the descent path has its size bumped once the new node
        is in place. No repair is done here; callers run it once all sizes
        are consistent.
        """
        path = []
        cur = self
        while True:
            if cur.key == key:
                return (False, cur)

            path.append(cur)
            if key < cur.key:
                if cur._left is None:
                    node = self.__class__(key, self._tree, cur, value)
                    cur._set_left_child(node)
                    break
                cur = cur._left
            else:
                if cur._right is None:
                    node = self.__class__(key, self._tree, cur, value)
                    cur._set_right_child(node)
                    break
                cur = cur._right

        for ancestor in path:
            ancestor._size += 1
        return (True, node)

    def _remove(self) -> Removal:
        """Structurally remove this node's entry from the tree."""
        value = self.value
        target = self

        if self._left is not None and self._right is not None:
            target = self._right._minimum()
            logger.debug(
                "removing %r through its in-order successor %r", self.key, target.key
            )
            self._copy_data(target)

        replacement = target._left if target._left is not None else target._right
        parent = target._parent
        was_left = target._is_left_child()

        target._unlink(replacement)

        ancestor = parent
        while ancestor is not None:
            ancestor._size -= 1
            ancestor = ancestor._parent

        return Removal(value, target, replacement, parent, was_left)

    def _unlink(self, replace_with: Optional[TreeNode[K, V]] = None):
        self._replace_with(self._parent, self._is_left_child(), replace_with)

        self._tree = None
        self._parent = None
        self._left = None
        self._right = None

    def _print_subtree(self) -> str:
        """Render this subtree right side up: greatest key on the first line."""
        lines = []
        stack = []
        cur, level = self, 0
        while stack or cur is not None:
            while cur is not None:
                stack.append((cur, level))
                cur, level = cur._right, level + 1
            node, level = stack.pop()
            lines.append(("    " * level) + node._print_node() + "\n")
            cur, level = node._left, level + 1

        return "".join(lines)

    # methods for subclasses to override:

    def _print_node(self) -> str:
        return "{}: {!r}".format(self.key, self.value)

    def _repair_insert(self):
        pass


class Tree(Generic[K, V], MutableMapping):
    def __init__(
        self,
        items: Union[None, Mapping, Iterable[Tuple[K, V]]] = None,
        node_class: Type[TreeNode] = TreeNode,
    ):
        self._node_cls = node_class
        self._root: Optional[TreeNode[K, V]] = None

        if items is not None:
            if isinstance(items, Mapping):
                items = items.items()
            for k, v in items:
                self.put(k, v)

    def get_node(self, key: K) -> Optional[TreeNode[K, V]]:
        """Directly retrieve a node within this tree.

        Returns None if the tree does not contain the given key.
        """
        if self._root is None:
            return None
        return self._root._find_node(key)

    def put(self, key: K, val: V) -> Optional[V]:
        """Insert or overwrite the value stored under `key`.

        Returns the previous value, or None if the key was not present.
        Overwriting never restructures the tree.
        """
        node = self.get_node(key)
        if node is not None:
            old_val = node.value
            node.value = val
            return old_val

        if self._root is None:
            self._root = self._node_cls(key, self, None, val)
            node = self._root
        else:
            _, node = self._root._insert_node(key, val)

        node._repair_insert()
        self._after_mutation()
        return None

    def remove(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Remove `key` and return its value, or `default` if it is absent."""
        node = self.get_node(key)
        if node is None:
            return default
        return self._remove_node(node)

    def _remove_node(self, node: TreeNode[K, V]) -> V:
        removal = node._remove()
        self._repair_remove(removal)
        self._after_mutation()
        return removal.value

    def _first_node(self) -> TreeNode[K, V]:
        if self._root is None:
            raise IndexError("Tree is empty")
        return self._root._minimum()

    def _last_node(self) -> TreeNode[K, V]:
        if self._root is None:
            raise IndexError("Tree is empty")
        return self._root._maximum()

    def min(self) -> Tuple[K, V]:
        node = self._first_node()
        return (node.key, node.value)

    def max(self) -> Tuple[K, V]:
        node = self._last_node()
        return (node.key, node.value)

    def pop_min(self) -> Tuple[K, V]:
        node = self._first_node()
        k = node.key
        return (k, self._remove_node(node))

    def pop_max(self) -> Tuple[K, V]:
        node = self._last_node()
        k = node.key
        return (k, self._remove_node(node))

    def pop(self, key: K, default: Any = _MISSING) -> V:
        node = self.get_node(key)
        if node is None:
            if default is _MISSING:
                raise KeyError(key)
            return default
        return self._remove_node(node)

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        node = self.get_node(key)
        if node is None:
            return default
        return node.value

    def height(self) -> int:
        """Number of nodes on the longest path from the root to a leaf."""
        if self._root is None:
            return 0
        return self._root._height()

    def _do_iter(self, mode: int, reverse: bool = False) -> TreeIter:
        if self._root is None:
            return TreeIter(mode, None, reverse)
        elif reverse:
            return TreeIter(mode, self._root._maximum(), reverse)
        else:
            return TreeIter(mode, self._root._minimum(), reverse)

    def items(self, reverse: bool = False) -> Iterator[Tuple[K, V]]:
        return self._do_iter(TreeIter.ITEMS, reverse)

    def keys(self, reverse: bool = False) -> Iterator[K]:
        return self._do_iter(TreeIter.KEYS, reverse)

    def values(self, reverse: bool = False) -> Iterator[V]:
        return self._do_iter(TreeIter.VALS, reverse)

    def nodes(self, reverse: bool = False) -> Iterator[TreeNode[K, V]]:
        return self._do_iter(TreeIter.NODES, reverse)

    def print(self) -> str:
        if self._root is not None:
            return self._root._print_subtree()
        else:
            return "<empty tree>"

    # hooks for subclasses to override:

    def _repair_remove(self, removal: Removal):
        pass

    def _after_mutation(self):
        pass

    def __getitem__(self, key: K) -> V:
        node = self.get_node(key)
        if node is None:
            raise KeyError(key)
        return node.value

    def __setitem__(self, key: K, val: V):
        self.put(key, val)

    def __delitem__(self, key: K):
        node = self.get_node(key)
        if node is None:
            raise KeyError(key)
        self._remove_node(node)

    def __contains__(self, key: K) -> bool:
        return self.get_node(key) is not None

    def __iter__(self) -> Iterator[K]:
        return self.keys()

    def __reversed__(self) -> Iterator[K]:
        return self.keys(reverse=True)

    def __len__(self) -> int:
        if self._root is None:
            return 0
        return self._root._size

    def __repr__(self) -> str:
        return "{}({{{}}})".format(
            self.__class__.__name__,
            ", ".join("{!r}: {!r}".format(k, v) for k, v in self.items()),
        )

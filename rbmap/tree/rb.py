from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Iterable, Optional, Tuple, TypeVar, Union

from .base import Removal, Tree, TreeNode
from .check import black_height, verify_tree_integrity

K = TypeVar("K")
V = TypeVar("V")

logger = logging.getLogger(__name__)

# Default for RBTree(check_invariants=...). When enabled, every mutation is
# followed by a full invariant check.
CHECK_INVARIANTS = False


def is_red(node: Optional[RBNode]) -> bool:
    """Absent children count as black."""
    return node is not None and node._red


class RBTree(Tree):
    def __init__(
        self,
        items: Union[None, Mapping, Iterable[Tuple[K, V]]] = None,
        check_invariants: Optional[bool] = None,
    ):
        if check_invariants is None:
            check_invariants = CHECK_INVARIANTS
        self.check_invariants: bool = check_invariants
        super().__init__(items, RBNode)

    def _repair_remove(self, removal: Removal):
        # Taking a red node out of a path leaves every black height intact.
        if removal.removed._red:
            return

        node: Optional[RBNode[K, V]] = removal.replacement
        placeholder: Optional[RBNode[K, V]] = None

        if node is None:
            if removal.parent is None:
                # the tree is now empty
                return
            placeholder = RBNode._placeholder(self)
            if removal.was_left:
                removal.parent._set_left_child(placeholder)
            else:
                removal.parent._set_right_child(placeholder)
            node = placeholder

        node._repair_delete()

        if placeholder is not None:
            placeholder._unlink()

    def _after_mutation(self):
        if self.check_invariants:
            verify_tree_integrity(self)


class RBNode(TreeNode):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._red = self._parent is not None

    @classmethod
    def _placeholder(cls, tree: RBTree[K, V]) -> RBNode[K, V]:
        node = super()._placeholder(tree)
        node._red = False
        return node

    @property
    def red(self) -> bool:
        return self._red

    def _repair_insert(self):
        parent: Optional[RBNode[K, V]] = self._parent
        if parent is None:
            self._red = False
            return

        if not parent._red:
            return

        # A red parent is never the root, so the grandparent exists and is black.
        grandparent: RBNode[K, V] = parent._parent
        uncle: Optional[RBNode[K, V]] = parent._sibling()

        if is_red(uncle):
            parent._red = False
            uncle._red = False
            grandparent._red = True
            return grandparent._repair_insert()

        if parent._is_left_child():
            if self._is_right_child():
                parent._rotate_left()
                parent = self
            grandparent._rotate_right()
        else:
            if self._is_left_child():
                parent._rotate_right()
                parent = self
            grandparent._rotate_left()

        parent._red = False
        grandparent._red = True

    def _repair_delete(self):
        """Resolve a double-black deficiency at this node."""
        parent: Optional[RBNode[K, V]] = self._parent
        if parent is None or self._red:
            if parent is None:
                logger.debug("black height deficiency absorbed at the root")
            self._red = False
            return

        on_left = self._is_left_child()
        sibling: RBNode[K, V] = self._sibling()

        if sibling._red:
            sibling._red = False
            parent._red = True
            if on_left:
                parent._rotate_left()
            else:
                parent._rotate_right()
            sibling = self._sibling()

        if not is_red(sibling._left) and not is_red(sibling._right):
            sibling._red = True
            return parent._repair_delete()

        if on_left:
            near, far = sibling._left, sibling._right
        else:
            near, far = sibling._right, sibling._left

        if not is_red(far):
            near._red = False
            sibling._red = True
            if on_left:
                sibling._rotate_right()
            else:
                sibling._rotate_left()
            sibling = self._sibling()
            far = sibling._right if on_left else sibling._left

        far._red = False
        sibling._red = parent._red
        parent._red = False
        if on_left:
            parent._rotate_left()
        else:
            parent._rotate_right()

    def _print_node(self) -> str:
        return "{}: {!r} ({}, bh={})".format(
            self.key, self.value, "R" if self._red else "B", black_height(self)
        )

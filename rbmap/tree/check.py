"""Structural verification for red-black trees.

These checks walk the whole tree and are meant for tests and debugging, never
for the insert/remove control flow. Violations are reported by failing
assertions, so running under ``python -O`` disables them.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .rb import RBNode, RBTree

logger = logging.getLogger(__name__)


def _black_units(node: Optional[RBNode]) -> int:
    # an absent child counts as one black node
    if node is None or not node._red:
        return 1
    return 0


def black_height(node: Optional[RBNode]) -> int:
    """Count the black nodes on a path from `node` down to an absent child.

    The node itself is not counted, the absent child at the end is. Only the
    rightmost path is followed; on a valid tree every path gives the same
    answer.
    """
    if node is None:
        return 0
    child = node._right
    return _black_units(child) + black_height(child)


def verify_rb_integrity(
    cur: RBNode, seen_keys: dict, low=None, high=None
) -> int:
    """Recursively check the subtree rooted at `cur`.

    Returns the black height of the subtree, counting `cur` itself.
    """
    assert cur.key not in seen_keys, "encountered loop in tree pointers at node " + str(
        cur.key
    )
    seen_keys[cur.key] = cur.value

    assert low is None or low < cur.key, "key {} is not greater than {}".format(
        str(cur.key), str(low)
    )
    assert high is None or cur.key < high, "key {} is not less than {}".format(
        str(cur.key), str(high)
    )

    if cur._left is not None:
        assert (not cur._red) or (
            not cur._left._red
        ), "Red node {} has red left child {}".format(str(cur.key), str(cur._left.key))

        assert (
            cur._left._parent is cur
        ), "parent <> left child link broken at node {} (child = {})".format(
            str(cur.key), str(cur._left.key)
        )

        left_blk_height = verify_rb_integrity(cur._left, seen_keys, low, cur.key)
        left_size = cur._left._size
    else:
        left_blk_height = 1
        left_size = 0

    if cur._right is not None:
        assert (not cur._red) or (
            not cur._right._red
        ), "Red node {} has red right child {}".format(
            str(cur.key), str(cur._right.key)
        )

        assert (
            cur._right._parent is cur
        ), "parent <> right child link broken at node {} (child = {})".format(
            str(cur.key), str(cur._right.key)
        )
        right_blk_height = verify_rb_integrity(cur._right, seen_keys, cur.key, high)
        right_size = cur._right._size
    else:
        right_blk_height = 1
        right_size = 0

    assert (
        cur._size == 1 + left_size + right_size
    ), "node {} has size {}, expected {}".format(
        str(cur.key), cur._size, 1 + left_size + right_size
    )

    # Verify balance constraint
    assert (
        left_blk_height == right_blk_height
    ), "Left and right subtrees of {} have different black heights ({} != {})".format(
        str(cur.key), left_blk_height, right_blk_height
    )

    # Return black height of this subtree
    if cur._red:
        return left_blk_height
    else:
        return left_blk_height + 1


def verify_tree_integrity(tree: RBTree) -> dict:
    """Check every red-black invariant on `tree`.

    Returns the key/value pairs found by the traversal.
    """
    seen_keys = {}
    root = tree._root
    if root is not None:
        assert not root._red, "RBTree root is not black"
        assert root._parent is None, "RBTree root has a parent link"
        verify_rb_integrity(root, seen_keys)

    assert len(tree) == len(
        seen_keys
    ), "tree stored length differs from traversed number of nodes (got {}, expected {})".format(
        len(tree), len(seen_keys)
    )
    return seen_keys


def is_valid(tree: RBTree) -> bool:
    try:
        verify_tree_integrity(tree)
    except AssertionError as e:
        logger.warning("red-black invariant violated: %s", e)
        return False
    return True

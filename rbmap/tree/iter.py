from __future__ import annotations

from typing import Optional

from . import base


class TreeIter(object):
    """Walks a tree in key order by following in-order successor links.

    The tree must not be mutated while an iterator over it is live.
    """

    KEYS = 0
    VALS = 1
    ITEMS = 2
    NODES = 3

    def __init__(
        self,
        mode: int,
        start: Optional[base.TreeNode],
        rev: bool,
    ):
        self._rev: bool = rev
        self._mode: int = mode
        self._cur: Optional[base.TreeNode] = start

    def __iter__(self) -> TreeIter:
        return self

    def __next__(self):
        if self._cur is None:
            raise StopIteration()

        cur_node = self._cur

        if not self._rev:
            self._cur = cur_node.next
        else:
            self._cur = cur_node.prev

        if self._mode == TreeIter.KEYS:
            return cur_node.key
        elif self._mode == TreeIter.VALS:
            return cur_node.value
        elif self._mode == TreeIter.ITEMS:
            return (cur_node.key, cur_node.value)
        elif self._mode == TreeIter.NODES:
            return cur_node

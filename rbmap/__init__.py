from . import tree

from .tree import RBTree, Tree
from .tree.check import is_valid, verify_tree_integrity

__all__ = [
    "RBTree",
    "Tree",
    "is_valid",
    "verify_tree_integrity",
]

from .base import Tree, TreeNode, Removal
from .rb import RBTree, RBNode
from . import check

__all__ = ["Tree", "TreeNode", "Removal", "RBTree", "RBNode", "check"]

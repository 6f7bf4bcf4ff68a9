import logging

import numpy as np
from numpy import random
import pytest

from rbmap.tree import rb
from rbmap.tree.base import Tree
from rbmap.tree.rb import RBTree
from rbmap.tree.check import black_height, is_valid, verify_tree_integrity


SCENARIO_KEYS = [5, 3, 8, 1, 4, 7, 9]


@pytest.fixture
def scenario_tree():
    tree = RBTree()
    for k in SCENARIO_KEYS:
        tree.put(k, "v{}".format(k))
    return tree


def colors(tree):
    return {node.key: ("R" if node.red else "B") for node in tree.nodes()}


def test_first_insert_is_black():
    tree = RBTree()
    assert tree.put("x", 1) is None
    assert len(tree) == 1
    assert not tree._root.red
    verify_tree_integrity(tree)


def test_scenario_insert(scenario_tree):
    verify_tree_integrity(scenario_tree)
    assert not scenario_tree._root.red
    assert 8 in scenario_tree
    assert scenario_tree.get(3) == "v3"
    assert len(scenario_tree) == 7
    assert colors(scenario_tree) == {
        1: "R",
        3: "B",
        4: "R",
        5: "B",
        7: "R",
        8: "B",
        9: "R",
    }


def test_scenario_remove(scenario_tree):
    assert scenario_tree.remove(3) == "v3"
    assert len(scenario_tree) == 6
    assert 3 not in scenario_tree
    assert scenario_tree.get(4) == "v4"
    verify_tree_integrity(scenario_tree)
    assert list(scenario_tree) == [1, 4, 5, 7, 8, 9]


def test_put_overwrites_without_restructuring(scenario_tree):
    before = scenario_tree.print()
    assert scenario_tree.put(4, "new") == "v4"
    assert scenario_tree.put(4, "newer") == "new"
    assert scenario_tree[4] == "newer"
    assert len(scenario_tree) == 7
    assert scenario_tree.print() == before.replace("'v4'", "'newer'")


def test_remove_absent_key(scenario_tree):
    assert scenario_tree.remove(42) is None
    assert scenario_tree.remove(42, "gone") == "gone"
    assert len(scenario_tree) == 7
    verify_tree_integrity(scenario_tree)


def test_remove_last_entry():
    tree = RBTree({"only": 1})
    assert tree.remove("only") == 1
    assert len(tree) == 0
    assert tree._root is None
    assert tree.height() == 0
    assert tree.print() == "<empty tree>"


def test_black_leaf_removal_uses_transient_placeholder():
    tree = RBTree()
    for k in [1, 2, 3, 4]:
        tree[k] = k

    # 2 (B) with children 1 (B) and 3 (B), and 4 (R) below 3
    assert colors(tree) == {1: "B", 2: "B", 3: "B", 4: "R"}

    del tree[1]

    verify_tree_integrity(tree)
    root = tree._root
    assert root.key == 3
    assert root._left.key == 2
    assert root._left._left is None
    assert root._left._right is None
    assert root._right.key == 4
    assert [n.size for n in tree.nodes()] == [1, 3, 1]
    assert all(n.key is not None for n in tree.nodes())
    assert colors(tree) == {2: "B", 3: "B", 4: "B"}


def test_sequential_inserts_stay_logarithmic():
    tree = RBTree()
    baseline = Tree()
    for k in range(100):
        tree[k] = k
        baseline[k] = k

    verify_tree_integrity(tree)
    assert tree.height() <= 2 * np.log2(101)
    assert baseline.height() == 100


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_shuffled_inserts_and_removals(seed):
    rng = random.default_rng(seed)
    n = 300
    tree = RBTree(check_invariants=True)
    model = {}

    for k in rng.permutation(n):
        k = int(k)
        tree[k] = -k
        model[k] = -k
        assert tree.height() <= 2 * np.log2(len(tree) + 1)

    assert dict(tree.items()) == model

    for k in rng.permutation(n):
        k = int(k)
        size = len(tree)
        assert tree.remove(k) == model.pop(k)
        assert len(tree) == size - 1
        assert k not in tree

    assert len(tree) == 0


def test_rotations_update_links_and_sizes():
    tree = Tree()
    for k in [2, 1, 4, 3, 5]:
        tree[k] = k

    old_root = tree._root
    pivot = old_root._rotate_left()

    assert tree._root is pivot
    assert pivot.key == 4 and pivot._parent is None
    assert pivot._left is old_root and old_root._parent is pivot
    assert old_root._right.key == 3 and old_root._right._parent is old_root
    assert old_root.size == 3
    assert pivot.size == 5
    assert list(tree) == [1, 2, 3, 4, 5]

    assert pivot._rotate_right() is old_root
    assert tree._root is old_root
    assert old_root._right is pivot and pivot._left.key == 3
    assert pivot.size == 3
    assert old_root.size == 5


def test_rotation_requires_child():
    tree = Tree({1: "a"})
    with pytest.raises(AssertionError):
        tree._root._rotate_left()
    with pytest.raises(AssertionError):
        tree._root._rotate_right()


def test_checker_detects_corruption(scenario_tree, caplog):
    assert is_valid(scenario_tree)

    scenario_tree._root._red = True
    with pytest.raises(AssertionError, match="root is not black"):
        verify_tree_integrity(scenario_tree)

    with caplog.at_level(logging.WARNING, logger="rbmap.tree.check"):
        assert not is_valid(scenario_tree)
    assert "invariant violated" in caplog.text

    scenario_tree._root._red = False
    scenario_tree._root._left._red = True
    with pytest.raises(AssertionError, match="Red node 3 has red left child 1"):
        verify_tree_integrity(scenario_tree)

    scenario_tree._root._left._red = False
    scenario_tree._root._left._left._red = False
    with pytest.raises(AssertionError, match="different black heights"):
        verify_tree_integrity(scenario_tree)


def test_checker_detects_bad_size(scenario_tree):
    scenario_tree._root._right._size = 7
    with pytest.raises(AssertionError, match="has size 7"):
        verify_tree_integrity(scenario_tree)


def test_black_height(scenario_tree):
    assert black_height(None) == 0
    assert black_height(scenario_tree._root) == 2
    assert black_height(scenario_tree._root._left) == 1
    assert black_height(scenario_tree.get_node(1)) == 1


def test_check_invariants_default(monkeypatch):
    assert not RBTree().check_invariants
    monkeypatch.setattr(rb, "CHECK_INVARIANTS", True)
    assert RBTree().check_invariants
    assert not RBTree(check_invariants=False).check_invariants


def test_check_invariants_runs_after_mutation():
    tree = RBTree({1: "a", 2: "b", 3: "c"}, check_invariants=True)
    tree._root._size = 99
    with pytest.raises(AssertionError):
        tree[10] = "j"


def test_print():
    tree = RBTree([(5, "five"), (3, "three"), (8, "eight")])
    assert tree.print() == (
        "    8: 'eight' (R, bh=1)\n"
        "5: 'five' (B, bh=1)\n"
        "    3: 'three' (R, bh=1)\n"
    )


def test_successor_splice_is_logged(scenario_tree, caplog):
    with caplog.at_level(logging.DEBUG, logger="rbmap.tree.base"):
        scenario_tree.remove(5)
    assert "removing 5 through its in-order successor 7" in caplog.text
    verify_tree_integrity(scenario_tree)


def test_mapping_protocol():
    tree = RBTree({3: "c", 1: "a"})
    tree.update({2: "b"})
    assert tree == {1: "a", 2: "b", 3: "c"}
    assert repr(tree) == "RBTree({1: 'a', 2: 'b', 3: 'c'})"
    assert list(tree.values()) == ["a", "b", "c"]
    assert list(tree.keys(reverse=True)) == [3, 2, 1]
    assert tree.setdefault(0, "z") == "z"
    assert tree.min() == (0, "z")
    assert tree.max() == (3, "c")
    assert tree.pop_min() == (0, "z")
    assert tree.pop_max() == (3, "c")
    verify_tree_integrity(tree)

    tree.clear()
    assert len(tree) == 0
    with pytest.raises(IndexError):
        tree.min()

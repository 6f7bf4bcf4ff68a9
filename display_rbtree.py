import logging
import time

import numpy as np
from numpy import random

from rbmap import RBTree, is_valid
from rbmap.tree.check import black_height


def display_tree(tree: RBTree):
    print(tree.print().rstrip("\n"))
    print("---------------")
    print("size: {}, height: {}".format(len(tree), tree.height()))
    print("black height: {}".format(black_height(tree._root)))
    print("passed invariant check: {}".format(is_valid(tree)))


def shuffled_height(n: int, seed: int) -> int:
    rng = random.default_rng(seed)
    tree = RBTree()

    for k in rng.permutation(n):
        tree[int(k)] = None

    return tree.height()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    start = time.perf_counter()

    tree = RBTree()
    word = "balanced"

    for i, c in enumerate(word):
        tree.put(c, i)
        print("Inserted {!r}:".format(c))
        display_tree(tree)
        print("\n")

    for c in word:
        tree.remove(c)
        print("Removed {!r}:".format(c))
        display_tree(tree)
        print("\n")

    for n in (10, 100, 1000, 10000):
        bound = 2 * np.log2(n + 1)
        print(
            "n={:<6d} height={:<3d} bound={:.1f}".format(
                n, shuffled_height(n, seed=n), bound
            )
        )

    end = time.perf_counter()
    print("Time in seconds: {:.4f}".format(end - start))

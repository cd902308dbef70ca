"""
HierarchicalAggregator module.

Folds classification key tuples into a tree of AggregationNode objects whose
depth is given purely by the length of the inserted tuples.
"""
import logging
import threading
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from aggregator.model import AggregationNode

logger = logging.getLogger(__name__)


class HierarchicalAggregator:
    """Arbitrary-depth grouped counter keyed by tuples of strings.

    Nodes are created lazily the first time a key path is seen. Counts are
    only ever incremented; nothing is deleted. `insert` is serialized by a
    lock so several producer threads may share one instance.
    """

    def __init__(self) -> None:
        self.root = AggregationNode()
        self._lock = threading.RLock()
        self.documents_inserted = 0

    def _walk_or_create(self, keys: Sequence[str]) -> AggregationNode:
        node = self.root
        for key in keys:
            child = node.children.get(key)
            if child is None:
                child = AggregationNode(key=key)
                node.children[key] = child
            node = child
        return node

    def _record(self, keys: Sequence[str], auxiliary: Any = None) -> AggregationNode:
        if not keys:
            raise ValueError("Cannot insert an empty key tuple.")

        with self._lock:
            node = self._walk_or_create(keys)
            node.count += 1
            if auxiliary is not None:
                node.items.append(auxiliary)
        return node

    def insert(self, keys: Sequence[str], auxiliary: Any = None) -> AggregationNode:
        """Records one document under `keys`; `auxiliary` is appended to the terminal node's items."""
        with self._lock:
            node = self._record(keys, auxiliary)
            self.documents_inserted += 1
        return node

    def node_at(self, keys: Sequence[str]) -> Optional[AggregationNode]:
        """Returns the node at the given key path without creating anything."""
        node = self.root
        for key in keys:
            node = node.children.get(key)
            if node is None:
                return None
        return node

    def total_at(self, node: Optional[AggregationNode] = None) -> int:
        """Sum of `count` over the whole subtree of `node` (the root by default)."""
        start = self.root if node is None else node
        total = 0
        stack = [start]
        while stack:
            current = stack.pop()
            total += current.count
            stack.extend(current.children.values())
        return total

    def iter_leaves(self) -> Iterator[Tuple[Tuple[str, ...], AggregationNode]]:
        """Yields (key path, node) for every node with a non-zero count, in sorted key order."""

        def _visit(node: AggregationNode, path: Tuple[str, ...]):
            if node.count and path:
                yield path, node
            for child in node.sorted_children():
                yield from _visit(child, path + (child.key,))

        yield from _visit(self.root, ())

    def depth(self) -> int:
        """Length of the longest key path stored so far."""
        deepest = 0
        stack: List[Tuple[AggregationNode, int]] = [(self.root, 0)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((c, level + 1) for c in node.children.values())
        return deepest

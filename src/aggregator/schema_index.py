# src/aggregator/schema_index.py
import logging
from typing import Dict, List, Optional, Tuple

from aggregator.hierarchy import HierarchicalAggregator
from descriptor.model import ElementNode

logger = logging.getLogger(__name__)


class SchemaIndex(HierarchicalAggregator):
    """
    Corpus-wide element/attribute vocabulary inferred from parsed trees.

    Every element name is a depth-1 key of the aggregator, so its `count` is
    the number of occurrences of that element. The element's node also keeps
    the child elements seen directly below it and the attributes seen on it.
    """

    def __init__(self) -> None:
        super().__init__()
        self._attribute_counts: Dict[str, int] = {}

    def observe(self, root: Optional[ElementNode]) -> None:
        """Walks `root` in document order, keeping an explicit stack of ancestor names."""
        if root is None:
            return

        stack: List[Tuple[ElementNode, Optional[str]]] = [(root, None)]
        with self._lock:
            while stack:
                element, parent_name = stack.pop()

                node = self._record((element.name,))
                if parent_name is not None:
                    parent = self.node_at((parent_name,))
                    parent.child_element_counts[element.name] = parent.child_element_counts.get(element.name, 0) + 1

                for attr in element.attributes:
                    self._attribute_counts[attr] = self._attribute_counts.get(attr, 0) + 1
                    node.attribute_counts[attr] = node.attribute_counts.get(attr, 0) + 1

                stack.extend((child, element.name) for child in reversed(element.children))

            self.documents_inserted += 1

    @property
    def documents_observed(self) -> int:
        """Number of documents walked by `observe`; each counts once however many elements it holds."""
        return self.documents_inserted

    @property
    def element_counts(self) -> Dict[str, int]:
        return {key: node.count for key, node in sorted(self.root.children.items())}

    @property
    def attribute_counts(self) -> Dict[str, int]:
        return dict(sorted(self._attribute_counts.items()))

    def child_counts(self, parent: str) -> Dict[str, int]:
        node = self.node_at((parent,))
        return dict(sorted(node.child_element_counts.items())) if node else {}

    def element_attribute_counts(self, element: str) -> Dict[str, int]:
        node = self.node_at((element,))
        return dict(sorted(node.attribute_counts.items())) if node else {}

    def parents(self) -> List[str]:
        """Element names that were seen with at least one child element."""
        return sorted(k for k, n in self.root.children.items() if n.child_element_counts)

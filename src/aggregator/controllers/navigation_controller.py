import logging
from typing import Any, Dict, List, Sequence, Tuple

from aggregator.collectors import ModuleClassifier
from aggregator.model import AggregationNode, ModuleRecord, NavigationNode
from descriptor.model import ElementNode

logger = logging.getLogger(__name__)

# Node type of a grouping level, by the key label it was built from.
LABEL_TYPES = {
    "GroupOwner": "owner",
    "classification": "classification",
    "type": "type",
}
GROUP_TYPES = ("root", "owner", "classification", "type", "group")


class NavigationController:
    """
    Projects a ModuleClassifier into a tree of NavigationNode objects for
    interactive expand/collapse views. The projection copies what it needs,
    so display code never holds on to aggregation state.
    """

    def build_tree(self, classifier: ModuleClassifier) -> NavigationNode:
        aggregator = classifier.aggregator
        root = NavigationNode(label="Modules", node_type="root", count=aggregator.total_at())
        root.children = self._group_children(classifier, aggregator.root, level=0)
        return root

    def _group_children(self, classifier: ModuleClassifier, node: AggregationNode, level: int) -> List[NavigationNode]:
        labels = classifier.labels
        # The last key of every tuple is the module name.
        if level >= len(labels) - 1:
            modules: List[NavigationNode] = []
            for child in node.sorted_children():
                modules.extend(self._module_nodes(child))
            return sorted(modules, key=lambda m: (m.label, m.path or ""))

        node_type = LABEL_TYPES.get(labels[level], "group")
        groups = []
        for child in node.sorted_children():
            group = NavigationNode(
                label=child.key,
                node_type=node_type,
                value=child.key,
                count=classifier.aggregator.total_at(child),
            )
            group.children = self._group_children(classifier, child, level + 1)
            groups.append(group)
        return groups

    def _module_nodes(self, node: AggregationNode) -> List[NavigationNode]:
        records = [r for r in node.items if isinstance(r, ModuleRecord)]
        if not records:
            return [NavigationNode(label=node.key, node_type="module", value=node.key, count=node.count)]

        out = []
        for record in records:
            module = NavigationNode(
                label=node.key,
                node_type="module",
                value=node.key,
                count=1,
                path=record.relative_path,
            )
            if record.root is not None:
                module.attributes = dict(record.root.attributes)
                module.children = self._element_nodes(record.root.children)
            out.append(module)
        return out

    @staticmethod
    def _element_nodes(elements: Sequence[ElementNode]) -> List[NavigationNode]:
        """Copies element subtrees in document order, keeping an explicit stack of pending elements."""
        top: List[NavigationNode] = []
        stack: List[Tuple[ElementNode, List[NavigationNode]]] = [(e, top) for e in reversed(elements)]
        while stack:
            element, siblings = stack.pop()
            node = NavigationNode(
                label=element.name,
                node_type="element",
                value=element.text,
                attributes=dict(element.attributes),
            )
            siblings.append(node)
            stack.extend((child, node.children) for child in reversed(element.children))
        return top

    @staticmethod
    def _jstree_entry(node: NavigationNode, opened: bool) -> Dict[str, Any]:
        text = node.label
        if node.node_type in GROUP_TYPES:
            text = f"{node.label} ({node.count})"
        elif node.value and node.node_type == "element":
            text = f"{node.label}: {node.value}"

        return {
            "text": text,
            "state": {"opened": opened},
            "data": {
                "type": node.node_type,
                "value": node.value,
                "path": node.path,
                "attributes": dict(sorted(node.attributes.items())),
            },
            "children": [],
        }

    def to_jstree(self, node: NavigationNode, open_depth: int = 1) -> Dict[str, Any]:
        """Converts a navigation tree into jsTree-style nested dictionaries."""
        out: List[Dict[str, Any]] = []
        stack: List[Tuple[NavigationNode, int, List[Dict[str, Any]]]] = [(node, 0, out)]
        while stack:
            current, depth, siblings = stack.pop()
            entry = self._jstree_entry(current, depth < open_depth)
            siblings.append(entry)
            stack.extend((child, depth + 1, entry["children"]) for child in reversed(current.children))
        return out[0]

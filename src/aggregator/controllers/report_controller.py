import logging
from typing import List, Optional

import pandas as pd

from aggregator.collectors import ModuleClassifier
from aggregator.model import AggregationNode
from aggregator.schema_index import SchemaIndex

logger = logging.getLogger(__name__)


class ReportController:
    """
    Renders flat text reports and DataFrames from a finished aggregation.
    All methods are pure reads of the aggregated state.
    """

    def __init__(self, hierarchy_width: int = 80, schema_width: int = 70):
        self.hierarchy_width = hierarchy_width
        self.schema_width = schema_width

    # --- MODULE HIERARCHY ---

    def _hierarchy_lines(self, classifier: ModuleClassifier, node: AggregationNode, level: int) -> List[str]:
        lines = [f"{'  ' * level}{node.key} [{classifier.aggregator.total_at(node)}]"]
        for child in node.sorted_children():
            lines.extend(self._hierarchy_lines(classifier, child, level + 1))
        return lines

    def render_hierarchy(self, classifier: ModuleClassifier) -> str:
        """Indented 'key [total]' dump of every level, sorted by key."""
        bar = "=" * self.hierarchy_width
        lines: List[str] = []

        if classifier.incomplete > 0:
            lines += [
                "",
                f"WARNING: Found {classifier.incomplete} file(s) with incomplete data (see warnings above).",
                "",
            ]

        lines += [bar, "MODULE HIERARCHY", bar, ""]
        for owner in classifier.aggregator.root.sorted_children():
            lines.extend(self._hierarchy_lines(classifier, owner, 0))
            lines.append("")
        lines.append(bar)
        return "\n".join(lines)

    def leaf_frame(self, classifier: ModuleClassifier) -> pd.DataFrame:
        """One row per classification key tuple with its count, sorted by key."""
        columns = list(classifier.labels) + ["count"]
        rows = []
        for path, node in classifier.aggregator.iter_leaves():
            padded = list(path) + [None] * (len(classifier.labels) - len(path))
            rows.append(padded[:len(classifier.labels)] + [node.count])
        return pd.DataFrame(rows, columns=columns)

    # --- SCHEMA ---

    def _vocabulary(self, title: str, counts: dict, marker: str) -> List[str]:
        lines = [f"  {title}:"]
        for name, count in counts.items():
            lines.append(f"    {marker} {name:<35}: {count} instances")
        return lines

    def render_schema(self, index: SchemaIndex) -> str:
        """Element/attribute vocabulary, then per-element children and attributes."""
        bar = "=" * self.schema_width
        rule = "-" * self.schema_width
        lines = [bar, "XML ANALYSIS RESULTS", bar, ""]

        lines += ["ALL XML ELEMENTS DISCOVERED:", rule]
        lines += [f"{name:<40}: {count} instances" for name, count in index.element_counts.items()]
        lines.append("")

        lines += ["ALL ATTRIBUTES DISCOVERED:", rule]
        lines += [f"{name:<40}: {count} instances" for name, count in index.attribute_counts.items()]
        lines.append("")

        lines += ["HIERARCHICAL STRUCTURE:", rule]
        parents = index.parents()
        for element in parents:
            lines += ["", f"Element: {element}"]
            lines += self._vocabulary("Contains child elements", index.child_counts(element), "-")
            attrs = index.element_attribute_counts(element)
            if attrs:
                lines += self._vocabulary("Has attributes", attrs, "@")

        # Leaf elements that still carry attributes
        for element in index.element_counts:
            if element in parents:
                continue
            attrs = index.element_attribute_counts(element)
            if attrs:
                lines += ["", f"Element: {element}"]
                lines += self._vocabulary("Has attributes", attrs, "@")

        lines += [
            "",
            bar,
            "SUMMARY:",
            f"  Total unique elements: {len(index.element_counts)}",
            f"  Total unique attributes: {len(index.attribute_counts)}",
            bar,
        ]
        return "\n".join(lines)

    def schema_frame(self, index: SchemaIndex, element: Optional[str] = None) -> pd.DataFrame:
        """Rows of (element, relation, name, count); relation is 'element', 'child' or 'attribute'."""
        rows = []
        for name, count in index.element_counts.items():
            if element is not None and name != element:
                continue
            rows.append((name, "element", name, count))
            rows.extend((name, "child", c, n) for c, n in index.child_counts(name).items())
            rows.extend((name, "attribute", a, n) for a, n in index.element_attribute_counts(name).items())
        return pd.DataFrame(rows, columns=["element", "relation", "name", "count"])

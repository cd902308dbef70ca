# src/aggregator/model.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from descriptor.model import ElementNode


class AggregationNode(BaseModel):
    """
    One level of the running hierarchical count structure.

    `count` holds the occurrences that terminate exactly at this node; the
    total below a node is computed by the aggregator. The two vocabulary
    counters are filled by the SchemaIndex.
    """
    key: str = ""
    count: int = 0
    children: Dict[str, AggregationNode] = Field(default_factory=dict)
    items: List[Any] = Field(default_factory=list)
    child_element_counts: Dict[str, int] = Field(default_factory=dict)
    attribute_counts: Dict[str, int] = Field(default_factory=dict)

    def sorted_children(self) -> List[AggregationNode]:
        return [self.children[k] for k in sorted(self.children)]


class ModuleRecord(BaseModel):
    """A parsed module kept for the navigation view."""
    relative_path: str
    keys: Tuple[str, ...]
    root: Optional[ElementNode] = None


NodeType = Literal["root", "owner", "classification", "type", "group", "module", "element"]


class NavigationNode(BaseModel):
    """Display node of the navigable tree; holds copies of model data, never the model itself."""
    label: str
    node_type: NodeType
    value: Optional[str] = None
    count: int = 0
    path: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)
    children: List[NavigationNode] = Field(default_factory=list)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

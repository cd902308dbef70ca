# src/modscan_shell/core/managers/navigator_manager.py
import logging
from typing import List, Optional

from aggregator.model import NavigationNode

logger = logging.getLogger(__name__)


class NavigatorManager:
    """
    Keeps a cursor into a navigation tree. The tree itself is plain data
    produced by the NavigationController; this class only moves through it.
    """

    def __init__(self):
        self.root: Optional[NavigationNode] = None
        self._trail: List[NavigationNode] = []

    @property
    def is_loaded(self) -> bool:
        return self.root is not None

    def load(self, root: NavigationNode) -> None:
        self.root = root
        self._trail = [root]
        logger.debug("Navigator loaded with %d top-level node(s).", len(root.children))

    @property
    def current(self) -> Optional[NavigationNode]:
        return self._trail[-1] if self._trail else None

    @property
    def location(self) -> str:
        return "/" + "/".join(n.label for n in self._trail[1:])

    def find_child(self, selector: str) -> Optional[NavigationNode]:
        """Resolves a child of the current node by 1-based index or exact label."""
        node = self.current
        if node is None:
            return None
        if selector.isdigit():
            idx = int(selector) - 1
            if 0 <= idx < len(node.children):
                return node.children[idx]
            return None
        for child in node.children:
            if child.label == selector:
                return child
        return None

    def enter(self, selector: str) -> Optional[NavigationNode]:
        if selector == "/":
            self._trail = self._trail[:1]
            return self.current
        if selector == "..":
            return self.up()
        child = self.find_child(selector)
        if child is not None:
            self._trail.append(child)
        return child

    def up(self) -> Optional[NavigationNode]:
        if len(self._trail) > 1:
            self._trail.pop()
        return self.current

"""Index-addressed outline tree built during a single parse pass."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .models import ContentBlock


@dataclass
class TreeNode:
    """One outline position in an ECCN.

    ``parent`` and ``children`` hold arena indices; children are owned by the
    parent and kept in document order.
    """

    identifier: Optional[str]
    heading: Optional[str] = None
    content: List[ContentBlock] = field(default_factory=list)
    children: List[int] = field(default_factory=list)
    parent: Optional[int] = None
    path: List[str] = field(default_factory=list)
    requires_all_children: bool = False


class EccnTree:
    """Arena of :class:`TreeNode` objects for one ECCN, root at index 0."""

    ROOT = 0

    def __init__(self, code: str, heading: Optional[str] = None):
        self.code = code
        self.nodes: List[TreeNode] = [TreeNode(identifier=code, heading=heading or None)]
        self._by_path: Dict[str, int] = {"": self.ROOT}

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> TreeNode:
        return self.nodes[index]

    @property
    def root(self) -> TreeNode:
        return self.nodes[self.ROOT]

    def add_child(self, parent: int, segment: str, heading: Optional[str] = None) -> int:
        """Append a child one segment below ``parent`` and return its index."""
        parent_node = self.nodes[parent]
        path = parent_node.path + [segment]
        node = TreeNode(
            identifier=f"{parent_node.identifier}.{segment}",
            heading=heading or None,
            parent=parent,
            path=path,
        )
        index = len(self.nodes)
        self.nodes.append(node)
        parent_node.children.append(index)
        self._by_path[".".join(path)] = index
        return index

    def find(self, path: List[str]) -> Optional[int]:
        return self._by_path.get(".".join(path))

    def ensure_path(self, path: List[str]) -> int:
        """Return the node at ``path``, creating missing intermediate nodes."""
        current = self.ROOT
        for depth in range(len(path)):
            existing = self.find(path[: depth + 1])
            if existing is None:
                existing = self.add_child(current, path[depth])
            current = existing
        return current

    def parent_of(self, index: int) -> Optional[int]:
        return self.nodes[index].parent

    def ancestors(self, index: int) -> List[int]:
        """Ancestor indices, nearest first."""
        result = []
        current = self.nodes[index].parent
        while current is not None:
            result.append(current)
            current = self.nodes[current].parent
        return result

    def walk(self, start: int = ROOT) -> Iterator[int]:
        """Depth-first pre-order traversal, children in document order."""
        stack = [start]
        while stack:
            index = stack.pop()
            yield index
            stack.extend(reversed(self.nodes[index].children))

    def is_bound(self, index: int) -> bool:
        """True when the parent requires all of its children together."""
        parent = self.nodes[index].parent
        return parent is not None and self.nodes[parent].requires_all_children

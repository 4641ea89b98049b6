import logging
from enum import Enum
from typing import Dict, Iterable, List, Mapping, TextIO, Tuple

from rich.cells import cell_len
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from lockwatch.core.errors import DependencyTreeError
from lockwatch.core.model import PackageRef

# Suffix for a node whose subtree was already drawn above
SEEN_MARKER = " (*)"

# Cells taken by one level of tree guides, e.g. "│   "
GUIDE_WIDTH = 4


class EdgeDirection(Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


class DependencyTree:
    """
    Directed graph of the packages in a lockfile.

    Edges point from a package to each of its dependencies; following them
    backwards (INCOMING) yields the packages that pull a given package in.
    Node handles are plain integers, only meaningful for the tree that
    issued them.
    """

    def __init__(
        self,
        packages: Iterable[PackageRef],
        edges: Iterable[Tuple[PackageRef, PackageRef]] = (),
    ) -> None:
        self._packages: List[PackageRef] = []
        self._nodes: Dict[PackageRef, int] = {}

        for package in packages:
            if package in self._nodes:
                raise DependencyTreeError(f"Duplicate package in dependency tree: {package}")
            self._nodes[package] = len(self._packages)
            self._packages.append(package)

        self._outgoing: List[List[int]] = [[] for _ in self._packages]
        self._incoming: List[List[int]] = [[] for _ in self._packages]

        for parent, child in edges:
            src, dst = self.node_of(parent), self.node_of(child)
            if dst not in self._outgoing[src]:
                self._outgoing[src].append(dst)
                self._incoming[dst].append(src)

        for adjacency in (self._outgoing, self._incoming):
            for neighbours in adjacency:
                neighbours.sort(key=self._sort_key)

        logging.debug(f"Dependency tree built with {len(self._packages)} nodes.")

    def __len__(self) -> int:
        return len(self._packages)

    def nodes(self) -> Mapping[PackageRef, int]:
        return dict(self._nodes)

    def node_of(self, package: PackageRef) -> int:
        try:
            return self._nodes[package]
        except KeyError:
            raise DependencyTreeError(f"Package not in dependency tree: {package}") from None

    def package(self, node: int) -> PackageRef:
        return self._packages[node]

    def dependencies(self, node: int) -> List[PackageRef]:
        return [self._packages[i] for i in self._outgoing[node]]

    def dependents(self, node: int) -> List[PackageRef]:
        return [self._packages[i] for i in self._incoming[node]]

    def render(self, stream: TextIO, node: int, direction: EdgeDirection = EdgeDirection.INCOMING) -> None:
        """Draw the subgraph reachable from `node` in `direction` to `stream`."""
        adjacency = self._incoming if direction is EdgeDirection.INCOMING else self._outgoing
        root = Tree(self._label(node))
        expanded = {node}
        # Widest line so far, in cells; the console must fit it
        width = cell_len(str(self._packages[node]))

        def add_nodes(tree_node: Tree, index: int, depth: int) -> None:
            nonlocal width
            for neighbour in adjacency[index]:
                seen = neighbour in expanded
                text = str(self._packages[neighbour]) + (SEEN_MARKER if seen else "")
                width = max(width, GUIDE_WIDTH * depth + cell_len(text))

                if seen:
                    tree_node.add(escape(text))
                    continue

                expanded.add(neighbour)
                add_nodes(tree_node.add(escape(text)), neighbour, depth + 1)

        add_nodes(root, node, 1)

        console = Console(file=stream, width=width + 1, highlight=False, soft_wrap=True, emoji=False)
        console.print(root)

    def _label(self, index: int) -> str:
        return escape(str(self._packages[index]))

    def _sort_key(self, index: int) -> Tuple[str, str, str]:
        package = self._packages[index]
        return package.name, package.version, package.source or ""

"""Build, validate and order the target dependency graph."""

from __future__ import annotations

import heapq
import logging
from typing import Iterable

from buildscope.errors import (
    ConfigError,
    CyclicDependencyError,
    DuplicateTargetError,
    UnresolvedDependencyError,
)
from buildscope.model import RawTree, Target, TargetGraph

logger = logging.getLogger(__name__)

TARGET_TAGS = ("target", "extension-point")
ORDERINGS = ("topological", "declaration")

_WHITE, _GRAY, _BLACK = 0, 1, 2


def _split_depends(value: str | None) -> list[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def find_cycle(graph: TargetGraph) -> list[str] | None:
    """Return the first dependency cycle as a closed path of names, or None.

    Three-colour DFS over arena indices; roots are visited in declaration
    order and edges in declared order, so the reported cycle is stable.
    """
    color = [_WHITE] * len(graph.targets)

    for root in range(len(graph.targets)):
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        path = [root]
        stack = [iter(graph.edges.get(root, []))]
        while stack:
            for w in stack[-1]:
                if color[w] == _GRAY:
                    cycle = path[path.index(w):] + [w]
                    return [graph.targets[i].name for i in cycle]
                if color[w] == _WHITE:
                    color[w] = _GRAY
                    path.append(w)
                    stack.append(iter(graph.edges.get(w, [])))
                    break
            else:
                # Every edge of the vertex on top has been explored.
                color[path.pop()] = _BLACK
                stack.pop()
    return None


def topological_order(graph: TargetGraph) -> list[str]:
    """Dependencies first; among ready targets the earliest declared wins."""
    indegree = {v: len(deps) for v, deps in graph.edges.items()}
    dependents: dict[int, list[int]] = {v: [] for v in graph.edges}
    for v, deps in graph.edges.items():
        for d in deps:
            dependents[d].append(v)

    ready = [v for v, n in indegree.items() if n == 0]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        v = heapq.heappop(ready)
        order.append(graph.targets[v].name)
        for w in dependents[v]:
            indegree[w] -= 1
            if indegree[w] == 0:
                heapq.heappush(ready, w)
    return order


class TargetGraphBuilder:
    """Turn the ``target`` elements of a :class:`RawTree` into a TargetGraph.

    *external_targets* names dependencies that are accepted without a
    declaration (no-op sentinels provided by the surrounding build); they are
    left out of the graph.
    """

    def __init__(
        self,
        *,
        order: str = "topological",
        external_targets: Iterable[str] = (),
    ) -> None:
        if order not in ORDERINGS:
            raise ConfigError(f"Unknown target order {order!r}; expected one of {ORDERINGS}")
        self.order = order
        self.external_targets = frozenset(external_targets)

    def build(self, tree: RawTree) -> TargetGraph:
        raw = self._collect(tree)
        graph = TargetGraph()
        for position, (name, attrs, depends) in enumerate(raw):
            graph.targets.append(
                Target(
                    name=name,
                    depends=tuple(depends),
                    description=attrs.get("description"),
                    if_property=attrs.get("if"),
                    unless_property=attrs.get("unless"),
                    index=position,
                )
            )
            graph.index[name] = position

        for target in graph.targets:
            deps: list[int] = []
            for dep in target.depends:
                if dep in graph.index:
                    if graph.index[dep] not in deps:
                        deps.append(graph.index[dep])
                elif dep not in self.external_targets:
                    raise UnresolvedDependencyError(target.name, dep)
            graph.edges[target.index] = deps

        cycle = find_cycle(graph)
        if cycle:
            raise CyclicDependencyError(cycle)

        if self.order == "topological":
            graph.order = topological_order(graph)
        else:
            graph.order = [t.name for t in graph.targets]

        logger.debug(
            "Target graph: %d targets, %d edges (%s order)",
            len(graph.targets),
            sum(len(d) for d in graph.edges.values()),
            self.order,
        )
        return graph

    def _collect(self, tree: RawTree) -> list[tuple[str, dict[str, str], list[str]]]:
        """Gather (name, attributes, depends) per target in declaration order."""
        raw: list[tuple[str, dict[str, str], list[str]]] = []
        seen: dict[str, int] = {}
        extensions: list[tuple[str, str]] = []

        for index in tree.children(0):
            node = tree.nodes[index]
            if node.tag not in TARGET_TAGS:
                continue
            name = (node.get("name") or "").strip()
            if not name:
                logger.warning("Ignoring <%s> without a name", node.tag)
                continue
            if name in seen:
                raise DuplicateTargetError(name)
            seen[name] = len(raw)
            raw.append((name, node.attributes, _split_depends(node.get("depends"))))
            for point in _split_depends(node.get("extensionOf")):
                extensions.append((name, point))

        # extensionOf="x" makes extension point x depend on the declaring target.
        for name, point in extensions:
            if point not in seen:
                raise UnresolvedDependencyError(name, point)
            raw[seen[point]][2].append(name)

        return raw


def build_graph(tree: RawTree, **kwargs) -> TargetGraph:
    return TargetGraphBuilder(**kwargs).build(tree)

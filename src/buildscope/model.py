"""Dialect-neutral data model for build descriptor analysis."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator


class Dialect(enum.Enum):
    ANT = "ant"
    MAVEN = "maven"


@dataclass
class RawNode:
    """One element of a parsed descriptor."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    text: str = ""
    children: list[int] = field(default_factory=list)
    parent: int | None = None

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)


@dataclass
class RawTree:
    """Arena of :class:`RawNode` objects; index 0 is the root."""

    dialect: Dialect
    path: str | None = None
    nodes: list[RawNode] = field(default_factory=list)

    def add(self, node: RawNode, parent: int | None = None) -> int:
        """Append *node* under *parent* and return its arena index."""
        index = len(self.nodes)
        node.parent = parent
        self.nodes.append(node)
        if parent is not None:
            self.nodes[parent].children.append(index)
        return index

    @property
    def root(self) -> RawNode:
        return self.nodes[0]

    def children(self, index: int, tag: str | None = None) -> list[int]:
        kids = self.nodes[index].children
        if tag is None:
            return list(kids)
        return [k for k in kids if self.nodes[k].tag == tag]

    def walk(self, index: int = 0) -> Iterator[int]:
        """Yield *index* and all of its descendants in document order."""
        stack = [index]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self.nodes[current].children))

    def ancestors(self, index: int) -> Iterator[int]:
        parent = self.nodes[index].parent
        while parent is not None:
            yield parent
            parent = self.nodes[parent].parent


@dataclass(frozen=True)
class Target:
    """A named unit of build work."""

    name: str
    depends: tuple[str, ...] = ()
    description: str | None = None
    if_property: str | None = None
    unless_property: str | None = None
    index: int = 0  # declaration position


@dataclass
class TargetGraph:
    """Targets keyed by arena position, with dependency edges and ordering."""

    targets: list[Target] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)
    edges: dict[int, list[int]] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)

    def __contains__(self, name: str) -> bool:
        return name in self.index

    def __getitem__(self, name: str) -> Target:
        return self.targets[self.index[name]]


@dataclass
class FileSetSpec:
    """A root directory plus include/exclude glob patterns."""

    root: str
    includes: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    default_excludes: bool = True
    kind: str = "fileset"


@dataclass(frozen=True)
class ResolvedPatternSet:
    """Deduplicated, sorted pattern strings."""

    patterns: tuple[str, ...] = ()

    @classmethod
    def of(cls, patterns) -> ResolvedPatternSet:
        return cls(tuple(sorted(set(patterns))))

    def __iter__(self) -> Iterator[str]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self.patterns


@dataclass(frozen=True)
class TestSelection:
    """Tests the developer pinned by name, in declared order."""

    __test__ = False  # not a pytest test class

    tests: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.tests)

    def __len__(self) -> int:
        return len(self.tests)


@dataclass
class AnalysisResult:
    """The four comparable artifacts of one analysis run."""

    targets: list[str]
    includes: ResolvedPatternSet
    excludes: ResolvedPatternSet
    tests: TestSelection
    project_name: str | None = None
    dialect: Dialect | None = None

    def artifacts(self) -> dict[str, list[str]]:
        """Return the persisted artifacts keyed by file name."""
        return {
            "targets": list(self.targets),
            "includes": list(self.includes),
            "excludes": list(self.excludes),
            "developer-included-tests": list(self.tests),
        }

"""Collect fileset declarations and merge them into resolved pattern sets."""

from __future__ import annotations

import logging

from buildscope.model import FileSetSpec, RawTree, ResolvedPatternSet
from buildscope.patterns import DEFAULT_EXCLUDES, RECURSIVE, PatternMatcher
from buildscope.properties import PropertyResolver, split_list

logger = logging.getLogger(__name__)

FILESET_TAGS = frozenset({"fileset", "dirset", "zipfileset", "tarfileset"})

# Tasks that act as an implicit fileset rooted at the named attribute.
IMPLICIT_FILESETS = {
    "javac": "srcdir",
    "jar": "basedir",
    "zip": "basedir",
    "war": "basedir",
    "ear": "basedir",
}

_FALSE_VALUES = {"no", "false", "off"}


class FileSetResolver:
    """Resolve the include/exclude pattern sets declared by a descriptor."""

    def __init__(
        self,
        *,
        properties: PropertyResolver | None = None,
        default_excludes: bool = True,
    ) -> None:
        self.properties = properties
        self.default_excludes = default_excludes

    def resolve(
        self, tree: RawTree, matcher: PatternMatcher
    ) -> tuple[ResolvedPatternSet, ResolvedPatternSet]:
        """Return the merged ``(includes, excludes)`` of every fileset in *tree*.

        Patterns are normalized with *matcher*; a malformed pattern raises
        :class:`~buildscope.errors.PatternError`.
        """
        specs = self.collect(tree)
        includes: set[str] = set()
        excludes: set[str] = set()
        for spec in specs:
            includes.update(matcher.normalize(p) for p in spec.includes or [RECURSIVE])
            excludes.update(matcher.normalize(p) for p in spec.excludes)

        if self.default_excludes and (not specs or any(s.default_excludes for s in specs)):
            excludes.update(
                matcher.normalize(p) for p in self.effective_default_excludes(tree)
            )

        logger.debug(
            "Resolved %d filesets: %d includes, %d excludes",
            len(specs),
            len(includes),
            len(excludes),
        )
        return ResolvedPatternSet.of(includes), ResolvedPatternSet.of(excludes)

    def collect(self, tree: RawTree) -> list[FileSetSpec]:
        """Return one :class:`FileSetSpec` per enabled fileset, in document order."""
        props = self._properties(tree)
        patternsets = self._patternsets(tree, props)
        specs: list[FileSetSpec] = []

        for index in tree.walk():
            node = tree.nodes[index]
            if node.tag in FILESET_TAGS:
                if node.get("refid") and not node.get("dir"):
                    continue
                root_attr = "dir"
            elif node.tag in IMPLICIT_FILESETS:
                root_attr = IMPLICIT_FILESETS[node.tag]
                if not self._declares_patterns(tree, index):
                    continue
            else:
                continue

            if not props.enabled(tree, index):
                logger.debug("Skipping guarded <%s> (%s)", node.tag, node.attributes)
                continue

            includes, excludes = self._own_patterns(tree, index, props, patternsets, set())
            defaults = (node.get("defaultexcludes") or "yes").strip().lower()
            specs.append(
                FileSetSpec(
                    root=props.expand(node.get(root_attr) or "."),
                    includes=includes,
                    excludes=excludes,
                    default_excludes=defaults not in _FALSE_VALUES,
                    kind=node.tag,
                )
            )
        return specs

    def effective_default_excludes(self, tree: RawTree) -> list[str]:
        """Apply ``<defaultexcludes>`` adjustments to the built-in list."""
        props = self._properties(tree)
        patterns = list(DEFAULT_EXCLUDES)
        for index in tree.walk():
            node = tree.nodes[index]
            if node.tag != "defaultexcludes":
                continue
            if (node.get("default") or "").strip().lower() in ("true", "yes", "on"):
                patterns = list(DEFAULT_EXCLUDES)
            for pattern in split_list(props.expand(node.get("remove"))):
                if pattern in patterns:
                    patterns.remove(pattern)
            for pattern in split_list(props.expand(node.get("add"))):
                if pattern not in patterns:
                    patterns.append(pattern)
        return patterns

    def _properties(self, tree: RawTree) -> PropertyResolver:
        return self.properties or PropertyResolver.from_tree(tree)

    @staticmethod
    def _declares_patterns(tree: RawTree, index: int) -> bool:
        node = tree.nodes[index]
        if node.get("includes") or node.get("excludes"):
            return True
        return any(
            tree.nodes[c].tag in ("include", "exclude", "patternset")
            for c in tree.children(index)
        )

    def _patternsets(
        self, tree: RawTree, props: PropertyResolver
    ) -> dict[str, tuple[list[str], list[str]]]:
        """Index every ``<patternset id=...>`` by id."""
        registry: dict[str, tuple[list[str], list[str]]] = {}
        pending = [
            i
            for i in tree.walk()
            if tree.nodes[i].tag == "patternset" and tree.nodes[i].get("id")
        ]
        for index in pending:
            node = tree.nodes[index]
            registry[node.get("id")] = self._own_patterns(tree, index, props, registry, set())
        return registry

    def _own_patterns(
        self,
        tree: RawTree,
        index: int,
        props: PropertyResolver,
        registry: dict[str, tuple[list[str], list[str]]],
        visiting: set[int],
    ) -> tuple[list[str], list[str]]:
        node = tree.nodes[index]
        includes = split_list(props.expand(node.get("includes")))
        excludes = split_list(props.expand(node.get("excludes")))
        visiting = visiting | {index}

        for child in tree.children(index):
            kid = tree.nodes[child]
            if not props.guard_passes(kid.attributes):
                continue
            if kid.tag == "include" and kid.get("name"):
                includes.append(props.expand(kid.get("name")))
            elif kid.tag == "exclude" and kid.get("name"):
                excludes.append(props.expand(kid.get("name")))
            elif kid.tag == "patternset" and child not in visiting:
                ref = kid.get("refid")
                if ref:
                    ref_inc, ref_exc = registry.get(ref) or self._lookup(
                        tree, ref, props, registry, visiting
                    )
                else:
                    ref_inc, ref_exc = self._own_patterns(tree, child, props, registry, visiting)
                includes.extend(ref_inc)
                excludes.extend(ref_exc)
        return includes, excludes

    def _lookup(
        self,
        tree: RawTree,
        ref: str,
        props: PropertyResolver,
        registry: dict[str, tuple[list[str], list[str]]],
        visiting: set[int],
    ) -> tuple[list[str], list[str]]:
        # Forward reference to a patternset not yet registered.
        for i in tree.walk():
            node = tree.nodes[i]
            if node.tag == "patternset" and node.get("id") == ref and i not in visiting:
                return self._own_patterns(tree, i, props, registry, visiting)
        logger.warning("Unknown patternset reference %r", ref)
        return [], []


def resolve_filesets(
    tree: RawTree, matcher: PatternMatcher | None = None, **kwargs
) -> tuple[ResolvedPatternSet, ResolvedPatternSet]:
    return FileSetResolver(**kwargs).resolve(tree, matcher or PatternMatcher())

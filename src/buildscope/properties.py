"""Descriptor properties: collection, ``${name}`` expansion and guards."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Mapping

from buildscope.model import RawTree

logger = logging.getLogger(__name__)

_REF_RE = re.compile(r"\$\{([^}]+)\}")
_LIST_RE = re.compile(r"[,\s]+")
_TRUE_VALUES = {"true", "yes", "on"}

# Expansion stops after this many passes; guards against self-referencing values.
_MAX_EXPANSION_DEPTH = 16

# Elements whose if/unless guards describe runtime execution, not structure.
_UNGUARDED_TAGS = {"project", "target", "extension-point"}


def split_list(value: str | None) -> list[str]:
    """Split a comma- and/or whitespace-separated list, dropping empties."""
    if not value:
        return []
    return [item for item in _LIST_RE.split(value.strip()) if item]


def _read_properties_file(path: Path) -> dict[str, str]:
    """Parse a simple Java ``.properties`` file (``key=value`` / ``key: value``)."""
    result: dict[str, str] = {}
    try:
        text = path.read_text(encoding="latin-1")
    except OSError as e:
        logger.warning("Could not read properties file %s: %s", path, e)
        return result
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        m = re.match(r"([^=:\s]+)\s*[=:\s]\s*(.*)", line)
        if m:
            result.setdefault(m.group(1), m.group(2).strip())
        else:
            result.setdefault(line, "")
    return result


class PropertyResolver:
    """Immutable-once-built property table with Ant first-definition-wins rules."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    @classmethod
    def from_tree(
        cls,
        tree: RawTree,
        overrides: Mapping[str, str] | None = None,
        base_dir: Path | None = None,
    ) -> PropertyResolver:
        """Collect the top-level ``property`` nodes of *tree*.

        *overrides* act like ``-D`` command-line properties: they are defined
        first and therefore win over descriptor definitions.
        """
        resolver = cls(overrides)
        root = tree.root
        resolver._define("basedir", root.get("basedir") or ".")
        if root.get("name"):
            resolver._define("ant.project.name", root.get("name"))

        for index in tree.children(0, "property"):
            node = tree.nodes[index]
            name = node.get("name")
            if name is not None:
                value = node.get("value")
                if value is None:
                    value = node.get("location")
                if value is None:
                    value = node.text
                resolver._define(name, resolver.expand(value))
            elif node.get("file") and base_dir is not None:
                prefix = node.get("prefix")
                path = base_dir / resolver.expand(node.get("file"))
                if not path.exists():
                    logger.debug("Skipping missing properties file %s", path)
                    continue
                for key, value in _read_properties_file(path).items():
                    if prefix:
                        key = f"{prefix}.{key}"
                    resolver._define(key, resolver.expand(value))

        logger.debug("Collected %d properties", len(resolver._values))
        return resolver

    def _define(self, name: str, value: str) -> None:
        self._values.setdefault(name, value)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._values.get(name, default)

    def expand(self, value: str | None) -> str:
        """Replace known ``${name}`` references; unknown ones stay literal."""
        if not value:
            return value or ""
        for _ in range(_MAX_EXPANSION_DEPTH):
            expanded = _REF_RE.sub(
                lambda m: self._values.get(m.group(1), m.group(0)), value
            )
            if expanded == value:
                break
            value = expanded
        return value

    def _test(self, condition: str) -> bool:
        # Ant 1.8+: if="${flag}" tests the expanded value, if="name" tests definition.
        if _REF_RE.search(condition):
            return self.expand(condition).strip().lower() in _TRUE_VALUES
        return condition in self._values

    def guard_passes(self, attributes: Mapping[str, str]) -> bool:
        """Evaluate the ``if``/``unless`` attributes of one element."""
        cond = attributes.get("if")
        if cond is not None and not self._test(cond):
            return False
        cond = attributes.get("unless")
        if cond is not None and self._test(cond):
            return False
        return True

    def enabled(self, tree: RawTree, index: int) -> bool:
        """Return True if the node and its structural ancestors pass their guards.

        Guards on targets are not evaluated; they describe whether a target
        runs, not which patterns the descriptor declares.
        """
        for i in (index, *tree.ancestors(index)):
            node = tree.nodes[i]
            if node.tag in _UNGUARDED_TAGS:
                continue
            if not self.guard_passes(node.attributes):
                return False
        return True

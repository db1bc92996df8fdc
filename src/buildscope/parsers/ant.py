"""Parse Ant ``build.xml`` descriptors."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from buildscope.model import Dialect, RawNode, RawTree
from buildscope.parsers._xml import load_xml, load_xml_string

logger = logging.getLogger(__name__)


def _copy(element: ET.Element, tree: RawTree, parent: int | None) -> None:
    node = RawNode(
        tag=element.tag,
        attributes=dict(element.attrib),
        text=(element.text or "").strip(),
    )
    index = tree.add(node, parent)
    for child in element:
        _copy(child, tree, index)


class AntDescriptorParser:
    """Copy an Ant project element tree into a :class:`RawTree` arena.

    Ant descriptors already use the canonical vocabulary (``target``,
    ``property``, ``fileset``...), so elements and attributes are kept
    verbatim; unknown tasks are carried along and ignored downstream.
    """

    dialect = Dialect.ANT

    def parse(self, path: Path) -> RawTree:
        return self._build(load_xml(path), str(path))

    def parse_string(self, text: str) -> RawTree:
        return self._build(load_xml_string(text), None)

    def _build(self, root: ET.Element, source: str | None) -> RawTree:
        if root.tag != "project":
            logger.warning(
                "Root element of %s is <%s>, expected <project>",
                source or "descriptor",
                root.tag,
            )
        tree = RawTree(dialect=self.dialect, path=source)
        _copy(root, tree, None)
        logger.debug("Parsed Ant descriptor: %d elements", len(tree.nodes))
        return tree

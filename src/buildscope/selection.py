"""Extract the tests a developer pinned for individual execution."""

from __future__ import annotations

import logging
from typing import Iterable

from buildscope.model import RawTree, TestSelection
from buildscope.properties import PropertyResolver, split_list

logger = logging.getLogger(__name__)

DEFAULT_TEST_PROPERTIES = ("test",)


class TestSelectionExtractor:
    """Find explicitly pinned tests.

    ``<test name=...>`` elements (Ant's ``junit`` task, or the surefire
    ``<test>`` setting of a POM) are read first, in document order.  When none
    apply, the first defined property among *property_names* is split on
    commas and whitespace.  Order and repeats are preserved.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        *,
        properties: PropertyResolver | None = None,
        property_names: Iterable[str] = DEFAULT_TEST_PROPERTIES,
    ) -> None:
        self.properties = properties
        self.property_names = tuple(property_names)

    def extract(self, tree: RawTree) -> TestSelection:
        props = self.properties or PropertyResolver.from_tree(tree)

        pinned: list[str] = []
        for index in tree.walk():
            node = tree.nodes[index]
            if node.tag != "test" or not node.get("name"):
                continue
            if not props.enabled(tree, index):
                continue
            name = props.expand(node.get("name")).strip()
            if "${" in name:
                logger.debug("Skipping test with unresolved name %r", name)
                continue
            pinned.extend(split_list(name))
        if pinned:
            logger.debug("Pinned tests from <test> elements: %s", pinned)
            return TestSelection(tuple(pinned))

        for prop in self.property_names:
            value = props.get(prop)
            if value is not None:
                tests = split_list(props.expand(value))
                logger.debug("Pinned tests from property %r: %s", prop, tests)
                return TestSelection(tuple(tests))
        return TestSelection()


def extract_tests(tree: RawTree, **kwargs) -> TestSelection:
    return TestSelectionExtractor(**kwargs).extract(tree)

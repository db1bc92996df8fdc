"""Auto-detect the descriptor dialect and return the appropriate parser."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from buildscope.model import Dialect
from buildscope.parsers import DescriptorParser, parser_for
from buildscope.parsers._xml import local_name

logger = logging.getLogger(__name__)

MAVEN_NAMESPACE = "http://maven.apache.org/POM/4.0.0"

# Children that only a POM's root element carries.
_POM_MARKERS = {"modelVersion", "groupId", "artifactId", "parent", "packaging"}


def _sniff_stream(stream) -> Dialect | None:
    depth = 0
    for event, element in ET.iterparse(stream, events=("start", "end")):
        if event == "end":
            depth -= 1
            continue
        depth += 1
        if depth == 1:
            if element.tag.startswith("{" + MAVEN_NAMESPACE + "}"):
                return Dialect.MAVEN
            if local_name(element.tag) != "project":
                return Dialect.ANT
        elif depth == 2 and local_name(element.tag) in _POM_MARKERS:
            return Dialect.MAVEN
    # The root closed without a POM marker among its children.
    return Dialect.ANT


def _sniff(path: Path) -> Dialect | None:
    """Look at the root element of *path* and its direct children."""
    try:
        with open(path, "rb") as f:
            return _sniff_stream(f)
    except ET.ParseError as e:
        # The chosen parser reports the syntax error with its location.
        logger.debug("Could not sniff %s: %s", path, e)
    return None


def detect_dialect(path: Path) -> Dialect:
    """Return the dialect of the descriptor at *path*.

    ``pom.xml`` and ``*.pom`` names are Maven; anything else is decided by
    its content, defaulting to Ant.
    """
    if path.name == "pom.xml" or path.suffix == ".pom":
        return Dialect.MAVEN
    dialect = _sniff(path) if path.exists() else None
    return dialect or Dialect.ANT


def detect_parser(path: Path) -> DescriptorParser:
    """Return the parser for the descriptor at *path*."""
    dialect = detect_dialect(path)
    logger.debug("Descriptor %s detected as %s", path.name, dialect.value)
    return parser_for(dialect)

"""Shared XML loading for descriptor parsers."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from buildscope.errors import DescriptorSyntaxError


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an element or attribute name."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def strip_namespaces(element: ET.Element) -> ET.Element:
    """Rewrite *element* and its descendants to namespace-free names in place."""
    for el in element.iter():
        if isinstance(el.tag, str):
            el.tag = local_name(el.tag)
        if any(k.startswith("{") for k in el.attrib):
            el.attrib = {local_name(k): v for k, v in el.attrib.items()}
    return element


def _syntax_error(err: ET.ParseError, path: Path | None) -> DescriptorSyntaxError:
    line, column = getattr(err, "position", (None, None))
    message = str(err).split(":", 1)[0]
    return DescriptorSyntaxError(path, message, line=line, column=column)


def load_xml(path: Path) -> ET.Element:
    """Parse the file at *path* and return its namespace-free root element."""
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as err:
        raise _syntax_error(err, path) from err
    return strip_namespaces(root)


def load_xml_string(text: str) -> ET.Element:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as err:
        raise _syntax_error(err, None) from err
    return strip_namespaces(root)


def child_text(element: ET.Element | None, path: str, default: str | None = None) -> str | None:
    """Return the stripped text of ``element.find(path)``, or *default*."""
    if element is None:
        return default
    found = element.find(path)
    if found is None or found.text is None:
        return default
    text = found.text.strip()
    return text or default


def child_texts(element: ET.Element | None, path: str) -> list[str]:
    """Return the non-empty stripped texts of ``element.findall(path)``."""
    if element is None:
        return []
    return [el.text.strip() for el in element.findall(path) if el.text and el.text.strip()]

"""Descriptor parsers for the Ant and Maven dialects."""

from __future__ import annotations

from pathlib import Path

from buildscope.model import Dialect, RawTree
from buildscope.parsers.ant import AntDescriptorParser
from buildscope.parsers.base import DescriptorParser
from buildscope.parsers.maven import MavenDescriptorParser

__all__ = [
    "AntDescriptorParser",
    "DescriptorParser",
    "MavenDescriptorParser",
    "parse",
    "parser_for",
]

_PARSERS: dict[Dialect, type] = {
    Dialect.ANT: AntDescriptorParser,
    Dialect.MAVEN: MavenDescriptorParser,
}


def parser_for(dialect: Dialect) -> DescriptorParser:
    """Return a parser instance for *dialect*."""
    return _PARSERS[dialect]()


def parse(path: Path | str, dialect: Dialect) -> RawTree:
    """Parse the descriptor at *path* using the given *dialect*."""
    return parser_for(dialect).parse(Path(path))

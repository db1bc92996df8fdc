"""Parser protocol that every descriptor dialect conforms to."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from buildscope.model import Dialect, RawTree


class DescriptorParser(Protocol):
    """Protocol for build descriptor parsers."""

    dialect: Dialect

    def parse(self, path: Path) -> RawTree:
        """Parse the descriptor at *path* into a dialect-neutral tree."""
        ...

    def parse_string(self, text: str) -> RawTree:
        """Parse descriptor markup held in memory."""
        ...

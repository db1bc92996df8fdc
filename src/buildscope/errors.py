"""Exceptions raised while analyzing a build descriptor."""

from __future__ import annotations

from pathlib import Path


class BuildscopeError(Exception):
    """Base class for every fatal analysis error."""


class ConfigError(BuildscopeError):
    """Invalid value in a buildscope settings file or override."""


class DescriptorSyntaxError(BuildscopeError):
    """The descriptor markup could not be parsed."""

    def __init__(
        self,
        path: Path | str | None,
        message: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.path = str(path) if path is not None else None
        self.line = line
        self.column = column
        self.message = message
        location = self.path or "<string>"
        if line is not None:
            location += f":{line}"
            if column is not None:
                location += f":{column}"
        super().__init__(f"{location}: {message}")


class DuplicateTargetError(BuildscopeError):
    """Two targets share one name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Duplicate target name: {name!r}")


class UnresolvedDependencyError(BuildscopeError):
    """A target depends on a target that is not declared."""

    def __init__(self, target: str, dependency: str) -> None:
        self.target = target
        self.dependency = dependency
        super().__init__(
            f"Target {target!r} depends on undeclared target {dependency!r}"
        )


class CyclicDependencyError(BuildscopeError):
    """The target dependency graph contains a cycle.

    ``cycle`` holds the full path, starting and ending with the same target.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__("Dependency cycle: " + " -> ".join(self.cycle))


class PatternError(BuildscopeError):
    """A glob pattern is malformed."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")

"""Analyze Ant and Maven build descriptors into comparable artifacts."""

from buildscope.errors import (
    BuildscopeError,
    ConfigError,
    CyclicDependencyError,
    DescriptorSyntaxError,
    DuplicateTargetError,
    PatternError,
    UnresolvedDependencyError,
)
from buildscope.model import AnalysisResult, Dialect
from buildscope.pipeline import AnalysisEngine, analyze, analyze_many

__version__ = "0.1.0"

__all__ = [
    "AnalysisEngine",
    "AnalysisResult",
    "BuildscopeError",
    "ConfigError",
    "CyclicDependencyError",
    "DescriptorSyntaxError",
    "Dialect",
    "DuplicateTargetError",
    "PatternError",
    "UnresolvedDependencyError",
    "analyze",
    "analyze_many",
]

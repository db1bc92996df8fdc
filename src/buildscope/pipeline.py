"""Orchestrator: detect → parse → graph → filesets → tests → result."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Mapping

from buildscope.config import Settings, load_settings
from buildscope.detect import detect_parser
from buildscope.filesets import FileSetResolver
from buildscope.graph import TargetGraphBuilder
from buildscope.model import AnalysisResult, Dialect, RawTree
from buildscope.patterns import PatternMatcher
from buildscope.properties import PropertyResolver
from buildscope.selection import TestSelectionExtractor
from buildscope.writer import write_artifacts

logger = logging.getLogger(__name__)


def _guess_project_name(project_dir: Path, descriptor: Path, tree: RawTree) -> str:
    """Guess the project display name from the descriptor or directory name."""
    if tree.dialect is Dialect.ANT:
        name = tree.root.get("name")
        if name:
            return name
    else:
        try:
            from jgo.maven.pom import POM

            pom = POM(descriptor)
            name = pom.name or pom.artifactId
            if name:
                return name
        except ImportError:
            logger.debug("jgo not installed; using directory name for %s", descriptor)
        except (OSError, ValueError, KeyError, AttributeError, TypeError) as e:
            logger.debug("Could not read POM coordinates from %s: %s", descriptor, e)

    return project_dir.name


class AnalysisEngine:
    """Run the full descriptor analysis for one project.

    Analysis is all-or-nothing: any error from a stage propagates and no
    partial result is produced.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        properties: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings
        self.properties = dict(properties or {})

    def analyze(self, project_root: Path | str, descriptor_file_name: str) -> AnalysisResult:
        project_dir = Path(project_root).resolve()
        descriptor = project_dir / descriptor_file_name
        if not descriptor.is_file():
            raise FileNotFoundError(f"Descriptor not found: {descriptor}")

        settings = self.settings or load_settings(project_dir)
        overrides = {**settings.properties, **self.properties}

        parser = detect_parser(descriptor)
        tree = parser.parse(descriptor)
        props = PropertyResolver.from_tree(tree, overrides, base_dir=project_dir)

        graph = TargetGraphBuilder(
            order=settings.target_order,
            external_targets=settings.external_targets,
        ).build(tree)

        matcher = PatternMatcher(case_sensitive=settings.case_sensitive)
        includes, excludes = FileSetResolver(
            properties=props,
            default_excludes=settings.default_excludes,
        ).resolve(tree, matcher)

        tests = TestSelectionExtractor(
            properties=props,
            property_names=settings.test_properties,
        ).extract(tree)

        result = AnalysisResult(
            targets=list(graph.order),
            includes=includes,
            excludes=excludes,
            tests=tests,
            project_name=_guess_project_name(project_dir, descriptor, tree),
            dialect=tree.dialect,
        )
        logger.debug(
            "Analyzed %s (%s): %d targets, %d includes, %d excludes, %d pinned tests",
            result.project_name,
            tree.dialect.value,
            len(result.targets),
            len(includes),
            len(excludes),
            len(tests),
        )
        return result


def analyze(
    project_root: Path | str,
    descriptor_file_name: str,
    *,
    settings: Settings | None = None,
    properties: Mapping[str, str] | None = None,
) -> AnalysisResult:
    """Analyze *descriptor_file_name* inside *project_root*."""
    return AnalysisEngine(settings, properties=properties).analyze(
        project_root, descriptor_file_name
    )


def analyze_many(
    jobs: Iterable[tuple[Path | str, str]],
    *,
    settings: Settings | None = None,
    max_workers: int | None = None,
) -> list[AnalysisResult]:
    """Analyze independent ``(project_root, descriptor)`` pairs concurrently.

    Results come back in input order; the first failure propagates.
    """
    jobs = list(jobs)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(analyze, root, descriptor, settings=settings)
            for root, descriptor in jobs
        ]
        return [future.result() for future in futures]


def run(
    project_dir: Path,
    output_dir: Path,
    descriptor: str,
    *,
    properties: Mapping[str, str] | None = None,
    target_order: str | None = None,
    default_excludes: bool | None = None,
) -> AnalysisResult:
    """Analyze a project and persist the four artifacts under *output_dir*."""
    project_dir = project_dir.resolve()
    settings = load_settings(project_dir).with_overrides(
        target_order=target_order,
        default_excludes=default_excludes,
    )
    result = analyze(project_dir, descriptor, settings=settings, properties=properties)
    write_artifacts(result, output_dir)
    logger.info("Wrote analysis of %s to %s", result.project_name, output_dir)
    return result

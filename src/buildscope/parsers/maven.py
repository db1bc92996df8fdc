"""Synthesize an Ant-shaped tree from a Maven ``pom.xml``.

Maven has no targets; bound lifecycle phases play that role, with
dependencies following the fixed phase order.  Source, resource and test
directories become filesets, and the surefire/failsafe ``<test>`` setting
becomes the developer-pinned test list.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from buildscope.model import Dialect, RawNode, RawTree
from buildscope.parsers._xml import child_text, child_texts, load_xml, load_xml_string
from buildscope.properties import split_list

logger = logging.getLogger(__name__)

CLEAN_LIFECYCLE = ("pre-clean", "clean", "post-clean")

DEFAULT_LIFECYCLE = (
    "validate",
    "initialize",
    "generate-sources",
    "process-sources",
    "generate-resources",
    "process-resources",
    "compile",
    "process-classes",
    "generate-test-sources",
    "process-test-sources",
    "generate-test-resources",
    "process-test-resources",
    "test-compile",
    "process-test-classes",
    "test",
    "prepare-package",
    "package",
    "pre-integration-test",
    "integration-test",
    "post-integration-test",
    "verify",
    "install",
    "deploy",
)

SITE_LIFECYCLE = ("pre-site", "site", "post-site", "site-deploy")

LIFECYCLES = (CLEAN_LIFECYCLE, DEFAULT_LIFECYCLE, SITE_LIFECYCLE)

# Goals bound by default for jar-like packaging.
_JAR_BINDINGS: dict[str, list[str]] = {
    "clean": ["maven-clean-plugin:clean"],
    "process-resources": ["maven-resources-plugin:resources"],
    "compile": ["maven-compiler-plugin:compile"],
    "process-test-resources": ["maven-resources-plugin:testResources"],
    "test-compile": ["maven-compiler-plugin:testCompile"],
    "test": ["maven-surefire-plugin:test"],
    "package": ["maven-jar-plugin:jar"],
    "install": ["maven-install-plugin:install"],
    "deploy": ["maven-deploy-plugin:deploy"],
}

_PACKAGE_GOALS = {
    "war": "maven-war-plugin:war",
    "ear": "maven-ear-plugin:ear",
    "ejb": "maven-ejb-plugin:ejb",
    "rar": "maven-rar-plugin:rar",
}

_POM_BINDINGS: dict[str, list[str]] = {
    "clean": ["maven-clean-plugin:clean"],
    "install": ["maven-install-plugin:install"],
    "deploy": ["maven-deploy-plugin:deploy"],
}

SUREFIRE_INCLUDES = ("**/Test*.java", "**/*Test.java", "**/*Tests.java", "**/*TestCase.java")
FAILSAFE_INCLUDES = ("**/IT*.java", "**/*IT.java", "**/*ITCase.java")
TEST_RUNNER_EXCLUDES = ("**/*$*",)
JAVA_SOURCES = ("**/*.java",)

_TEST_RUNNERS = {
    "maven-surefire-plugin": SUREFIRE_INCLUDES,
    "maven-failsafe-plugin": FAILSAFE_INCLUDES,
}


def _default_bindings(packaging: str) -> dict[str, list[str]]:
    if packaging == "pom":
        return {k: list(v) for k, v in _POM_BINDINGS.items()}
    bindings = {k: list(v) for k, v in _JAR_BINDINGS.items()}
    if packaging in _PACKAGE_GOALS:
        bindings["package"] = [_PACKAGE_GOALS[packaging]]
    return bindings


def _plugins(build: ET.Element | None, section: str = "plugins") -> list[ET.Element]:
    if build is None:
        return []
    return build.findall(f"{section}/plugin")


def _plugin_configuration(build: ET.Element | None, artifact_id: str) -> ET.Element | None:
    """Return the configuration of *artifact_id*, falling back to pluginManagement."""
    for section in ("plugins", "pluginManagement/plugins"):
        for plugin in _plugins(build, section):
            if child_text(plugin, "artifactId") == artifact_id:
                config = plugin.find("configuration")
                if config is not None:
                    return config
    return None


def _declares_plugin(build: ET.Element | None, artifact_id: str) -> bool:
    return any(child_text(p, "artifactId") == artifact_id for p in _plugins(build))


def _is_true(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


class MavenDescriptorParser:
    """Translate a POM into the canonical target/fileset/property vocabulary."""

    dialect = Dialect.MAVEN

    def parse(self, path: Path) -> RawTree:
        return self._build(load_xml(path), str(path))

    def parse_string(self, text: str) -> RawTree:
        return self._build(load_xml_string(text), None)

    def _build(self, pom: ET.Element, source: str | None) -> RawTree:
        tree = RawTree(dialect=self.dialect, path=source)
        artifact_id = child_text(pom, "artifactId", "")
        packaging = child_text(pom, "packaging", "jar")
        root = tree.add(
            RawNode("project", {"name": artifact_id, "default": "package", "basedir": "."})
        )
        build = pom.find("build")

        self._add_properties(pom, build, tree, root)
        self._add_targets(build, packaging, tree, root)
        if packaging != "pom":
            self._add_filesets(build, tree, root)
            self._add_pinned_tests(build, tree, root)

        logger.debug(
            "Synthesized Maven tree for %s (%s packaging): %d elements",
            artifact_id or "<unnamed>",
            packaging,
            len(tree.nodes),
        )
        return tree

    # -----------------------------------------------------------------------
    # properties
    # -----------------------------------------------------------------------

    def _add_properties(
        self, pom: ET.Element, build: ET.Element | None, tree: RawTree, root: int
    ) -> None:
        def define(name: str, value: str | None) -> None:
            if value is not None:
                tree.add(RawNode("property", {"name": name, "value": value}), root)

        parent = pom.find("parent")
        define("project.basedir", ".")
        define("project.groupId", child_text(pom, "groupId") or child_text(parent, "groupId"))
        define("project.artifactId", child_text(pom, "artifactId"))
        define("project.version", child_text(pom, "version") or child_text(parent, "version"))
        define("project.name", child_text(pom, "name"))
        define("project.build.directory", child_text(build, "directory", "target"))
        define(
            "project.build.sourceDirectory",
            child_text(build, "sourceDirectory", "src/main/java"),
        )
        define(
            "project.build.testSourceDirectory",
            child_text(build, "testSourceDirectory", "src/test/java"),
        )

        props = pom.find("properties")
        if props is not None:
            for prop in props:
                define(prop.tag, (prop.text or "").strip())

    # -----------------------------------------------------------------------
    # lifecycle phases as targets
    # -----------------------------------------------------------------------

    def _add_targets(
        self, build: ET.Element | None, packaging: str, tree: RawTree, root: int
    ) -> None:
        bindings = _default_bindings(packaging)
        known = {phase for lifecycle in LIFECYCLES for phase in lifecycle}
        custom: list[str] = []

        for plugin in _plugins(build):
            plugin_id = child_text(plugin, "artifactId", "")
            for execution in plugin.findall("executions/execution"):
                phase = child_text(execution, "phase")
                goals = child_texts(execution, "goals/goal")
                if phase is None:
                    logger.debug(
                        "Execution %s of %s has no explicit phase; skipped",
                        child_text(execution, "id", "default"),
                        plugin_id,
                    )
                    continue
                if phase not in known and phase not in custom:
                    logger.warning("Unknown lifecycle phase %r bound by %s", phase, plugin_id)
                    custom.append(phase)
                bound = bindings.setdefault(phase, [])
                bound.extend(f"{plugin_id}:{goal}" for goal in goals)

        for lifecycle in LIFECYCLES:
            previous: str | None = None
            for phase in lifecycle:
                if phase not in bindings:
                    continue
                self._add_target(tree, root, phase, previous, bindings[phase])
                previous = phase
        for phase in custom:
            self._add_target(tree, root, phase, None, bindings[phase])

    @staticmethod
    def _add_target(
        tree: RawTree, root: int, phase: str, depends: str | None, goals: list[str]
    ) -> None:
        attrs = {"name": phase}
        if depends:
            attrs["depends"] = depends
        if goals:
            attrs["description"] = ", ".join(goals)
        tree.add(RawNode("target", attrs), root)

    # -----------------------------------------------------------------------
    # filesets
    # -----------------------------------------------------------------------

    @staticmethod
    def _add_fileset(
        tree: RawTree,
        parent: int,
        directory: str,
        includes: list[str] | tuple[str, ...],
        excludes: list[str] | tuple[str, ...],
    ) -> int:
        index = tree.add(RawNode("fileset", {"dir": directory}), parent)
        for pattern in includes:
            tree.add(RawNode("include", {"name": pattern}), index)
        for pattern in excludes:
            tree.add(RawNode("exclude", {"name": pattern}), index)
        return index

    def _add_filesets(self, build: ET.Element | None, tree: RawTree, root: int) -> None:
        compiler = _plugin_configuration(build, "maven-compiler-plugin")
        self._add_fileset(
            tree,
            root,
            "${project.build.sourceDirectory}",
            child_texts(compiler, "includes/include") or JAVA_SOURCES,
            child_texts(compiler, "excludes/exclude"),
        )
        self._add_fileset(
            tree,
            root,
            "${project.build.testSourceDirectory}",
            child_texts(compiler, "testIncludes/testInclude") or JAVA_SOURCES,
            child_texts(compiler, "testExcludes/testExclude"),
        )

        for section, item, default_dir in (
            ("resources", "resource", "src/main/resources"),
            ("testResources", "testResource", "src/test/resources"),
        ):
            declared = build.findall(f"{section}/{item}") if build is not None else []
            if not declared:
                self._add_fileset(tree, root, default_dir, (), ())
            for resource in declared:
                self._add_fileset(
                    tree,
                    root,
                    child_text(resource, "directory", default_dir),
                    child_texts(resource, "includes/include"),
                    child_texts(resource, "excludes/exclude"),
                )

        for runner, default_includes in _TEST_RUNNERS.items():
            if runner != "maven-surefire-plugin" and not _declares_plugin(build, runner):
                continue
            config = _plugin_configuration(build, runner)
            if _is_true(child_text(config, "skip")) or _is_true(child_text(config, "skipTests")):
                logger.debug("%s is skipped; no test fileset", runner)
                continue
            directory = child_text(
                config, "testSourceDirectory", "${project.build.testSourceDirectory}"
            )
            # An explicit <excludes> replaces the runner default, even when empty.
            if config is not None and config.find("excludes") is not None:
                excludes = child_texts(config, "excludes/exclude")
            else:
                excludes = list(TEST_RUNNER_EXCLUDES)
            self._add_fileset(
                tree,
                root,
                directory,
                child_texts(config, "includes/include") or default_includes,
                excludes,
            )

    # -----------------------------------------------------------------------
    # developer-pinned tests
    # -----------------------------------------------------------------------

    def _add_pinned_tests(self, build: ET.Element | None, tree: RawTree, root: int) -> None:
        for runner in _TEST_RUNNERS:
            config = _plugin_configuration(build, runner)
            for name in split_list(child_text(config, "test")):
                tree.add(RawNode("test", {"name": name}), root)

"""Tests for dialect detection and settings loading."""

from pathlib import Path

import pytest

from buildscope.config import Settings, load_settings
from buildscope.detect import detect_dialect, detect_parser
from buildscope.errors import ConfigError
from buildscope.model import Dialect
from buildscope.parsers import MavenDescriptorParser

FIXTURES = Path(__file__).parent / "fixtures"


def test_detect_by_file_name():
    assert detect_dialect(FIXTURES / "maven" / "pom.xml") is Dialect.MAVEN
    assert detect_dialect(Path("/nonexistent/parent.pom")) is Dialect.MAVEN
    assert detect_dialect(FIXTURES / "simple" / "build.xml") is Dialect.ANT
    assert detect_dialect(FIXTURES / "maven-build" / "maven-build.xml") is Dialect.ANT


def test_detect_by_namespace(tmp_path):
    path = tmp_path / "descriptor.xml"
    path.write_text('<project xmlns="http://maven.apache.org/POM/4.0.0"><build/></project>')
    assert detect_dialect(path) is Dialect.MAVEN
    assert isinstance(detect_parser(path), MavenDescriptorParser)


def test_detect_by_pom_markers(tmp_path):
    path = tmp_path / "descriptor.xml"
    path.write_text("<project><modelVersion>4.0.0</modelVersion></project>")
    assert detect_dialect(path) is Dialect.MAVEN

    path.write_text('<project name="x"><property name="a" value="b"/></project>')
    assert detect_dialect(path) is Dialect.ANT


@pytest.mark.parametrize("first_child", ["<name>demo</name>", "<description/>", "<properties/>"])
def test_pom_marker_after_other_children(tmp_path, first_child):
    path = tmp_path / "descriptor.xml"
    path.write_text(
        f"<project>{first_child}<modelVersion>4.0.0</modelVersion>"
        "<artifactId>demo</artifactId></project>"
    )
    assert detect_dialect(path) is Dialect.MAVEN


def test_nested_pom_marker_is_not_a_root_child(tmp_path):
    path = tmp_path / "descriptor.xml"
    path.write_text('<project name="x"><target name="t"><artifactId/></target></project>')
    assert detect_dialect(path) is Dialect.ANT


def test_unparseable_content_defaults_to_ant(tmp_path):
    path = tmp_path / "broken.xml"
    path.write_text("<project")
    assert detect_dialect(path) is Dialect.ANT


def test_default_settings(tmp_path):
    assert load_settings(tmp_path) == Settings()


def test_settings_from_buildscope_toml(tmp_path):
    (tmp_path / ".buildscope.toml").write_text(
        "[buildscope]\n"
        'target_order = "declaration"\n'
        "default_excludes = false\n"
        'external_targets = ["init"]\n'
        'test_properties = ["test", "it.test"]\n'
        "[buildscope.properties]\n"
        'test = "FooTest"\n'
    )
    settings = load_settings(tmp_path)
    assert settings.target_order == "declaration"
    assert settings.default_excludes is False
    assert settings.external_targets == ("init",)
    assert settings.test_properties == ("test", "it.test")
    assert settings.properties == {"test": "FooTest"}


def test_settings_from_pyproject(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "x"\n\n[tool.buildscope]\ncase_sensitive = false\n'
    )
    assert load_settings(tmp_path).case_sensitive is False


@pytest.mark.parametrize(
    "body",
    [
        'target_order = "random"',
        'default_excludes = "no"',
        'external_targets = "init"',
        "colour = 1",
        "properties = 3",
    ],
)
def test_invalid_settings_raise(tmp_path, body):
    (tmp_path / ".buildscope.toml").write_text(f"[buildscope]\n{body}\n")
    with pytest.raises(ConfigError):
        load_settings(tmp_path)


def test_broken_toml_raises(tmp_path):
    (tmp_path / ".buildscope.toml").write_text("[buildscope\n")
    with pytest.raises(ConfigError):
        load_settings(tmp_path)


def test_with_overrides_ignores_none():
    settings = Settings(target_order="declaration").with_overrides(
        target_order=None, default_excludes=False
    )
    assert settings.target_order == "declaration"
    assert settings.default_excludes is False

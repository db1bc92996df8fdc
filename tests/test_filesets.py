"""Tests for fileset collection and pattern-set merging."""

import pytest

from buildscope.errors import PatternError
from buildscope.filesets import FileSetResolver, resolve_filesets
from buildscope.parsers import AntDescriptorParser
from buildscope.patterns import DEFAULT_EXCLUDES, PatternMatcher
from buildscope.properties import PropertyResolver

DEFAULTS = set(DEFAULT_EXCLUDES)


def _tree(body: str):
    return AntDescriptorParser().parse_string(f'<project name="p">{body}</project>')


def test_single_fileset_with_default_excludes():
    includes, excludes = resolve_filesets(
        _tree('<target name="t"><copy><fileset dir="src" includes="**/*.java"/></copy></target>')
    )
    assert list(includes) == ["**/*.java"]
    assert list(excludes) == sorted(DEFAULT_EXCLUDES)


def test_no_filesets_still_yields_default_excludes():
    includes, excludes = resolve_filesets(_tree('<target name="t"/>'))
    assert list(includes) == []
    assert set(excludes) == DEFAULTS


def test_union_across_filesets_is_sorted_and_deduplicated():
    tree = _tree(
        '<fileset dir="src" includes="**/*.java, **/*.properties" excludes="**/Old*.java"/>'
        '<fileset dir="test">'
        '  <include name="src\\**\\*.java"/>'
        '  <include name="**/**/*.java"/>'
        '  <exclude name="**/Old*.java"/>'
        '</fileset>'
    )
    includes, excludes = resolve_filesets(tree)
    assert list(includes) == ["**/*.java", "**/*.properties", "src/**/*.java"]
    assert set(excludes) == DEFAULTS | {"**/Old*.java"}
    assert list(excludes) == sorted(excludes)


def test_empty_include_list_means_everything():
    includes, excludes = resolve_filesets(_tree('<fileset dir="res" excludes="**/*.bak"/>'))
    assert list(includes) == ["**"]
    assert "**/*.bak" in excludes


def test_identical_include_and_exclude_are_both_kept():
    includes, excludes = resolve_filesets(
        _tree('<fileset dir="src" includes="**/*.tmp" excludes="**/*.tmp"/>')
    )
    assert "**/*.tmp" in includes
    assert "**/*.tmp" in excludes


def test_defaults_suppressed_only_when_every_fileset_disables_them():
    off = _tree(
        '<fileset dir="a" includes="*.x" defaultexcludes="no"/>'
        '<fileset dir="b" includes="*.y" defaultexcludes="false"/>'
    )
    _, excludes = resolve_filesets(off)
    assert list(excludes) == []

    mixed = _tree(
        '<fileset dir="a" includes="*.x" defaultexcludes="no"/>'
        '<fileset dir="b" includes="*.y"/>'
    )
    _, excludes = resolve_filesets(mixed)
    assert set(excludes) == DEFAULTS


def test_default_excludes_setting_disables_defaults():
    _, excludes = resolve_filesets(
        _tree('<fileset dir="a" includes="*.x"/>'), default_excludes=False
    )
    assert list(excludes) == []


def test_defaultexcludes_task_adjusts_builtin_list():
    tree = _tree(
        '<defaultexcludes add="**/*.orig" remove="**/.svn"/>'
        '<fileset dir="a" includes="*.x"/>'
    )
    _, excludes = resolve_filesets(tree)
    assert "**/*.orig" in excludes
    assert "**/.svn" not in excludes
    assert "**/.svn/**" in excludes


def test_patternset_reference_and_nesting():
    tree = _tree(
        '<patternset id="sources"><include name="**/*.java"/><exclude name="**/gen/**"/></patternset>'
        '<target name="t">'
        '  <copy><fileset dir="src"><patternset refid="sources"/></fileset></copy>'
        '  <copy><fileset dir="res"><patternset includes="**/*.xml"/></fileset></copy>'
        '</target>'
    )
    includes, excludes = resolve_filesets(tree)
    assert list(includes) == ["**/*.java", "**/*.xml"]
    assert "**/gen/**" in excludes


def test_forward_patternset_reference():
    tree = _tree(
        '<fileset dir="src"><patternset refid="later"/></fileset>'
        '<patternset id="later" includes="**/*.groovy"/>'
    )
    includes, _ = resolve_filesets(tree)
    assert list(includes) == ["**/*.groovy"]


def test_unreferenced_patternset_contributes_nothing():
    includes, _ = resolve_filesets(
        _tree('<patternset id="unused" includes="**/*.c"/><fileset dir="x" includes="*.h"/>')
    )
    assert list(includes) == ["*.h"]


def test_guarded_batchtest_depends_on_property():
    body = (
        '<junit>'
        '  <batchtest unless="test"><fileset dir="t"><include name="**/*Test.java"/></fileset></batchtest>'
        '  <batchtest if="test"><fileset dir="t"><include name="**/${test}.java"/></fileset></batchtest>'
        '</junit>'
    )
    tree = _tree(body)
    includes, _ = resolve_filesets(tree)
    assert list(includes) == ["**/*Test.java"]

    props = PropertyResolver.from_tree(tree, {"test": "StringUtilsTest"})
    includes, _ = resolve_filesets(tree, properties=props)
    assert list(includes) == ["**/StringUtilsTest.java"]


def test_guarded_nested_include():
    tree = _tree(
        '<property name="with.extras" value="1"/>'
        '<fileset dir="src">'
        '  <include name="**/*.java"/>'
        '  <include name="extras/**" if="with.extras"/>'
        '  <include name="legacy/**" unless="with.extras"/>'
        '</fileset>'
    )
    includes, _ = resolve_filesets(tree)
    assert list(includes) == ["**/*.java", "extras/**"]


def test_target_guards_do_not_hide_filesets():
    tree = _tree(
        '<target name="offline" if="maven.mode.offline">'
        '  <copy><fileset dir="src" includes="**/*.txt"/></copy>'
        '</target>'
    )
    includes, _ = resolve_filesets(tree)
    assert list(includes) == ["**/*.txt"]


def test_property_expansion_in_patterns_and_dir():
    tree = _tree(
        '<property name="src" value="source"/>'
        '<property name="ext" value="java"/>'
        '<fileset dir="${src}/main" includes="**/*.${ext}"/>'
    )
    specs = FileSetResolver().collect(tree)
    assert specs[0].root == "source/main"
    assert specs[0].includes == ["**/*.java"]
    includes, _ = resolve_filesets(tree)
    assert list(includes) == ["**/*.java"]


def test_implicit_filesets_on_tasks_with_patterns():
    tree = _tree(
        '<target name="t">'
        '  <javac srcdir="src" includes="org/**"/>'
        '  <javac srcdir="other"/>'
        '  <jar basedir="classes" excludes="**/package.html"/>'
        '</target>'
    )
    specs = FileSetResolver().collect(tree)
    assert [(s.kind, s.root) for s in specs] == [("javac", "src"), ("jar", "classes")]
    includes, excludes = resolve_filesets(tree)
    assert list(includes) == ["**", "org/**"]
    assert "**/package.html" in excludes


def test_fileset_refid_is_not_counted_twice():
    specs = FileSetResolver().collect(
        _tree('<fileset id="fs" dir="src" includes="*.a"/><copy><fileset refid="fs"/></copy>')
    )
    assert len(specs) == 1


def test_fileset_order_does_not_change_result():
    a = '<fileset dir="a" includes="**/*.java" excludes="**/x/**"/>'
    b = '<dirset dir="b" includes="lib/** docs/"/>'
    assert resolve_filesets(_tree(a + b)) == resolve_filesets(_tree(b + a))


def test_malformed_pattern_is_fatal():
    with pytest.raises(PatternError):
        resolve_filesets(_tree('<fileset dir="src" includes="/etc/**"/>'))


def test_case_insensitive_matcher_is_used_for_normalization():
    resolver = FileSetResolver()
    includes, _ = resolver.resolve(
        _tree('<fileset dir="s" includes="A\\*.java"/>'), PatternMatcher(case_sensitive=False)
    )
    assert list(includes) == ["A/*.java"]

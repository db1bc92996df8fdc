"""Tests for property collection, expansion and guards."""

from buildscope.parsers import AntDescriptorParser
from buildscope.properties import PropertyResolver, split_list


def _resolver(body: str, overrides=None, base_dir=None, attrs='name="p"'):
    tree = AntDescriptorParser().parse_string(f"<project {attrs}>{body}</project>")
    return PropertyResolver.from_tree(tree, overrides, base_dir=base_dir)


def test_split_list_accepts_commas_and_whitespace():
    assert split_list("a, b  c,,d\n e") == ["a", "b", "c", "d", "e"]
    assert split_list("") == []
    assert split_list(None) == []


def test_first_definition_wins_and_expansion_is_eager():
    props = _resolver(
        '<property name="dir" value="build"/>'
        '<property name="out" value="${dir}/out"/>'
        '<property name="dir" value="ignored"/>'
    )
    assert props.get("dir") == "build"
    assert props.get("out") == "build/out"


def test_overrides_win_over_descriptor():
    props = _resolver('<property name="test" value="FromFile"/>', {"test": "FromCli"})
    assert props.get("test") == "FromCli"


def test_builtin_properties():
    props = _resolver("", attrs='name="demo" basedir="root"')
    assert props.get("basedir") == "root"
    assert props.get("ant.project.name") == "demo"
    assert _resolver("").get("basedir") == "."


def test_unknown_references_stay_literal():
    props = _resolver('<property name="a" value="x"/>')
    assert props.expand("${a}/${missing}") == "x/${missing}"
    assert props.expand("") == ""
    assert props.expand(None) == ""


def test_location_and_nested_properties_outside_targets_only():
    props = _resolver(
        '<property name="lib" location="lib/jars"/>'
        '<target name="t"><property name="late" value="1"/></target>'
    )
    assert props.get("lib") == "lib/jars"
    assert "late" not in props


def test_self_reference_terminates():
    props = PropertyResolver({"loop": "${loop}"})
    assert props.expand("${loop}") == "${loop}"


def test_properties_file_is_loaded(tmp_path):
    (tmp_path / "build.properties").write_text(
        "# comment\n! also a comment\nsrc.dir = source\nname: demo\nflag\n"
    )
    props = _resolver(
        '<property file="build.properties"/><property file="missing.properties"/>',
        base_dir=tmp_path,
    )
    assert props.get("src.dir") == "source"
    assert props.get("name") == "demo"
    assert props.get("flag") == ""


def test_properties_file_prefix(tmp_path):
    (tmp_path / "x.properties").write_text("a=1\n")
    props = _resolver('<property file="x.properties" prefix="cfg"/>', base_dir=tmp_path)
    assert props.get("cfg.a") == "1"


def test_guards():
    props = PropertyResolver({"set": "anything", "flag": "true", "off": "false"})
    assert props.guard_passes({"if": "set"})
    assert not props.guard_passes({"if": "unset"})
    assert props.guard_passes({"unless": "unset"})
    assert not props.guard_passes({"unless": "set"})
    assert props.guard_passes({"if": "${flag}"})
    assert not props.guard_passes({"if": "${off}"})
    assert props.guard_passes({})

import pytest

from apptargets.generators.xcode.formatter import format_string
from apptargets.generators.xcode.graph import ProjectGraph
from apptargets.generators.xcode.model import (
    PBXFileReference,
    SourceTree,
    FileType,
    generate_id,
)
from apptargets.generators.xcode.parser import parse_pbxproj
from apptargets.generators.xcode.validator import validate_references

from conftest import HOST_PBXPROJ


def test_parse_host_project():
    data = parse_pbxproj(HOST_PBXPROJ)
    assert data["rootObject"] == "83CBB9F71A601CBA00E9B192"
    project = data["objects"][data["rootObject"]]
    assert project["isa"] == "PBXProject"
    assert project["targets"] == ["13B07F861A680F5B00A75B9A"]
    assert project["projectDirPath"] == ""
    assert data["objects"]["13B07FB01A68108700A75B9A"]["sourceTree"] == "<group>"


def test_parse_rejects_malformed_input():
    with pytest.raises(ValueError):
        parse_pbxproj("{ objects = { ")
    with pytest.raises(ValueError):
        parse_pbxproj("{ archiveVersion = 1; }")


def test_format_is_stable():
    graph = ProjectGraph.loads(HOST_PBXPROJ)
    text = graph.dumps()
    assert ProjectGraph.loads(text).dumps() == text


def test_format_matches_xcode_layout():
    text = ProjectGraph.loads(HOST_PBXPROJ).dumps()
    assert text.startswith("// !$*UTF8*$!\n{\n")
    assert "/* Begin PBXNativeTarget section */" in text
    assert "13B07F861A680F5B00A75B9A /* HostApp */ = {" in text
    assert (
        "13B07FBC1A68108700A75B9A /* AppDelegate.swift in Sources */ = "
        "{isa = PBXBuildFile; fileRef = 13B07FB01A68108700A75B9A /* AppDelegate.swift */; };"
    ) in text
    assert 'productType = "com.apple.product-type.application";' in text
    assert "rootObject = 83CBB9F71A601CBA00E9B192 /* Project object */;" in text


def test_format_string_quoting():
    assert format_string("HostApp/AppDelegate.swift") == "HostApp/AppDelegate.swift"
    assert format_string("<group>") == '"<group>"'
    assert format_string("") == '""'
    assert format_string('say "hi"') == '"say \\"hi\\""'


def test_generated_ids_are_deterministic():
    ref = PBXFileReference(
        name="Assets.xcassets",
        path="Share/Assets.xcassets",
        sourceTree=SourceTree.SOURCE_ROOT,
        lastKnownFileType=FileType.ASSET_CATALOG,
    )
    assert ref.id == generate_id("PBXFileReference:SOURCE_ROOT:Share/Assets.xcassets")
    assert len(ref.id) == 24
    props = ref.to_properties()
    assert props["isa"] == "PBXFileReference"
    assert props["lastKnownFileType"] == "folder.assetcatalog"
    assert "fileEncoding" not in props


def test_validate_references():
    data = parse_pbxproj(HOST_PBXPROJ)
    assert validate_references(data) == []
    data["objects"]["83CBBA001A601CBA00E9B192"]["children"].append("DEADBEEFDEADBEEFDEADBEEF")
    errors = validate_references(data)
    assert len(errors) == 1
    assert "DEADBEEFDEADBEEFDEADBEEF" in errors[0]


def test_save_refuses_invalid_project(tmp_path):
    path = tmp_path.joinpath("project.pbxproj")
    graph = ProjectGraph.loads(HOST_PBXPROJ, path=path)
    graph.project["mainGroup"] = "DEADBEEFDEADBEEFDEADBEEF"
    with pytest.raises(ValueError):
        graph.save()
    assert not path.exists()


def test_save_only_writes_changes(tmp_path):
    path = tmp_path.joinpath("HostApp.xcodeproj", "project.pbxproj")
    path.parent.mkdir()
    path.write_text(HOST_PBXPROJ)
    graph = ProjectGraph.load(path)
    assert graph.name == "HostApp"
    graph.ensure_group("Widgets")
    assert graph.save()
    reloaded = ProjectGraph.load(path)
    assert reloaded.main_group.children[-1] == graph.main_group.children[-1]
    assert not reloaded.save()
    assert path.read_text() == reloaded.dumps()


def test_failed_save_keeps_previous_project(tmp_path, monkeypatch):
    path = tmp_path.joinpath("HostApp.xcodeproj", "project.pbxproj")
    path.parent.mkdir()
    path.write_text(HOST_PBXPROJ)
    graph = ProjectGraph.load(path)
    graph.ensure_group("Widgets")

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("apptargets.details.files.os.replace", fail_replace)
    with pytest.raises(OSError):
        graph.save()
    assert path.read_text() == HOST_PBXPROJ
    assert [p.name for p in path.parent.iterdir()] == ["project.pbxproj"]

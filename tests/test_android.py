from xml.dom.minidom import parse

import pytest

from apptargets.details.colors import parse_color, to_android_hex
from apptargets.details.descriptor import resolve
from apptargets.errors import ConfigurationError
from apptargets.generators.android.gradle import fix_build_script, fix_namespace
from apptargets.generators.android.resources import resource_name, write_color_resources


def _colors(path):
    return {
        c.getAttribute("name"): c.firstChild.data
        for c in parse(str(path)).getElementsByTagName("color")
    }


GRADLE = """android {
    namespace "com.example.template"
    compileSdkVersion 34
    defaultConfig {
        applicationId "com.example.template"
    }
}
"""


def test_fix_namespace_rewrites_declaration_only():
    fixed = fix_namespace(GRADLE, "com.example.host")
    assert 'namespace "com.example.host"' in fixed
    # Only the namespace line changes
    assert 'applicationId "com.example.template"' in fixed
    assert fixed.replace('namespace "com.example.host"', 'namespace "com.example.template"') == GRADLE


def test_fix_namespace_is_a_no_op_when_equal():
    text = GRADLE.replace("com.example.template", "com.example.host")
    assert fix_namespace(text, "com.example.host") == text


def test_fix_namespace_single_quotes():
    text = "android {\n    namespace 'com.example.template'\n}\n"
    assert fix_namespace(text, "com.example.host") == 'android {\n    namespace "com.example.host"\n}\n'


def test_fix_namespace_without_package():
    assert fix_namespace(GRADLE, None) == GRADLE
    assert fix_namespace(GRADLE, "") == GRADLE


def test_fix_namespace_without_declaration():
    text = "android {\n    compileSdkVersion 34\n}\n"
    assert fix_namespace(text, "com.example.host") == text


def test_fix_build_script(tmp_path, logger):
    script = tmp_path.joinpath("build.gradle")
    script.write_text(GRADLE)
    assert fix_build_script(script, "com.example.host", logger)
    assert 'namespace "com.example.host"' in script.read_text()
    assert not fix_build_script(script, "com.example.host", logger)


def test_parse_color():
    assert parse_color("#fff") == (255, 255, 255, 255)
    assert parse_color("#11223344") == (0x11, 0x22, 0x33, 0x44)
    assert parse_color("rgba(255, 0, 0, 0.5)") == (255, 0, 0, 128)
    assert parse_color("Black") == (0, 0, 0, 255)
    with pytest.raises(ConfigurationError):
        parse_color("not-a-color")
    with pytest.raises(ConfigurationError):
        parse_color("#12345")


def test_to_android_hex():
    assert to_android_hex("#336699") == "#FF336699"
    assert to_android_hex("transparent") == "#00000000"


def test_resource_name():
    assert resource_name("$accent") == "accent"
    assert resource_name("Background Tint") == "background_tint"
    assert resource_name("1st") == "color_1st"


def test_write_color_resources(tmp_path, host):
    config = {
        "type": "widget",
        "name": "Widget",
        "platforms": ["ios", "android"],
        "ios": {"colors": {"background": {"light": "#ffffff", "dark": "#000000"}, "tint": "#ff0000"}},
    }
    target = resolve(config, host)
    written = write_color_resources(target, tmp_path)
    light = tmp_path.joinpath("values", "widget_colors.xml")
    dark = tmp_path.joinpath("values-night", "widget_colors.xml")
    assert written == [light, dark]

    colors = _colors(light)
    assert colors == {"background": "#FFFFFFFF", "tint": "#FFFF0000"}
    colors = _colors(dark)
    assert colors == {"background": "#FF000000", "tint": "#FFFF0000"}

    assert write_color_resources(target, tmp_path) == []


def test_write_light_only_colors(tmp_path, host):
    target = resolve({"type": "widget", "name": "W", "android": {"colors": {"tint": "blue"}}}, host)
    write_color_resources(target, tmp_path)
    assert tmp_path.joinpath("values", "w_colors.xml").is_file()
    assert not tmp_path.joinpath("values-night").exists()


def test_no_colors(tmp_path, host):
    target = resolve({"type": "widget", "name": "W"}, host)
    assert write_color_resources(target, tmp_path) == []

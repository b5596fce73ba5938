from xml.dom.minidom import parse

import pytest

from conftest import ANDROID_MANIFEST, write_target

from apptargets.config import HostAppConfig
from apptargets.details.descriptor import WidgetOptions, resolve
from apptargets.errors import ConfigurationError, TargetIOError
from apptargets.generators.android.widgets import (
    TARGETS_RECEIVER,
    class_name,
    sync_manifest,
    sync_widget,
    widget_receivers,
    write_widget_resources,
)
from apptargets.plugin import with_targets


def _attributes(path):
    xelement = parse(str(path)).documentElement
    return {k: v for k, v in xelement.attributes.items() if k.startswith("android:")}


def _receivers(path):
    return [
        x.getAttribute("android:name") for x in parse(str(path)).getElementsByTagName("receiver")
    ]


@pytest.fixture
def manifest(tmp_path):
    path = tmp_path.joinpath("AndroidManifest.xml")
    path.write_text(ANDROID_MANIFEST)
    return path


def test_class_name():
    assert class_name("weather") == "Weather"
    assert class_name("my-widget") == "MyWidget"
    assert class_name("Daily Stats") == "DailyStats"


def test_widget_options(host):
    target = resolve(
        {
            "type": "widget",
            "name": "Weather",
            "platforms": ["android"],
            "android": {"widgetType": "remoteviews", "minWidth": "250dp", "updatePeriodMillis": 1800000},
        },
        HostAppConfig(name="HostApp", android={"package": "com.example.host"}),
    )
    assert target.android_widget == WidgetOptions(
        widget_type="remoteviews", min_width="250dp", update_period_millis=1800000
    )
    assert target.as_literal()["android"]["widgetType"] == "remoteviews"
    # Widget options only apply to widgets
    share = resolve({"type": "share", "name": "Share", "android": {"minWidth": "250dp"}}, host)
    assert share.android_widget == WidgetOptions()
    assert "minWidth" not in share.as_literal()["android"]


@pytest.mark.parametrize(
    "android",
    [{"widgetType": "compose"}, {"updatePeriodMillis": -1}, {"updatePeriodMillis": "daily"}, {"minWidth": 180}],
)
def test_invalid_widget_options(host, android):
    with pytest.raises(ConfigurationError):
        resolve({"type": "widget", "name": "W", "android": android}, host)


def test_write_widget_resources(tmp_path, host):
    target = resolve({"type": "widget", "name": "Weather"}, host)
    provider = tmp_path.joinpath("xml", "widgetprovider_weather.xml")
    layout = tmp_path.joinpath("layout", "widget_weather.xml")
    assert write_widget_resources(target, tmp_path) == [provider, layout]
    assert _attributes(provider) == {
        "android:minWidth": "180dp",
        "android:minHeight": "110dp",
        "android:resizeMode": "horizontal|vertical",
        "android:updatePeriodMillis": "0",
        "android:widgetCategory": "home_screen",
        "android:initialLayout": "@layout/widget_weather",
    }
    assert parse(str(layout)).documentElement.tagName == "FrameLayout"
    assert write_widget_resources(target, tmp_path) == []


def test_existing_layout_is_kept(tmp_path, host):
    target = resolve({"type": "widget", "name": "Weather"}, host)
    layout = tmp_path.joinpath("layout", "widget_weather.xml")
    layout.parent.mkdir()
    layout.write_text("<LinearLayout/>")
    write_widget_resources(target, tmp_path)
    assert layout.read_text() == "<LinearLayout/>"


def test_declared_layout_is_not_generated(tmp_path, host):
    target = resolve({"type": "widget", "name": "Weather", "android": {"initialLayout": "weather_main"}}, host)
    write_widget_resources(target, tmp_path)
    assert _attributes(tmp_path.joinpath("xml", "widgetprovider_weather.xml"))[
        "android:initialLayout"
    ] == "@layout/weather_main"
    assert not tmp_path.joinpath("layout").exists()


def test_glance_receivers(host):
    target = resolve({"type": "widget", "name": "Weather"}, host)
    names = [r[1]["android:name"] for r in widget_receivers(target, "com.example.host")]
    assert names == [
        TARGETS_RECEIVER,
        "com.example.host.widget.weather.WeatherWidgetReceiver",
        "com.example.host.widget.weather.WeatherUpdateReceiver",
    ]


def test_remoteviews_receivers(host):
    target = resolve({"type": "widget", "name": "Weather", "android": {"widgetType": "remoteviews"}}, host)
    receivers = widget_receivers(target, "com.example.host")
    assert [r[1]["android:name"] for r in receivers] == [
        TARGETS_RECEIVER,
        "com.example.host.widget.weather.WeatherProvider",
    ]


def test_sync_manifest(manifest, host, logger):
    target = resolve({"type": "widget", "name": "Weather"}, host)
    assert sync_manifest(manifest, widget_receivers(target, "com.example.host"), logger)
    text = manifest.read_text()
    assert text.startswith('<?xml version="1.0" encoding="utf-8"?>\n<manifest')
    assert '    <activity android:name=".MainActivity" android:exported="true"/>\n' in text
    assert (
        f'    <receiver android:name="{TARGETS_RECEIVER}" android:exported="false">\n'
        "      <intent-filter>\n"
        '        <action android:name="expo.modules.targets.WIDGET_EVENT"/>\n'
        "      </intent-filter>\n"
        "    </receiver>\n"
    ) in text
    assert (
        '      <meta-data android:name="android.appwidget.provider" '
        'android:resource="@xml/widgetprovider_weather"/>\n'
    ) in text
    assert text.endswith("    </receiver>\n  </application>\n</manifest>\n")

    # Receivers already registered are left alone
    assert not sync_manifest(manifest, widget_receivers(target, "com.example.host"), logger)
    assert manifest.read_text() == text


def test_receiver_shared_between_widgets(manifest, host, logger):
    for name in ("Weather", "Stocks"):
        target = resolve({"type": "widget", "name": name}, host)
        sync_manifest(manifest, widget_receivers(target, "com.example.host"), logger)
    assert _receivers(manifest).count(TARGETS_RECEIVER) == 1
    assert len(_receivers(manifest)) == 5


def test_sync_manifest_errors(tmp_path, host, logger):
    receivers = widget_receivers(resolve({"type": "widget", "name": "W"}, host), "com.example.host")
    with pytest.raises(TargetIOError):
        sync_manifest(tmp_path.joinpath("missing.xml"), receivers, logger)
    broken = tmp_path.joinpath("broken.xml")
    broken.write_text("<manifest><application>")
    with pytest.raises(TargetIOError):
        sync_manifest(broken, receivers, logger)
    bare = tmp_path.joinpath("bare.xml")
    bare.write_text("<manifest/>")
    with pytest.raises(TargetIOError):
        sync_manifest(bare, receivers, logger)


def test_sync_widget_without_package(tmp_path, manifest, host, logger):
    target = resolve({"type": "widget", "name": "W"}, host)
    with pytest.raises(ConfigurationError):
        sync_widget(target, tmp_path.joinpath("res"), manifest, None, logger)
    assert manifest.read_text() == ANDROID_MANIFEST


def test_sync_widget_ignores_other_types(tmp_path, manifest, host, logger):
    target = resolve({"type": "share", "name": "Share"}, host)
    assert sync_widget(target, tmp_path.joinpath("res"), manifest, "com.example.host", logger) == []
    assert manifest.read_text() == ANDROID_MANIFEST


def test_widget_pass(project_root, host):
    write_target(project_root, "weather", {"type": "widget", "name": "Weather", "platforms": ["android"]})
    with_targets(host, project_root, platforms=["android"])
    main = project_root.joinpath("android", "app", "src", "main")
    provider = main.joinpath("res", "xml", "widgetprovider_weather.xml")
    manifest = main.joinpath("AndroidManifest.xml")
    assert provider.is_file()
    assert "com.example.host.widget.weather.WeatherWidgetReceiver" in _receivers(manifest)

    files = {p: p.read_bytes() for p in (provider, manifest)}
    with_targets(host, project_root, platforms=["android"])
    assert {p: p.read_bytes() for p in files} == files

import plistlib

import pytest

from apptargets.errors import StorageIOError
from apptargets.storage import RecordingReloader, StorageBridge
from apptargets.storage.ios import IOSStorageModule, suite_name


@pytest.fixture
def containers(tmp_path):
    root = tmp_path.joinpath("containers")
    root.joinpath("group.widget").mkdir(parents=True)
    return root


@pytest.fixture
def ios_bridge(containers):
    return StorageBridge.for_platform("ios", containers_root=containers)


@pytest.fixture
def android_bridge(tmp_path):
    data_dir = tmp_path.joinpath("data")
    data_dir.mkdir()
    return StorageBridge.for_platform("android", data_dir=data_dir)


@pytest.fixture(params=["ios", "android"])
def bridge(request):
    return request.getfixturevalue(f"{request.param}_bridge")


def test_set_then_get(bridge):
    assert bridge.set("widget", "title", "Hello")
    assert bridge.get("widget", "title") == "Hello"
    assert bridge.set("widget", "title", "Bye")
    assert bridge.get("widget", "title") == "Bye"


def test_missing_key(bridge):
    assert bridge.get("widget", "nothing") is None


def test_remove(bridge):
    bridge.set("widget", "title", "Hello")
    assert bridge.remove("widget", "title")
    assert bridge.get("widget", "title") is None
    # Removing an absent key still succeeds
    assert bridge.remove("widget", "title")


def test_keys_and_clear(bridge):
    bridge.set("widget", "b", "2")
    bridge.set("widget", "a", "1")
    assert bridge.get_all_keys("widget") == ["a", "b"]
    assert bridge.clear("widget")
    assert bridge.get_all_keys("widget") == []


def test_values_must_be_strings(bridge):
    with pytest.raises(TypeError):
        bridge.set("widget", "count", 3)


def test_structured_data(bridge):
    assert bridge.set_data("widget", "timeline", {"entries": [1, 2], "done": False})
    assert bridge.get("widget", "timeline:data") == '{"entries": [1, 2], "done": false}'
    assert bridge.get_data("widget", "timeline") == {"entries": [1, 2], "done": False}
    assert bridge.get_data("widget", "other") is None


def test_ios_suite_file(ios_bridge, containers):
    ios_bridge.set("widget", "title", "Hello")
    path = containers.joinpath("group.widget", "Library", "Preferences", "group.widget.plist")
    with open(path, "rb") as f:
        assert plistlib.load(f) == {"title": "Hello"}
    assert suite_name("widget") == "group.widget"


def test_ios_missing_container(ios_bridge):
    with pytest.raises(StorageIOError):
        ios_bridge.set("unprovisioned", "title", "Hello")
    with pytest.raises(StorageIOError):
        ios_bridge.get("unprovisioned", "title")


def test_android_shared_preferences(android_bridge, tmp_path):
    android_bridge.set("widget", "title", "Hello & <bye>")
    path = tmp_path.joinpath("data", "shared_prefs", "widget.xml")
    assert "<map>" in path.read_text()
    assert android_bridge.get("widget", "title") == "Hello & <bye>"


def test_android_missing_data_dir(tmp_path):
    bridge = StorageBridge.for_platform("android", data_dir=tmp_path.joinpath("missing"))
    with pytest.raises(StorageIOError):
        bridge.get("widget", "title")


def test_refresh_is_recorded(containers):
    reloader = RecordingReloader()
    bridge = StorageBridge.for_platform("ios", containers_root=containers, reloader=reloader)
    assert bridge.refresh("widget")
    assert bridge.refresh("widget")
    assert reloader.requests == ["widget", "widget"]


def test_unknown_platform():
    with pytest.raises(ValueError):
        StorageBridge.for_platform("windows")


def test_ios_native_module_uses_suites(containers):
    containers.joinpath("group.shared").mkdir()
    native = IOSStorageModule(containers)
    assert native.set_string("title", "Hello", "group.shared")
    assert native.get("title", "group.shared") == "Hello"
    assert native.get("title", "group.widget") is None
    assert native.keys("group.shared") == ["title"]

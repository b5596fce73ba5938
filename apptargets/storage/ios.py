import plistlib

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from apptargets.details.files import replace_atomic
from apptargets.errors import StorageIOError
from apptargets.storage.bridge import RecordingReloader, StorageModule


def suite_name(widget_name: str) -> str:
    return f"group.{widget_name}"


class IOSStorageModule:
    """
    Suite-backed storage. Each suite is a property list inside its app group
    container, <containers>/<suite>/Library/Preferences/<suite>.plist. The
    container only exists when the app group entitlement was provisioned.
    """

    def __init__(
        self,
        containers_root: Union[str, Path],
        reloader: Optional[Callable[[str], None]] = None,
    ):
        self.containers_root = Path(containers_root)
        self.reloader = reloader if reloader is not None else RecordingReloader()

    def _preferences_path(self, suite: str) -> Path:
        container = self.containers_root.joinpath(suite)
        if not container.is_dir():
            raise StorageIOError(
                f"no shared container for suite '{suite}', "
                f"is the app group entitlement missing?"
            )
        return container.joinpath("Library", "Preferences", f"{suite}.plist")

    def _load(self, suite: str) -> Dict[str, Any]:
        path = self._preferences_path(suite)
        if not path.is_file():
            return {}
        try:
            with open(path, "rb") as f:
                return plistlib.load(f)
        except (OSError, plistlib.InvalidFileException) as e:
            raise StorageIOError(f"failed to read suite '{suite}': {e}") from e

    def _store(self, suite: str, values: Dict[str, Any]):
        path = self._preferences_path(suite)
        try:
            replace_atomic(path, plistlib.dumps(values, fmt=plistlib.FMT_BINARY))
        except OSError as e:
            raise StorageIOError(f"failed to write suite '{suite}': {e}") from e

    def set_string(self, key: str, value: str, suite: str) -> bool:
        values = self._load(suite)
        values[key] = value
        self._store(suite, values)
        return True

    def get(self, key: str, suite: str) -> Optional[str]:
        value = self._load(suite).get(key)
        return value if value is None else str(value)

    def remove(self, key: str, suite: str) -> bool:
        values = self._load(suite)
        if key in values:
            del values[key]
            self._store(suite, values)
        return True

    # Asks WidgetKit to reload the timelines of the named widget kind
    def refresh_target(self, name: str) -> bool:
        self.reloader(name)
        return True

    def keys(self, suite: str) -> List[str]:
        return sorted(self._load(suite).keys())

    def clear(self, suite: str) -> bool:
        if self._load(suite):
            self._store(suite, {})
        return True


class IOSStorage(StorageModule):
    def __init__(self, native: IOSStorageModule):
        self.native = native

    def set(self, widget_name: str, key: str, value: str) -> bool:
        return self.native.set_string(key, value, suite_name(widget_name))

    def get(self, widget_name: str, key: str) -> Optional[str]:
        return self.native.get(key, suite_name(widget_name))

    def remove(self, widget_name: str, key: str) -> bool:
        return self.native.remove(key, suite_name(widget_name))

    def refresh(self, widget_name: str) -> bool:
        return self.native.refresh_target(widget_name)

    def keys(self, widget_name: str) -> List[str]:
        return self.native.keys(suite_name(widget_name))

    def clear(self, widget_name: str) -> bool:
        return self.native.clear(suite_name(widget_name))

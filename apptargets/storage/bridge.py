"""
Runtime storage bridge.

Lets the host app and a running extension exchange small string values
through the shared storage container of the platform, and ask the OS to
redraw a widget. The native module is picked once, when the bridge is built,
from an explicit platform argument.

Every operation commits on its own. Concurrent writers (host process and
extension process) may interleave, the last write per key wins. Failures of
the underlying storage surface as StorageIOError and are never retried.
"""

import json

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Union

from apptargets.details.defaults import Platform


class StorageModule(ABC):
    @abstractmethod
    def set(self, widget_name: str, key: str, value: str) -> bool:
        pass

    @abstractmethod
    def get(self, widget_name: str, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def remove(self, widget_name: str, key: str) -> bool:
        pass

    @abstractmethod
    def refresh(self, widget_name: str) -> bool:
        pass

    @abstractmethod
    def keys(self, widget_name: str) -> List[str]:
        pass

    @abstractmethod
    def clear(self, widget_name: str) -> bool:
        pass


# Stands in for the OS reload service, records each requested widget
class RecordingReloader:
    def __init__(self):
        self.requests: List[str] = []

    def __call__(self, widget_name: str):
        self.requests.append(widget_name)


class StorageBridge:
    def __init__(self, module: StorageModule):
        self.module = module

    @staticmethod
    def for_platform(platform: Union[str, Platform], **options) -> "StorageBridge":
        # Local imports, each module pulls in its own platform storage format
        platform = Platform(platform)
        if platform == Platform.IOS:
            from apptargets.storage.ios import IOSStorage, IOSStorageModule

            return StorageBridge(IOSStorage(IOSStorageModule(**options)))
        elif platform == Platform.ANDROID:
            from apptargets.storage.android import AndroidStorageModule

            return StorageBridge(AndroidStorageModule(**options))
        raise ValueError(f"unsupported platform {platform}")

    def set(self, widget_name: str, key: str, value: str) -> bool:
        if not isinstance(value, str):
            raise TypeError(f"storage values must be strings, got {type(value).__name__}")
        return self.module.set(widget_name, key, value)

    def get(self, widget_name: str, key: str) -> Optional[str]:
        return self.module.get(widget_name, key)

    def remove(self, widget_name: str, key: str) -> bool:
        return self.module.remove(widget_name, key)

    def refresh(self, widget_name: str) -> bool:
        return self.module.refresh(widget_name)

    def get_all_keys(self, widget_name: str) -> List[str]:
        return self.module.keys(widget_name)

    def clear(self, widget_name: str) -> bool:
        return self.module.clear(widget_name)

    # Structured payloads are stored as JSON under "<name>:data"

    def set_data(self, widget_name: str, name: str, data: Any) -> bool:
        return self.set(widget_name, f"{name}:data", json.dumps(data))

    def get_data(self, widget_name: str, name: str) -> Optional[Any]:
        value = self.get(widget_name, f"{name}:data")
        if value is None:
            return None
        return json.loads(value)

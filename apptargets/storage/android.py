from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
from xml.dom.minidom import Document, parse
from xml.parsers.expat import ExpatError

from apptargets.details.files import replace_atomic
from apptargets.details.xmldoc import append_element, append_text_element, element_text, xml_bytes
from apptargets.errors import StorageIOError
from apptargets.storage.bridge import RecordingReloader, StorageModule


class AndroidStorageModule(StorageModule):
    """
    SharedPreferences-backed storage, one preferences file per widget:
    <data dir>/shared_prefs/<widget>.xml.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        broadcaster: Optional[Callable[[str], None]] = None,
    ):
        self.data_dir = Path(data_dir)
        self.broadcaster = broadcaster if broadcaster is not None else RecordingReloader()

    def _preferences_path(self, widget_name: str) -> Path:
        if not self.data_dir.is_dir():
            raise StorageIOError(f"app data directory {self.data_dir} does not exist")
        return self.data_dir.joinpath("shared_prefs", f"{widget_name}.xml")

    def _load(self, widget_name: str) -> Dict[str, str]:
        path = self._preferences_path(widget_name)
        if not path.is_file():
            return {}
        try:
            xdoc = parse(str(path))
        except (OSError, ExpatError) as e:
            raise StorageIOError(f"failed to read preferences '{widget_name}': {e}") from e
        return {
            xelement.getAttribute("name"): element_text(xelement)
            for xelement in xdoc.getElementsByTagName("string")
            if xelement.hasAttribute("name")
        }

    def _store(self, widget_name: str, values: Dict[str, str]):
        xdoc = Document()
        xmap = append_element(xdoc, "map")
        for key, value in values.items():
            append_text_element(xmap, "string", value, {"name": key})
        data = xml_bytes(xdoc, standalone=True)
        try:
            replace_atomic(self._preferences_path(widget_name), data)
        except OSError as e:
            raise StorageIOError(f"failed to write preferences '{widget_name}': {e}") from e

    def set(self, widget_name: str, key: str, value: str) -> bool:
        values = self._load(widget_name)
        values[key] = value
        self._store(widget_name, values)
        return True

    def get(self, widget_name: str, key: str) -> Optional[str]:
        return self._load(widget_name).get(key)

    def remove(self, widget_name: str, key: str) -> bool:
        values = self._load(widget_name)
        if key in values:
            del values[key]
            self._store(widget_name, values)
        return True

    # Broadcasts the widget update intent for the named provider
    def refresh(self, widget_name: str) -> bool:
        self.broadcaster(widget_name)
        return True

    def keys(self, widget_name: str) -> List[str]:
        return sorted(self._load(widget_name).keys())

    def clear(self, widget_name: str) -> bool:
        if self._load(widget_name):
            self._store(widget_name, {})
        return True

from pathlib import Path
from typing import Any, Optional

from apptargets.config import HostAppConfig


class Context:
    def __init__(self, root: Path):
        self.root = root


class TargetContext(Context):
    FILENAME = "target.config.py"
    JSON_FILENAME = "target.config.json"
    MODULENAME = "target"

    def __init__(self, root: Path, host: HostAppConfig):
        super().__init__(root)
        self.host = host
        self.directory = root.name
        # Set by the target module, a dict or a function of the host config
        self.target: Optional[Any] = None

    @property
    def module_path(self) -> Path:
        return self.root.joinpath(self.FILENAME)

    @property
    def json_path(self) -> Path:
        return self.root.joinpath(self.JSON_FILENAME)

    @classmethod
    def is_target_root(cls, root: Path) -> bool:
        return root.joinpath(cls.FILENAME).is_file() or root.joinpath(cls.JSON_FILENAME).is_file()

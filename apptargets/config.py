import json

from pathlib import Path
from typing import List, Optional, Union

APP_GROUPS_KEY = "com.apple.security.application-groups"


class HostAppConfig:
    def __init__(
        self,
        name: str,
        ios: Optional[dict] = None,
        android: Optional[dict] = None,
        extra: Optional[dict] = None,
        **kwargs
    ):
        self.name = name
        self.ios = dict(ios or {})
        self.android = dict(android or {})
        self.extra = dict(extra or {})
        self.__dict__.update(kwargs)

    @property
    def bundle_identifier(self) -> Optional[str]:
        return self.ios.get("bundleIdentifier")

    @property
    def deployment_target(self) -> Optional[str]:
        return self.ios.get("deploymentTarget")

    @property
    def package(self) -> Optional[str]:
        return self.android.get("package")

    @property
    def entitlements(self) -> dict:
        return self.ios.setdefault("entitlements", {})

    @property
    def app_groups(self) -> List[str]:
        groups = self.ios.get("entitlements", {}).get(APP_GROUPS_KEY)
        if isinstance(groups, list):
            return list(groups)
        return []

    @property
    def schemes(self) -> List[str]:
        scheme = getattr(self, "scheme", None)
        if isinstance(scheme, str):
            schemes = [scheme]
        elif isinstance(scheme, list):
            schemes = list(scheme)
        else:
            schemes = []
        if self.bundle_identifier:
            schemes.append(self.bundle_identifier)
        return schemes

    @staticmethod
    def load(path: Union[str, Path]) -> "HostAppConfig":
        with open(path, "r") as f:
            data = json.load(f)
        # app.json may wrap everything in an "expo" key...
        if isinstance(data.get("expo"), dict):
            data = data["expo"]
        if "name" not in data:
            raise ValueError(f"app config {path} does not declare a name")
        return HostAppConfig(**data)

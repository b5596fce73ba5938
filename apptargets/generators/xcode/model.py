# Xcode project file model.
#
# This module defines typed representations of the Xcode project objects
# (.pbxproj) that target generation creates. Objects read from an existing
# project are kept as plain property dictionaries in the ProjectGraph arena,
# objects created here are converted into that form with to_properties().

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, TypeVar, Generic, Union
from abc import ABC, abstractmethod

import uuid


# Type definition for Xcode object identifiers
class XcodeID(str):
    pass


def generate_id(key: str) -> XcodeID:
    return XcodeID(uuid.uuid5(uuid.NAMESPACE_X500, key).hex.upper()[:24])


# Fields marked internal take part in the object key but are not written to
# the project file
def internal(default=None):
    return field(default=default, metadata={"internal": True})


# Source Tree values used in PBXFileReference and PBXGroup
class SourceTree(Enum):
    # GROUP - relative to the enclosing group, used for organizational groups
    GROUP = "<group>"
    # SOURCE_ROOT - relative to the directory holding the .xcodeproj
    SOURCE_ROOT = "SOURCE_ROOT"
    # BUILT_PRODUCTS_DIR - for product references only
    BUILT_PRODUCTS_DIR = "BUILT_PRODUCTS_DIR"
    # SDKROOT - system frameworks linked by extension targets
    SDKROOT = "SDKROOT"


# Destination subfolder specifications used in PBXCopyFilesBuildPhase
class DstSubfolderSpec(Enum):
    ABSOLUTE_PATH = 0
    WRAPPER = 1
    EXECUTABLES = 6
    RESOURCES = 7
    FRAMEWORKS = 10
    SHARED_SUPPORT = 12
    PLUGINS = 13
    PRODUCTS_DIRECTORY = 16


# File types used in PBXFileReference
class FileType(Enum):
    SWIFT = "sourcecode.swift"
    OBJC = "sourcecode.c.objc"
    C_HEADER = "sourcecode.c.h"
    XIB = "file.xib"
    STORYBOARD = "file.storyboard"
    PLIST = "text.plist.xml"
    ENTITLEMENTS = "text.plist.entitlements"
    STRINGS = "text.plist.strings"
    ASSET_CATALOG = "folder.assetcatalog"
    FRAMEWORK = "wrapper.framework"
    APP = "wrapper.application"
    APP_EXTENSION = "wrapper.app-extension"
    JSON = "text.json"
    JAVASCRIPT = "sourcecode.javascript"
    HTML = "text.html"
    CSS = "text.css"
    PNG = "image.png"
    TEXT = "text"
    FOLDER = "folder"

    @staticmethod
    def from_extension(ext: str) -> "FileType":
        if ext.startswith("."):
            ext = ext[1:]

        ext_to_type = {
            "swift": FileType.SWIFT,
            "m": FileType.OBJC,
            "h": FileType.C_HEADER,
            "xib": FileType.XIB,
            "storyboard": FileType.STORYBOARD,
            "plist": FileType.PLIST,
            "entitlements": FileType.ENTITLEMENTS,
            "strings": FileType.STRINGS,
            "xcassets": FileType.ASSET_CATALOG,
            "framework": FileType.FRAMEWORK,
            "app": FileType.APP,
            "appex": FileType.APP_EXTENSION,
            "json": FileType.JSON,
            "js": FileType.JAVASCRIPT,
            "html": FileType.HTML,
            "css": FileType.CSS,
            "png": FileType.PNG,
        }

        return ext_to_type.get(ext.lower(), FileType.TEXT)


# Product types used in PBXNativeTarget
class ProductType(Enum):
    APPLICATION = "com.apple.product-type.application"
    ON_DEMAND_INSTALL_CAPABLE_APPLICATION = (
        "com.apple.product-type.application.on-demand-install-capable"
    )
    APP_EXTENSION = "com.apple.product-type.app-extension"
    MESSAGES_STICKER_PACK = "com.apple.product-type.app-extension.messages-sticker-pack"
    EXTENSIONKIT_EXTENSION = "com.apple.product-type.extensionkit-extension"


# Boolean-like values used in build settings
class YesNo(Enum):
    YES = "YES"
    NO = "NO"


class ProxyType(Enum):
    TARGET_DEPENDENCY = 1  # For target dependencies
    PRODUCT_REFERENCE = 2  # For product references

    def to_xcode(self) -> int:
        return self.value


# Build setting with type-safe value
@dataclass
class BuildSetting:
    value: Union[YesNo, int, float, str, List[str]]


ReferenceT = TypeVar("ReferenceT", bound="XcodeObject")


@dataclass
class Reference(Generic[ReferenceT]):
    id: XcodeID
    comment: Optional[str] = None


def to_plain(value: Any) -> Any:
    if isinstance(value, Reference):
        return value.id
    if isinstance(value, BuildSetting):
        return to_plain(value.value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items() if v is not None}
    return value


# Base class for all Xcode objects
@dataclass
class XcodeObject(ABC):
    # ID will be generated in __post_init__
    id: XcodeID = field(init=False)

    def __post_init__(self) -> None:
        self.id = generate_id(self.key())

    @abstractmethod
    def key(self) -> str:
        pass

    def to_properties(self) -> Dict[str, Any]:
        props: Dict[str, Any] = {"isa": self.__class__.__name__}
        for f in fields(self):
            if f.name == "id" or f.metadata.get("internal"):
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            props[f.name] = to_plain(value)
        return props


# PBX* object types
@dataclass
class PBXFileReference(XcodeObject):
    name: str
    path: str
    sourceTree: SourceTree
    lastKnownFileType: Optional[FileType] = None
    explicitFileType: Optional[FileType] = None
    includeInIndex: Optional[int] = None
    fileEncoding: Optional[int] = None

    def key(self) -> str:
        return f"PBXFileReference:{self.sourceTree.name}:{self.path}"


@dataclass
class PBXBuildFile(XcodeObject):
    fileRef: Reference[PBXFileReference]  # Reference to the file
    settings: Optional[Dict[str, Any]] = None  # Build settings for this file
    target_name: str = internal("")  # Name of the target this build file belongs to

    def key(self) -> str:
        return f"PBXBuildFile:{self.fileRef.id}:{self.target_name}"


@dataclass
class PBXSourcesBuildPhase(XcodeObject):
    files: List[Reference[PBXBuildFile]]
    buildActionMask: int = 2147483647
    runOnlyForDeploymentPostprocessing: int = 0
    target_name: str = internal("")

    def key(self) -> str:
        return f"{self.__class__.__name__}:{self.target_name}"


@dataclass
class PBXFrameworksBuildPhase(XcodeObject):
    files: List[Reference[PBXBuildFile]]
    buildActionMask: int = 2147483647
    runOnlyForDeploymentPostprocessing: int = 0
    target_name: str = internal("")

    def key(self) -> str:
        return f"{self.__class__.__name__}:{self.target_name}"


@dataclass
class PBXResourcesBuildPhase(XcodeObject):
    files: List[Reference[PBXBuildFile]]
    buildActionMask: int = 2147483647
    runOnlyForDeploymentPostprocessing: int = 0
    target_name: str = internal("")

    def key(self) -> str:
        return f"{self.__class__.__name__}:{self.target_name}"


@dataclass
class PBXCopyFilesBuildPhase(XcodeObject):
    files: List[Reference[PBXBuildFile]]
    dstPath: str
    dstSubfolderSpec: DstSubfolderSpec
    name: Optional[str] = None
    buildActionMask: int = 2147483647
    runOnlyForDeploymentPostprocessing: int = 0
    target_name: str = internal("")

    def key(self) -> str:
        return f"{self.__class__.__name__}:{self.target_name}:{self.dstPath}:{self.dstSubfolderSpec.name}"


@dataclass
class PBXGroup(XcodeObject):
    children: List[Reference[Union["PBXGroup", PBXFileReference]]]
    sourceTree: SourceTree
    name: Optional[str] = None
    path: Optional[str] = None
    group_id: Optional[str] = internal()  # Optional unique identifier for the group

    def key(self) -> str:
        if self.path:
            return f"PBXGroup:{self.name}:{self.path}"
        elif self.group_id:
            return f"PBXGroup:{self.name}:{self.group_id}"
        return f"PBXGroup:{self.name}"


@dataclass
class PBXContainerItemProxy(XcodeObject):
    containerPortal: str  # ID of the PBXProject
    remoteGlobalIDString: str  # ID of the referenced item
    remoteInfo: str  # Name of the referenced item
    proxyType: ProxyType = ProxyType.TARGET_DEPENDENCY  # Type of proxy

    def key(self) -> str:
        return f"PBXContainerItemProxy:{self.containerPortal}:{self.remoteGlobalIDString}:{self.remoteInfo}"


@dataclass
class PBXTargetDependency(XcodeObject):
    targetProxy: Reference[
        PBXContainerItemProxy
    ]  # Points to proxy that describes the target
    target: Optional[str] = (
        None  # Optional ID of local target (only if in same project)
    )

    def key(self) -> str:
        target_id = self.target if self.target else "None"
        return f"PBXTargetDependency:{self.targetProxy.id}:{target_id}"


@dataclass
class XCBuildConfiguration(XcodeObject):
    name: str
    buildSettings: Dict[str, BuildSetting]
    owner: Optional[str] = internal()  # disambiguate configs across project/targets

    def key(self) -> str:
        owner_part = self.owner if self.owner else "GLOBAL"
        return f"XCBuildConfiguration:{owner_part}:{self.name}"


@dataclass
class XCConfigurationList(XcodeObject):
    buildConfigurations: List[Reference[XCBuildConfiguration]]
    defaultConfigurationIsVisible: int = 0
    defaultConfigurationName: str = "Release"
    owner: Optional[str] = internal()  # disambiguate lists across project/targets

    def key(self) -> str:
        owner_part = self.owner if self.owner else "GLOBAL"
        return f"XCConfigurationList:{owner_part}:{self.defaultConfigurationName}"


@dataclass
class PBXNativeTarget(XcodeObject):
    name: str
    buildConfigurationList: Reference[XCConfigurationList]
    buildPhases: List[
        Reference[
            Union[
                PBXSourcesBuildPhase,
                PBXFrameworksBuildPhase,
                PBXResourcesBuildPhase,
                PBXCopyFilesBuildPhase,
            ]
        ]
    ]
    dependencies: List[Reference[PBXTargetDependency]]
    productName: str
    productReference: Reference[PBXFileReference]
    productType: ProductType
    buildRules: List[str] = field(default_factory=list)

    def key(self) -> str:
        return f"PBXNativeTarget:{self.name}"

# Project graph.
#
# The .pbxproj file is owned by Xcode and by whatever generated it, so the
# graph keeps every object exactly as parsed (an arena of property dicts keyed
# by identifier) and only exposes narrow mutations over that key space.
# Objects created here come from the typed model and get deterministic ids,
# so repeated passes converge on the same file.

import os

from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, Union

from apptargets.details.files import replace_atomic
from apptargets.generators.xcode.formatter import format_pbxproj
from apptargets.generators.xcode.model import (
    XcodeID,
    XcodeObject,
    Reference,
    SourceTree,
    FileType,
    PBXBuildFile,
    PBXFileReference,
    PBXGroup,
    PBXSourcesBuildPhase,
    PBXFrameworksBuildPhase,
    PBXResourcesBuildPhase,
    PBXCopyFilesBuildPhase,
    DstSubfolderSpec,
)
from apptargets.generators.xcode.parser import parse_pbxproj
from apptargets.generators.xcode.validator import validate_references

Properties = Dict[str, Any]

BuildPhaseType = Type[
    Union[PBXSourcesBuildPhase, PBXFrameworksBuildPhase, PBXResourcesBuildPhase]
]


class NativeTargetNode:
    def __init__(self, graph: "ProjectGraph", id: XcodeID):
        self.graph = graph
        self.id = id

    @property
    def properties(self) -> Properties:
        return self.graph.objects[self.id]

    @property
    def name(self) -> str:
        return self.properties.get("name") or ""

    @property
    def product_name(self) -> str:
        return self.properties.get("productName") or self.name

    @property
    def product_type(self) -> Optional[str]:
        return self.properties.get("productType")

    @product_type.setter
    def product_type(self, value: str):
        self.properties["productType"] = value

    @property
    def build_phases(self) -> List[str]:
        return self.properties.setdefault("buildPhases", [])

    @property
    def dependencies(self) -> List[str]:
        return self.properties.setdefault("dependencies", [])

    @property
    def product_reference(self) -> Optional[str]:
        return self.properties.get("productReference")

    def configurations(self) -> Iterator[Tuple[str, Properties]]:
        list_id = self.properties.get("buildConfigurationList")
        config_list = self.graph.objects.get(list_id, {})
        for config_id in config_list.get("buildConfigurations", []):
            yield config_id, self.graph.objects[config_id]

    def build_setting(self, key: str) -> Optional[Any]:
        for _, config in self.configurations():
            value = config.get("buildSettings", {}).get(key)
            if value is not None:
                return value
        return None

    def __repr__(self):
        return f"NativeTargetNode({self.id}, {self.name!r})"


class ResourceGroup:
    def __init__(self, graph: "ProjectGraph", id: XcodeID):
        self.graph = graph
        self.id = id

    @property
    def properties(self) -> Properties:
        return self.graph.objects[self.id]

    @property
    def name(self) -> Optional[str]:
        return self.properties.get("name") or self.properties.get("path")

    @property
    def children(self) -> List[str]:
        return self.properties.setdefault("children", [])

    def find_reference(self, path: str) -> Optional[str]:
        for child_id in self.children:
            child = self.graph.objects.get(child_id, {})
            if child.get("isa") == "PBXFileReference" and child.get("path") == path:
                return child_id
        return None

    def references(self, path: str) -> bool:
        return self.find_reference(path) is not None

    def add_child(self, child_id: str):
        if child_id not in self.children:
            self.children.append(child_id)


class ProjectGraph:
    def __init__(self, data: Dict[str, Any], path: Optional[Path] = None, text: Optional[str] = None):
        self.data = data
        self.path = Path(path) if path else None
        self._text = text

    @staticmethod
    def loads(text: str, path: Optional[Path] = None) -> "ProjectGraph":
        return ProjectGraph(parse_pbxproj(text), path=path, text=text)

    @staticmethod
    def load(path: Union[str, Path]) -> "ProjectGraph":
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        return ProjectGraph.loads(text, path=path)

    @property
    def objects(self) -> Dict[str, Properties]:
        return self.data["objects"]

    @property
    def name(self) -> str:
        # project.pbxproj lives inside <name>.xcodeproj
        if self.path is not None:
            return self.path.parent.stem
        return "Project"

    @property
    def root_id(self) -> str:
        return self.data["rootObject"]

    @property
    def project(self) -> Properties:
        return self.objects[self.root_id]

    def dumps(self) -> str:
        return format_pbxproj(self.data, self.name)

    def save(self, path: Optional[Union[str, Path]] = None) -> bool:
        path = Path(path) if path else self.path
        if path is None:
            raise ValueError("project graph has no path to save to")
        if errors := validate_references(self.data):
            raise ValueError(f"Invalid project: {errors}")
        text = self.dumps()
        if text == self._text and path == self.path:
            return False
        replace_atomic(path, text.encode("utf-8"))
        self._text = text
        return True

    def objects_of(self, isa: str) -> Iterator[Tuple[str, Properties]]:
        for object_id, props in self.objects.items():
            if props.get("isa") == isa:
                yield object_id, props

    def add_object(self, obj: XcodeObject) -> XcodeID:
        if obj.id not in self.objects:
            self.objects[obj.id] = obj.to_properties()
        return obj.id

    # Targets

    def native_targets(self) -> Iterator[NativeTargetNode]:
        for target_id in self.project.get("targets", []):
            if self.objects.get(target_id, {}).get("isa") == "PBXNativeTarget":
                yield NativeTargetNode(self, target_id)

    def find_native_target(self, product_name: str) -> Optional[NativeTargetNode]:
        for target_id, props in self.objects_of("PBXNativeTarget"):
            node = NativeTargetNode(self, target_id)
            if product_name in (node.name, node.product_name):
                return node
        return None

    def application_target(self) -> Optional[NativeTargetNode]:
        for node in self.native_targets():
            if node.product_type == "com.apple.product-type.application":
                return node
        return None

    def add_native_target(self, target_id: str):
        targets = self.project.setdefault("targets", [])
        if target_id not in targets:
            targets.append(target_id)

    def configuration_names(self) -> Tuple[List[str], str]:
        list_id = self.project.get("buildConfigurationList")
        config_list = self.objects.get(list_id, {})
        names = [
            self.objects[c].get("name")
            for c in config_list.get("buildConfigurations", [])
        ]
        default = config_list.get("defaultConfigurationName") or "Release"
        return names or ["Debug", "Release"], default

    def set_build_settings(self, target: NativeTargetNode, settings: Dict[str, Any]) -> bool:
        changed = False
        for _, config in target.configurations():
            build_settings = config.setdefault("buildSettings", {})
            for key, value in settings.items():
                if build_settings.get(key) != value:
                    build_settings[key] = value
                    changed = True
        return changed

    # Groups

    @property
    def main_group(self) -> ResourceGroup:
        return ResourceGroup(self, self.project["mainGroup"])

    @property
    def products_group(self) -> ResourceGroup:
        return ResourceGroup(self, self.project.get("productRefGroup") or self.project["mainGroup"])

    def ensure_group(self, name: str, parent: Optional[ResourceGroup] = None) -> ResourceGroup:
        parent = parent or self.main_group
        for child_id in parent.children:
            child = self.objects.get(child_id, {})
            if child.get("isa") != "PBXGroup":
                continue
            if name in (child.get("name"), child.get("path")):
                return ResourceGroup(self, child_id)
        group = PBXGroup(
            children=[],
            sourceTree=SourceTree.GROUP,
            name=name,
            group_id=f"{parent.id}:{name}",
        )
        group_id = self.add_object(group)
        parent.add_child(group_id)
        return ResourceGroup(self, group_id)

    # Build phases

    def find_build_phase(self, target: NativeTargetNode, isa: str) -> Optional[str]:
        for phase_id in target.build_phases:
            if self.objects.get(phase_id, {}).get("isa") == isa:
                return phase_id
        return None

    def ensure_build_phase(self, target: NativeTargetNode, phase_type: BuildPhaseType) -> str:
        phase_id = self.find_build_phase(target, phase_type.__name__)
        if phase_id is None:
            phase_id = self.add_object(phase_type(files=[], target_name=target.name))
            target.build_phases.append(phase_id)
        return phase_id

    def ensure_copy_files_phase(
        self,
        target: NativeTargetNode,
        name: str,
        dst_path: str,
        dst_subfolder_spec: DstSubfolderSpec,
    ) -> str:
        for phase_id in target.build_phases:
            phase = self.objects.get(phase_id, {})
            if (
                phase.get("isa") == "PBXCopyFilesBuildPhase"
                and phase.get("dstPath", "") == dst_path
                and str(phase.get("dstSubfolderSpec")) == str(dst_subfolder_spec.value)
            ):
                return phase_id
        phase = PBXCopyFilesBuildPhase(
            files=[],
            dstPath=dst_path,
            dstSubfolderSpec=dst_subfolder_spec,
            name=name,
            runOnlyForDeploymentPostprocessing=0,
            target_name=target.name,
        )
        phase_id = self.add_object(phase)
        target.build_phases.append(phase_id)
        return phase_id

    def add_build_file(
        self,
        target: NativeTargetNode,
        phase_id: str,
        file_ref: str,
        settings: Optional[Dict[str, Any]] = None,
    ) -> bool:
        phase = self.objects[phase_id]
        files = phase.setdefault("files", [])
        for build_file_id in files:
            if self.objects.get(build_file_id, {}).get("fileRef") == file_ref:
                return False
        build_file = PBXBuildFile(
            fileRef=Reference(XcodeID(file_ref)),
            settings=settings,
            target_name=f"{target.name}:{phase.get('isa')}",
        )
        files.append(self.add_object(build_file))
        return True

    # Files

    def ensure_file_reference(
        self,
        group: ResourceGroup,
        path: str,
        source_tree: SourceTree = SourceTree.SOURCE_ROOT,
    ) -> str:
        file_ref = group.find_reference(path)
        if file_ref is None:
            _, ext = os.path.splitext(path)
            file_type = FileType.from_extension(ext)
            ref = PBXFileReference(
                name=os.path.basename(path),
                path=path,
                sourceTree=source_tree,
                lastKnownFileType=file_type,
                fileEncoding=4 if file_type.value.startswith(("sourcecode", "text")) else None,
            )
            file_ref = self.add_object(ref)
            group.add_child(file_ref)
        return file_ref

    def add_resource(self, target: NativeTargetNode, group: ResourceGroup, path: str) -> bool:
        # Registered at most once per group, checked by path
        if group.references(path):
            return False
        file_ref = self.ensure_file_reference(group, path)
        phase_id = self.ensure_build_phase(target, PBXResourcesBuildPhase)
        self.add_build_file(target, phase_id, file_ref)
        return True

    def add_source(self, target: NativeTargetNode, group: ResourceGroup, path: str) -> bool:
        if group.references(path):
            return False
        file_ref = self.ensure_file_reference(group, path)
        phase_id = self.ensure_build_phase(target, PBXSourcesBuildPhase)
        self.add_build_file(target, phase_id, file_ref)
        return True

    def add_framework(self, target: NativeTargetNode, framework: str) -> bool:
        group = self.ensure_group("Frameworks")
        path = f"System/Library/Frameworks/{framework}.framework"
        file_ref = self.ensure_file_reference(group, path, SourceTree.SDKROOT)
        phase_id = self.ensure_build_phase(target, PBXFrameworksBuildPhase)
        return self.add_build_file(target, phase_id, file_ref)

from pathlib import Path
from typing import List, Optional

from apptargets.config import HostAppConfig
from apptargets.details.descriptor import ResolvedTargetDescriptor
from apptargets.details.logger import Logger
from apptargets.details.workspace import Workspace
from apptargets.errors import ConfigurationError, TargetIOError
from apptargets.generators.xcode.assets import prepare_asset_catalog, sync_target_assets
from apptargets.generators.xcode.entitlements import (
    check_app_clip_association,
    collect_app_groups,
    merge_entitlements,
    read_entitlements,
    sync_entitlements,
    write_entitlements,
)
from apptargets.generators.xcode.graph import ProjectGraph
from apptargets.generators.xcode.info_plist import write_info_plist
from apptargets.generators.xcode.podfile import sync_target_podfile
from apptargets.generators.xcode.targets import ensure_native_target


class XcodeGenerator:
    def __init__(self, workspace: Workspace, host: HostAppConfig, logger: Logger):
        self.workspace = workspace
        self.host = host
        self.logger = logger

        pbxproj = workspace.find_pbxproj()
        if pbxproj is None:
            raise TargetIOError(f"no Xcode project found under {workspace.ios_root}")
        try:
            self.graph = ProjectGraph.load(pbxproj)
        except OSError as e:
            raise TargetIOError(f"failed to read {pbxproj}: {e}") from e
        logger.log(f"loaded {pbxproj}")

    def prepare(self, targets: List[ResolvedTargetDescriptor]) -> None:
        """Register the app groups of every target with the host before any target is written."""
        self.host.ios["entitlements"] = collect_app_groups(self.host.entitlements, targets)

    def __call__(self, target: ResolvedTargetDescriptor) -> None:
        """Apply every iOS generation step for one target."""
        paths = self.workspace.paths(target)
        host_bundle_identifier = self.host.bundle_identifier

        prepare_asset_catalog(target, paths, self.logger)
        write_info_plist(paths.info_plist, target, host_bundle_identifier)

        host_entitlements, target_entitlements = sync_entitlements(
            self.host.entitlements,
            target,
            read_entitlements(paths.entitlements),
            host_bundle_identifier,
        )
        if errors := check_app_clip_association(target, target_entitlements, host_bundle_identifier):
            raise ConfigurationError("; ".join(errors))
        write_entitlements(paths.entitlements, target_entitlements)
        self.host.ios["entitlements"] = host_entitlements

        node = ensure_native_target(self.graph, target, paths, self.logger)
        group = self.graph.ensure_group(target.product_name)
        for source in paths.sources():
            self.graph.add_source(node, group, paths.relative(source))
        if target.defaults.requires_code:
            for framework in target.frameworks:
                self.graph.add_framework(node, framework)

        sync_target_assets(self.graph, target, paths, self.logger)
        sync_target_podfile(self.workspace.ios_root.joinpath("Podfile"), target, self.logger)

    def host_entitlements_path(self) -> Optional[Path]:
        app_target = self.graph.application_target()
        if app_target is None:
            return None
        setting = app_target.build_setting("CODE_SIGN_ENTITLEMENTS")
        if not setting:
            return None
        return self.workspace.ios_root.joinpath(setting)

    def finish(self) -> bool:
        """Write the host entitlements file and the project, returns whether the project changed."""
        entitlements_path = self.host_entitlements_path()
        if entitlements_path is not None and entitlements_path.is_file():
            current = read_entitlements(entitlements_path)
            if write_entitlements(entitlements_path, merge_entitlements(current, self.host.entitlements)):
                self.logger.log(f"updated {entitlements_path}")
        try:
            changed = self.graph.save()
        except OSError as e:
            raise TargetIOError(f"failed to write {self.graph.path}: {e}") from e
        if changed:
            self.logger.summary(True, f"Updated {self.graph.path.parent.name}")
        return changed

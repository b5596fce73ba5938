import json
import os

from dataclasses import dataclass
from importlib.machinery import SourceFileLoader
from importlib.util import spec_from_loader, module_from_spec
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from apptargets.config import HostAppConfig
from apptargets.details.context import TargetContext
from apptargets.details.descriptor import ResolvedTargetDescriptor, resolve, sanitize_name
from apptargets.details.logger import Logger
from apptargets.errors import ApptargetsError, ConfigurationError, TargetIOError

MESSAGE_PAYLOAD_PROVIDER = "com.apple.message-payload-provider"


def generate_roots(targets_root: Path) -> Iterator[Path]:
    if not targets_root.is_dir():
        return
    for root in sorted(targets_root.iterdir()):
        if not root.is_dir() or root.name.startswith((".", "__")):
            continue
        if TargetContext.is_target_root(root):
            yield root


def load_user_module(ctx: TargetContext):
    module_name = ".".join(
        ["apptargets", "targets", sanitize_name(ctx.directory) or "unnamed", ctx.MODULENAME]
    )
    module_path = ctx.module_path
    spec = spec_from_loader(
        module_name, SourceFileLoader(module_name, str(module_path))
    )
    if not spec or not spec.loader:
        raise RuntimeError(f"failed to load module spec {module_path}")
    target_module = module_from_spec(spec)
    setattr(target_module, "CTX", ctx)
    try:
        spec.loader.exec_module(target_module)
    except ApptargetsError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"failed to load {module_path}: {type(e).__name__}: {e}"
        ) from e
    # Modules either export `target` or assign CTX.target
    if ctx.target is None:
        ctx.target = getattr(target_module, "target", None)
    if ctx.target is None:
        raise ConfigurationError(f"{module_path} does not define 'target'")


def load_target_config(ctx: TargetContext):
    if ctx.module_path.is_file():
        load_user_module(ctx)
        return
    try:
        with open(ctx.json_path, "r") as f:
            ctx.target = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid target config {ctx.json_path}: {e}") from e
    except OSError as e:
        raise TargetIOError(f"failed to read {ctx.json_path}: {e}") from e


@dataclass
class TargetPaths:
    project_root: Path
    target_root: Path
    product_name: str

    @property
    def ios_root(self) -> Path:
        return self.project_root.joinpath("ios")

    @property
    def android_root(self) -> Path:
        return self.project_root.joinpath("android")

    @property
    def build_dir(self) -> Path:
        return self.target_root.joinpath("ios", "build")

    @property
    def asset_source(self) -> Path:
        return self.build_dir.joinpath("Assets.xcassets")

    @property
    def asset_destination(self) -> Path:
        return self.ios_root.joinpath(self.product_name, "Assets.xcassets")

    @property
    def info_plist(self) -> Path:
        return self.build_dir.joinpath("Info.plist")

    @property
    def entitlements(self) -> Path:
        return self.build_dir.joinpath("generated.entitlements")

    @property
    def android_res(self) -> Path:
        return self.android_root.joinpath("app", "src", "main", "res")

    @property
    def android_manifest(self) -> Path:
        return self.android_root.joinpath("app", "src", "main", "AndroidManifest.xml")

    def sources(self) -> List[Path]:
        ios_dir = self.target_root.joinpath("ios")
        if not ios_dir.is_dir():
            return []
        return sorted(
            p for p in ios_dir.rglob("*.swift") if self.build_dir not in p.parents
        )

    # Paths in the Xcode project are relative to the directory holding it
    def relative(self, path: Path) -> str:
        return Path(os.path.relpath(path, self.ios_root)).as_posix()


class Workspace:
    def __init__(
        self,
        project_root: Union[str, Path] = Path("."),
        targets_root: Union[str, Path] = "targets",
    ):
        self.root = Path(project_root).resolve()
        self.targets_root = self.root.joinpath(targets_root)

    @property
    def ios_root(self) -> Path:
        return self.root.joinpath("ios")

    @property
    def android_root(self) -> Path:
        return self.root.joinpath("android")

    def load_host(self) -> HostAppConfig:
        return HostAppConfig.load(self.root.joinpath("app.json"))

    def contexts(self, host: HostAppConfig) -> List[TargetContext]:
        return [TargetContext(root, host) for root in generate_roots(self.targets_root)]

    def resolve(
        self, host: HostAppConfig, logger: Logger
    ) -> Tuple[List[ResolvedTargetDescriptor], List[Tuple[str, Exception]]]:
        resolved: List[ResolvedTargetDescriptor] = []
        errors: List[Tuple[str, Exception]] = []
        payload_provider: Optional[str] = None
        # Product name -> directory, a product name maps to one native target
        product_names: Dict[str, str] = {}
        for ctx in self.contexts(host):
            try:
                load_target_config(ctx)
                target = resolve(ctx.target, host, directory=ctx.root)
                if target.product_name in product_names:
                    raise ConfigurationError(
                        f"targets '{product_names[target.product_name]}' and "
                        f"'{ctx.directory}' both resolve to product name "
                        f"'{target.product_name}'"
                    )
                # Messages only accepts one payload provider per app
                if target.defaults.extension_point == MESSAGE_PAYLOAD_PROVIDER:
                    if payload_provider is not None:
                        raise ConfigurationError(
                            f"only one message-payload-provider target is allowed, "
                            f"'{payload_provider}' already declares one"
                        )
                    payload_provider = target.name
                product_names[target.product_name] = ctx.directory
            except ApptargetsError as e:
                logger.summary(False, f"Failed to resolve {ctx.directory}", str(e))
                errors.append((ctx.directory, e))
                continue
            logger.log(f"resolved {ctx.directory} as {target.type.value} '{target.product_name}'")
            resolved.append(target)
        return resolved, errors

    def paths(self, target: ResolvedTargetDescriptor) -> TargetPaths:
        directory = target.directory or target.name
        return TargetPaths(
            project_root=self.root,
            target_root=self.targets_root.joinpath(directory),
            product_name=target.product_name,
        )

    def find_pbxproj(self) -> Optional[Path]:
        if not self.ios_root.is_dir():
            return None
        for project in sorted(self.ios_root.glob("*.xcodeproj")):
            if project.name == "Pods.xcodeproj":
                continue
            pbxproj = project.joinpath("project.pbxproj")
            if pbxproj.is_file():
                return pbxproj
        return None

    def find_build_script(self) -> Optional[Path]:
        for name in ("build.gradle", "build.gradle.kts"):
            script = self.android_root.joinpath("app", name)
            if script.is_file():
                return script
        return None

from typing import Any, Dict, List, Optional

from apptargets.details.defaults import TargetType
from apptargets.details.descriptor import ACCENT_COLOR_NAME, ResolvedTargetDescriptor
from apptargets.details.logger import Logger
from apptargets.details.workspace import TargetPaths
from apptargets.generators.xcode.graph import NativeTargetNode, ProjectGraph
from apptargets.generators.xcode.model import (
    BuildSetting,
    DstSubfolderSpec,
    FileType,
    PBXContainerItemProxy,
    PBXFileReference,
    PBXFrameworksBuildPhase,
    PBXNativeTarget,
    PBXResourcesBuildPhase,
    PBXSourcesBuildPhase,
    PBXTargetDependency,
    ProxyType,
    Reference,
    SourceTree,
    XCBuildConfiguration,
    XCConfigurationList,
    YesNo,
)

DEFAULT_SWIFT_VERSION = "5.0"

# Where each kind of product is embedded inside the host app
EMBED_EXTENSIONS = ("Embed Foundation Extensions", "", DstSubfolderSpec.PLUGINS)
EMBED_APP_CLIPS = ("Embed App Clips", "$(CONTENTS_FOLDER_PATH)/AppClips", DstSubfolderSpec.PRODUCTS_DIRECTORY)
EMBED_WATCH = ("Embed Watch Content", "$(CONTENTS_FOLDER_PATH)/Watch", DstSubfolderSpec.PRODUCTS_DIRECTORY)


def embed_phase_for(target_type: TargetType):
    if target_type == TargetType.CLIP:
        return EMBED_APP_CLIPS
    if target_type == TargetType.WATCH:
        return EMBED_WATCH
    return EMBED_EXTENSIONS


def target_build_settings(
    target: ResolvedTargetDescriptor,
    paths: TargetPaths,
    host_target: Optional[NativeTargetNode],
) -> Dict[str, Any]:
    swift_version = None
    if host_target is not None:
        swift_version = host_target.build_setting("SWIFT_VERSION")

    settings: Dict[str, BuildSetting] = {
        "PRODUCT_NAME": BuildSetting(value="$(TARGET_NAME)"),
        "PRODUCT_BUNDLE_IDENTIFIER": BuildSetting(value=target.bundle_identifier),
        "INFOPLIST_FILE": BuildSetting(value=paths.relative(paths.info_plist)),
        "CODE_SIGN_ENTITLEMENTS": BuildSetting(value=paths.relative(paths.entitlements)),
        "CODE_SIGN_STYLE": BuildSetting(value="Automatic"),
        "CURRENT_PROJECT_VERSION": BuildSetting(value="1"),
        "MARKETING_VERSION": BuildSetting(value="1.0"),
        "GENERATE_INFOPLIST_FILE": BuildSetting(value=YesNo.NO),
    }
    if target.type == TargetType.WATCH:
        settings.update(
            {
                "SDKROOT": BuildSetting(value="watchos"),
                "WATCHOS_DEPLOYMENT_TARGET": BuildSetting(value=target.deployment_target),
                "TARGETED_DEVICE_FAMILY": BuildSetting(value="4"),
                "SKIP_INSTALL": BuildSetting(value=YesNo.YES),
            }
        )
    else:
        settings.update(
            {
                "SDKROOT": BuildSetting(value="iphoneos"),
                "IPHONEOS_DEPLOYMENT_TARGET": BuildSetting(value=target.deployment_target),
                "TARGETED_DEVICE_FAMILY": BuildSetting(value="1,2"),
            }
        )
        # App clips are installed like apps, extensions are embedded
        if target.type != TargetType.CLIP:
            settings["SKIP_INSTALL"] = BuildSetting(value=YesNo.YES)
    if target.defaults.requires_code:
        settings["SWIFT_VERSION"] = BuildSetting(value=swift_version or DEFAULT_SWIFT_VERSION)
        settings["LD_RUNPATH_SEARCH_PATHS"] = BuildSetting(
            value=["$(inherited)", "@executable_path/Frameworks", "@executable_path/../../Frameworks"]
        )
    if target.type == TargetType.CLIP:
        settings["ASSETCATALOG_COMPILER_APPICON_NAME"] = BuildSetting(value="AppIcon")
    if ACCENT_COLOR_NAME in target.colors:
        settings["ASSETCATALOG_COMPILER_GLOBAL_ACCENT_COLOR_NAME"] = BuildSetting(value=ACCENT_COLOR_NAME)
    for key, value in target.build_settings.items():
        settings[key] = BuildSetting(value=value)

    return {key: _as_setting_value(setting.value) for key, setting in settings.items()}


def _as_setting_value(value):
    if isinstance(value, YesNo):
        return value.value
    if isinstance(value, bool):
        return "YES" if value else "NO"
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return str(value)


def _create_native_target(
    graph: ProjectGraph,
    target: ResolvedTargetDescriptor,
    logger: Logger,
) -> NativeTargetNode:
    defaults = target.defaults
    product_name = target.product_name

    # Create product reference
    product_filename = f"{product_name}.{defaults.wrapper_extension}"
    product_ref = PBXFileReference(
        name=product_filename,
        path=product_filename,
        sourceTree=SourceTree.BUILT_PRODUCTS_DIR,
        explicitFileType=(
            FileType.APP if defaults.wrapper_extension == "app" else FileType.APP_EXTENSION
        ),
        includeInIndex=0,
    )
    graph.add_object(product_ref)
    graph.products_group.add_child(product_ref.id)

    # Create configurations - one per host project configuration
    config_names, default_config = graph.configuration_names()
    target_configs: List[XCBuildConfiguration] = []
    for config_name in config_names:
        config = XCBuildConfiguration(
            name=config_name,
            buildSettings={},
            owner=f"target:{product_name}",
        )
        graph.add_object(config)
        target_configs.append(config)
    config_list = XCConfigurationList(
        buildConfigurations=[Reference(c.id, c.name) for c in target_configs],
        defaultConfigurationName=default_config,
        owner=f"target:{product_name}",
    )
    graph.add_object(config_list)

    # Create build phases, sticker packs carry no code
    phases = []
    if defaults.requires_code:
        phases.append(PBXSourcesBuildPhase(files=[], target_name=product_name))
        phases.append(PBXFrameworksBuildPhase(files=[], target_name=product_name))
    phases.append(PBXResourcesBuildPhase(files=[], target_name=product_name))
    for phase in phases:
        graph.add_object(phase)

    native_target = PBXNativeTarget(
        name=product_name,
        buildConfigurationList=Reference(config_list.id),
        buildPhases=[Reference(p.id) for p in phases],
        dependencies=[],
        productName=product_name,
        productReference=Reference(product_ref.id, product_filename),
        productType=defaults.product_type,
    )
    graph.add_object(native_target)
    graph.add_native_target(native_target.id)
    node = NativeTargetNode(graph, native_target.id)

    # Embed the product into the host app and make the host depend on it
    host_target = graph.application_target()
    if host_target is None:
        logger.warn(f"no application target found, {product_name} is not embedded")
        return node
    phase_name, dst_path, dst_spec = embed_phase_for(target.type)
    embed_phase = graph.ensure_copy_files_phase(host_target, phase_name, dst_path, dst_spec)
    graph.add_build_file(
        host_target,
        embed_phase,
        product_ref.id,
        settings={"ATTRIBUTES": ["RemoveHeadersOnCopy"]},
    )
    proxy = PBXContainerItemProxy(
        containerPortal=graph.root_id,
        remoteGlobalIDString=native_target.id,
        remoteInfo=product_name,
        proxyType=ProxyType.TARGET_DEPENDENCY,
    )
    graph.add_object(proxy)
    dependency = PBXTargetDependency(
        targetProxy=Reference(proxy.id),
        target=native_target.id,
    )
    graph.add_object(dependency)
    if dependency.id not in host_target.dependencies:
        host_target.dependencies.append(dependency.id)
    return node


def ensure_native_target(
    graph: ProjectGraph,
    target: ResolvedTargetDescriptor,
    paths: TargetPaths,
    logger: Logger,
) -> NativeTargetNode:
    node = graph.find_native_target(target.product_name)
    if node is None:
        node = _create_native_target(graph, target, logger)
        logger.summary(True, f"Created native target {target.product_name}")
    else:
        logger.log(f"found existing native target {target.product_name} ({node.id})")

    product_type = target.defaults.product_type.value
    if node.product_type != product_type:
        node.product_type = product_type

    settings = target_build_settings(target, paths, graph.application_target())
    if graph.set_build_settings(node, settings):
        logger.log(f"updated build settings of {target.product_name}")
    return node

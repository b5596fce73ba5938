from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from apptargets.config import HostAppConfig
from apptargets.details.defaults import Platform
from apptargets.details.descriptor import parse_platforms
from apptargets.details.logger import Logger
from apptargets.details.workspace import Workspace
from apptargets.errors import ApptargetsError, GenerationFailed
from apptargets.generators.android.generator import AndroidGenerator
from apptargets.generators.xcode.generator import XcodeGenerator


def with_targets(
    host: HostAppConfig,
    project_root: Union[str, Path],
    targets_root: Union[str, Path] = "targets",
    platforms: Optional[Iterable[Union[str, Platform]]] = None,
    logger: Optional[Logger] = None,
) -> HostAppConfig:
    """
    Run one generation pass: resolve every target under the targets root
    and materialize it in the native projects of the requested platforms.

    Targets are processed one at a time. A failing target does not stop the
    others, every failure is collected and raised together as
    GenerationFailed once the pass is over. The resolved targets are stored
    under host.extra["targets"].
    """
    logger = logger or Logger()
    workspace = Workspace(project_root, targets_root)
    enabled = set(parse_platforms(platforms)) if platforms else set(Platform)

    targets, errors = workspace.resolve(host, logger)
    logger.summary_once("target-count", True, f"Found {len(targets)} target(s)")

    generators: List[Tuple[Platform, Union[XcodeGenerator, AndroidGenerator]]] = []
    ios_targets = [t for t in targets if t.targets(Platform.IOS)]
    if Platform.IOS in enabled and ios_targets:
        try:
            xcode = XcodeGenerator(workspace, host, logger)
            xcode.prepare(ios_targets)
            generators.append((Platform.IOS, xcode))
        except (ApptargetsError, ValueError) as e:
            errors.append(("ios", e))
    if Platform.ANDROID in enabled:
        generators.append((Platform.ANDROID, AndroidGenerator(workspace, host, logger)))

    for target in targets:
        try:
            for platform, generator in generators:
                if target.targets(platform):
                    generator(target)
        except ApptargetsError as e:
            logger.summary(False, f"Failed to generate {target.name}", str(e))
            errors.append((target.name, e))
            continue
        logger.summary(True, f"Generated {target.type.value} target {target.product_name}")

    for platform, generator in generators:
        try:
            generator.finish()
        except (ApptargetsError, ValueError) as e:
            errors.append((platform.value, e))

    host.extra["targets"] = [target.as_literal() for target in targets]

    if errors:
        raise GenerationFailed(errors)
    return host

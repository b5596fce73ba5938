from typing import List, Optional

from apptargets.config import HostAppConfig
from apptargets.details.logger import Logger
from apptargets.details.workspace import Workspace
from apptargets.errors import GenerationFailed
from apptargets.plugin import with_targets


def generate_main(
    workspace: Workspace,
    host: HostAppConfig,
    platforms: Optional[List[str]],
    logger: Logger,
):
    try:
        with_targets(
            host,
            project_root=workspace.root,
            targets_root=workspace.targets_root,
            platforms=platforms,
            logger=logger,
        )
    except GenerationFailed as e:
        for name, error in e.errors:
            logger.error(f"{name}: {error}")
        return 1

from typing import List, Optional

from apptargets.config import HostAppConfig
from apptargets.details.logger import Logger
from apptargets.details.workspace import Workspace


def validate_main(
    workspace: Workspace,
    host: HostAppConfig,
    platforms: Optional[List[str]],
    logger: Logger,
):
    targets, errors = workspace.resolve(host, logger)
    for target in targets:
        print(f"{target.directory}:{target.product_name}")
        print(f"  type: {target.type.value}")
        print(f"  platforms: {', '.join(p.value for p in target.platforms)}")
        if target.bundle_identifier:
            print(f"  bundle identifier: {target.bundle_identifier}")
        print(f"  deployment target: {target.deployment_target}")
        if target.app_group:
            print(f"  app group: {target.app_group}")
        if target.entry:
            print(f"  entry: {target.entry}")
    for name, error in errors:
        logger.error(f"{name}: {error}")
    return 1 if errors else None

from apptargets.config import HostAppConfig
from apptargets.details.descriptor import ResolvedTargetDescriptor
from apptargets.details.logger import Logger
from apptargets.details.workspace import Workspace
from apptargets.generators.android.gradle import fix_build_script
from apptargets.generators.android.resources import write_color_resources
from apptargets.generators.android.widgets import sync_widget


class AndroidGenerator:
    def __init__(self, workspace: Workspace, host: HostAppConfig, logger: Logger):
        self.workspace = workspace
        self.host = host
        self.logger = logger

    def __call__(self, target: ResolvedTargetDescriptor) -> None:
        """Apply every Android generation step for one target."""
        paths = self.workspace.paths(target)
        written = write_color_resources(target, paths.android_res)
        written += sync_widget(
            target, paths.android_res, paths.android_manifest, self.host.package, self.logger
        )
        for path in written:
            self.logger.log(f"wrote {path}")

    def finish(self) -> bool:
        script = self.workspace.find_build_script()
        if script is None:
            self.logger.log("no Android app build script found")
            return False
        return fix_build_script(script, self.host.package, self.logger)

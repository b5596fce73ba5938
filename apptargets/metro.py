# Bundler target router.
#
# Augments a metro config (a dict of options and hooks) so every target with
# its own entry point bundles in isolation: import-graph optimizations that
# break multi-entry builds are disabled, modules are evaluated eagerly, and
# the host's run-before-main modules are kept out of target bundles.
# Existing hooks are always called through, never replaced.

import json
import os
import re

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from apptargets.details.context import TargetContext
from apptargets.details.logger import Logger
from apptargets.details.workspace import generate_roots

ENTRY_SUFFIX = re.compile(r"\.(tsx?|jsx?)$")


def bundle_root(entry: str) -> str:
    return ENTRY_SUFFIX.sub("", re.sub(r"^\./", "", entry))


def scan_target_entries(
    project_root: Path, targets_root: Union[str, Path] = "targets", logger: Optional[Logger] = None
) -> Dict[str, str]:
    """Map the bundle root of every target entry point to its absolute path."""
    logger = logger or Logger()
    entries: Dict[str, str] = {}
    for root in generate_roots(project_root.joinpath(targets_root)):
        config_path = root.joinpath(TargetContext.JSON_FILENAME)
        if not config_path.is_file():
            continue
        try:
            with open(config_path, "r") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            logger.warn(f"skipping invalid target config {config_path}: {e}")
            continue
        entry = config.get("entry") or (config.get("ios") or {}).get("entry")
        if entry:
            entries[bundle_root(entry)] = os.path.normpath(project_root.joinpath(entry))
    return entries


def with_targets_metro(
    config: Dict[str, Any],
    project_root: Optional[Union[str, Path]] = None,
    targets_root: Union[str, Path] = "targets",
    logger: Optional[Logger] = None,
) -> Dict[str, Any]:
    logger = logger or Logger()
    project_root = Path(project_root or os.getcwd()).resolve()
    entries = scan_target_entries(project_root, targets_root, logger)
    entry_paths = set(entries.values())
    if entries:
        logger.summary(True, f"Found {len(entries)} target entry point(s)")

    transformer = dict(config.get("transformer") or {})
    serializer = dict(config.get("serializer") or {})
    resolver = dict(config.get("resolver") or {})

    base_transform_options: Optional[Callable] = transformer.get("getTransformOptions")
    base_run_before_main: Optional[Callable] = serializer.get("getModulesRunBeforeMainModule")
    base_resolve_request: Optional[Callable] = resolver.get("resolveRequest")

    def get_transform_options(*args, **kwargs) -> Dict[str, Any]:
        options = dict(base_transform_options(*args, **kwargs) or {}) if base_transform_options else {}
        transform = dict(options.get("transform") or {})
        transform["experimentalImportSupport"] = False
        transform["inlineRequires"] = False
        options["transform"] = transform
        return options

    def get_modules_run_before_main_module(entry_file_path: str, *args, **kwargs):
        if os.path.normpath(entry_file_path) in entry_paths:
            return []
        if base_run_before_main:
            return base_run_before_main(entry_file_path, *args, **kwargs)
        return []

    def resolve_request(context: Dict[str, Any], module_name: str, platform: Optional[str]):
        entry_path = entries.get(re.sub(r"^\./", "", module_name))
        if entry_path:
            return {"type": "sourceFile", "filePath": entry_path}
        if base_resolve_request:
            return base_resolve_request(context, module_name, platform)
        return context["resolveRequest"](context, module_name, platform)

    transformer["getTransformOptions"] = get_transform_options
    serializer["getModulesRunBeforeMainModule"] = get_modules_run_before_main_module
    resolver["resolveRequest"] = resolve_request

    return {**config, "transformer": transformer, "serializer": serializer, "resolver": resolver}

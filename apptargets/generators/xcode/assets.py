import json

from pathlib import Path
from typing import Dict, Optional

from apptargets.details.colors import to_srgb_components
from apptargets.details.descriptor import ColorValue, ResolvedTargetDescriptor
from apptargets.details.files import copy_tree_atomic, write_if_changed
from apptargets.details.logger import Logger
from apptargets.details.workspace import TargetPaths
from apptargets.errors import ProjectGraphError, TargetIOError
from apptargets.generators.xcode.graph import ProjectGraph

XCODE_INFO = {"author": "xcode", "version": 1}


def _contents(value: dict) -> bytes:
    return (json.dumps(value, indent=2) + "\n").encode("utf-8")


def colorset_contents(color: ColorValue) -> dict:
    colors = [
        {
            "color": {
                "color-space": "srgb",
                "components": to_srgb_components(color.light),
            },
            "idiom": "universal",
        }
    ]
    if color.dark:
        colors.append(
            {
                "appearances": [{"appearance": "luminosity", "value": "dark"}],
                "color": {
                    "color-space": "srgb",
                    "components": to_srgb_components(color.dark),
                },
                "idiom": "universal",
            }
        )
    return {"colors": colors, "info": XCODE_INFO}


def prepare_asset_catalog(
    target: ResolvedTargetDescriptor, paths: TargetPaths, logger: Logger
) -> Optional[Path]:
    """
    Write the target's prepared asset catalog, one colorset per declared color.

    Returns the catalog path, or None when the target declares no colors.
    """
    if not target.colors:
        return None
    catalog = paths.asset_source
    files: Dict[Path, bytes] = {catalog.joinpath("Contents.json"): _contents({"info": XCODE_INFO})}
    for name, color in target.colors.items():
        colorset = catalog.joinpath(f"{name}.colorset", "Contents.json")
        files[colorset] = _contents(colorset_contents(color))
    try:
        for path, data in files.items():
            if write_if_changed(path, data):
                logger.log(f"wrote {path}")
    except OSError as e:
        raise TargetIOError(f"failed to write asset catalog {catalog}: {e}") from e
    return catalog


def sync_target_assets(
    graph: ProjectGraph,
    target: ResolvedTargetDescriptor,
    paths: TargetPaths,
    logger: Logger,
) -> bool:
    """
    Copy the target's prepared asset catalog into the iOS project tree and
    register it as a resource of the target's native node.

    Both steps only run when their destination is missing, so running this
    against an already synchronized project changes nothing. Returns whether
    anything was copied or registered.
    """
    node = graph.find_native_target(target.product_name)
    if node is None:
        raise ProjectGraphError("no native target found for asset sync", target.product_name)

    source = paths.asset_source
    if not source.is_dir():
        logger.warn(f"no asset catalog at {source}, skipping assets for {target.product_name}")
        return False

    changed = False
    destination = paths.asset_destination
    if not destination.exists():
        try:
            copy_tree_atomic(source, destination)
        except OSError as e:
            raise TargetIOError(f"failed to copy {source} to {destination}: {e}") from e
        logger.log(f"copied {source} to {destination}")
        changed = True

    group = graph.ensure_group(target.product_name)
    resource_path = paths.relative(destination)
    if graph.add_resource(node, group, resource_path):
        logger.log(f"registered {resource_path} in {target.product_name}")
        changed = True
    return changed

# CocoaPods integration for targets that bundle a React Native entry point.
#
# Such targets are nested inside the host app's target block so they inherit
# its search paths, without linking pods of their own:
#
#   target 'HostApp' do
#     ...
#     target 'ShareExtension' do
#       platform :ios, '15.1'
#       inherit! :search_paths
#     end
#
#     post_install do |installer|
#     ...

import re

from pathlib import Path
from typing import Optional, Tuple

from apptargets.details.descriptor import ResolvedTargetDescriptor
from apptargets.details.files import write_if_changed
from apptargets.details.logger import Logger
from apptargets.errors import TargetIOError

# Keywords opening a block closed by `end` when they start a statement
BLOCK_START = re.compile(r"^\s*(if|unless|case|begin|def|class|module|while|until)\b")
BLOCK_DO = re.compile(r"\bdo\b")
BLOCK_END = re.compile(r"^\s*end\b")


def target_block(product_name: str, deployment_target: str, indent: str = "  ") -> str:
    return (
        f"{indent}target '{product_name}' do\n"
        f"{indent}  platform :ios, '{deployment_target}'\n"
        f"{indent}  inherit! :search_paths\n"
        f"{indent}end\n"
    )


def _target_pattern(product_name: str):
    return re.compile(rf"^[ \t]*target\s+['\"]{re.escape(product_name)}['\"]\s+do\b", re.M)


def target_block_span(podfile: str, product_name: str) -> Optional[Tuple[int, int]]:
    """
    Return the span of a target block, from the start of its `target` line
    to the end of the line holding its matching `end`.
    """
    match = _target_pattern(product_name).search(podfile)
    if match is None:
        return None
    start = match.start()
    depth = 0
    position = start
    for line in podfile[start:].splitlines(keepends=True):
        code = line.split("#", 1)[0]
        if BLOCK_END.match(code):
            depth -= 1
        elif BLOCK_START.match(code) or BLOCK_DO.search(code):
            depth += 1
        position += len(line)
        if depth == 0:
            return start, position
    raise ValueError(f"target '{product_name}' in Podfile has no matching 'end'")


def remove_target_block(podfile: str, product_name: str) -> str:
    span = target_block_span(podfile, product_name)
    if span is None:
        return podfile
    start, end = span
    # Drop the blank line separating the block from what follows
    if podfile.startswith("\n", end):
        end += 1
    return podfile[:start] + podfile[end:]


def insert_target_block(podfile: str, block: str) -> str:
    # Nested in the host target, right before its post_install hook
    post_install = re.search(r"^[ \t]*post_install\s+do\b", podfile, re.M)
    if post_install is not None:
        index = post_install.start()
        return podfile[:index] + block + "\n" + podfile[index:]
    last_end = None
    for last_end in re.finditer(r"^[ \t]*end\b", podfile, re.M):
        pass
    if last_end is None:
        raise ValueError("Podfile has no target block to nest into")
    index = last_end.start()
    return podfile[:index] + block + podfile[index:]


def update_podfile(podfile: str, product_name: str, deployment_target: str) -> str:
    """Ensure the Podfile declares the nested target block with the given deployment target."""
    block = target_block(product_name, deployment_target)
    span = target_block_span(podfile, product_name)
    if span is not None:
        start, end = span
        if podfile[start:end] == block:
            return podfile
        podfile = remove_target_block(podfile, product_name)
    return insert_target_block(podfile, block)


def sync_target_podfile(path: Path, target: ResolvedTargetDescriptor, logger: Logger) -> bool:
    if not target.entry:
        if target.excluded_packages:
            logger.warn(
                f"excludedPackages specified for {target.name} without an 'entry', "
                f"they are ignored"
            )
        return False
    try:
        podfile = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TargetIOError(f"failed to read Podfile {path}: {e}") from e
    try:
        updated = update_podfile(podfile, target.product_name, target.deployment_target)
    except ValueError as e:
        raise TargetIOError(f"cannot update {path}: {e}") from e
    if updated == podfile:
        return False
    try:
        write_if_changed(path, updated.encode("utf-8"))
    except OSError as e:
        raise TargetIOError(f"failed to write Podfile {path}: {e}") from e
    logger.summary(True, "Updated Podfile", f"React Native target: {target.product_name}")
    return True

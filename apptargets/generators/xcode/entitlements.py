# App group and entitlement synchronization.
#
# Synchronization is additive: lists are unioned in order, nothing already
# present is removed, and applying it for several targets in any order leaves
# the host with the same set of groups.

import plistlib

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from apptargets.config import APP_GROUPS_KEY
from apptargets.details.defaults import TargetType
from apptargets.details.descriptor import ResolvedTargetDescriptor
from apptargets.details.files import write_if_changed
from apptargets.errors import ConfigurationError, EntitlementMismatchError, TargetIOError

PARENT_APPLICATION_KEY = "com.apple.developer.parent-application-identifiers"
ON_DEMAND_INSTALL_KEY = "com.apple.developer.on-demand-install-capable"
ASSOCIATED_APP_CLIP_KEY = "com.apple.developer.associated-appclip-app-identifiers"

APP_IDENTIFIER_PREFIX = "$(AppIdentifierPrefix)"

Entitlements = Dict[str, Any]


def union(existing: List[Any], additions: Iterable[Any]) -> List[Any]:
    result = list(existing)
    for value in additions:
        if value not in result:
            result.append(value)
    return result


def _as_list(entitlements: Entitlements, key: str, other: Any) -> List[Any]:
    value = entitlements.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise EntitlementMismatchError(key, value, other)
    return value


def merge_entitlements(
    base: Entitlements, additions: Entitlements, reference: Optional[Entitlements] = None
) -> Entitlements:
    """
    Merge additions into a copy of base. List values are unioned, scalar
    values from additions win. A key whose kind (list or scalar) differs
    between the two, or from the same key in reference, cannot be reconciled.
    """
    result = deepcopy(base)
    for key, value in additions.items():
        for other in (result, reference or {}):
            if key in other and isinstance(other[key], list) != isinstance(value, list):
                raise EntitlementMismatchError(key, other[key], value)
        if isinstance(value, list):
            result[key] = union(result.get(key, []), value)
        else:
            result[key] = deepcopy(value)
    return result


def _app_groups(target: ResolvedTargetDescriptor) -> List[str]:
    groups = [target.app_group] if target.app_group else []
    declared = target.entitlements.get(APP_GROUPS_KEY, [])
    if isinstance(declared, list):
        groups = union(groups, declared)
    return groups


def collect_app_groups(
    host_entitlements: Entitlements, targets: Iterable[ResolvedTargetDescriptor]
) -> Entitlements:
    """
    Add the groups of every target to a copy of the host entitlements. Run
    before the per-target sync, each target then receives the complete host
    group list whatever its position in the pass.
    """
    host = deepcopy(host_entitlements)
    for target in targets:
        groups = _app_groups(target)
        # Mismatched kinds are reported by sync_entitlements for the target
        if groups and isinstance(host.get(APP_GROUPS_KEY, []), list):
            host[APP_GROUPS_KEY] = union(host.get(APP_GROUPS_KEY, []), groups)
    return host


def sync_entitlements(
    host_entitlements: Entitlements,
    target: ResolvedTargetDescriptor,
    existing_target: Optional[Entitlements] = None,
    host_bundle_identifier: Optional[str] = None,
) -> Tuple[Entitlements, Entitlements]:
    host = deepcopy(host_entitlements)
    declared = dict(target.entitlements)
    declared_groups = declared.pop(APP_GROUPS_KEY, [])
    if not isinstance(declared_groups, list):
        raise EntitlementMismatchError(APP_GROUPS_KEY, host.get(APP_GROUPS_KEY), declared_groups)

    target_entitlements = merge_entitlements(existing_target or {}, declared, host)

    if target.app_group or declared_groups:
        groups = [target.app_group] if target.app_group else []
        host_groups = union(_as_list(host, APP_GROUPS_KEY, groups), groups + declared_groups)
        host[APP_GROUPS_KEY] = host_groups
        # The target carries the same groups as the host
        target_groups = _as_list(target_entitlements, APP_GROUPS_KEY, host_groups)
        target_entitlements[APP_GROUPS_KEY] = union(target_groups, host_groups)

    if target.type == TargetType.CLIP and host_bundle_identifier:
        parents = _as_list(target_entitlements, PARENT_APPLICATION_KEY, host_bundle_identifier)
        target_entitlements[PARENT_APPLICATION_KEY] = union(
            parents, [f"{APP_IDENTIFIER_PREFIX}{host_bundle_identifier}"]
        )
        target_entitlements[ON_DEMAND_INSTALL_KEY] = True
        clips = _as_list(host, ASSOCIATED_APP_CLIP_KEY, target.bundle_identifier)
        host[ASSOCIATED_APP_CLIP_KEY] = union(
            clips, [f"{APP_IDENTIFIER_PREFIX}{target.bundle_identifier}"]
        )

    return host, target_entitlements


def check_app_clip_association(
    target: ResolvedTargetDescriptor,
    target_entitlements: Entitlements,
    host_bundle_identifier: Optional[str],
) -> List[str]:
    errors = []
    if target.type != TargetType.CLIP:
        return errors
    if target_entitlements.get(ON_DEMAND_INSTALL_KEY) is not True:
        errors.append(f"{target.product_name} is missing {ON_DEMAND_INSTALL_KEY}")
    if not host_bundle_identifier:
        errors.append(f"{target.product_name} has no host bundle identifier to associate with")
        return errors
    expected = f"{APP_IDENTIFIER_PREFIX}{host_bundle_identifier}"
    if expected not in target_entitlements.get(PARENT_APPLICATION_KEY, []):
        errors.append(f"{target.product_name} does not declare {expected} in {PARENT_APPLICATION_KEY}")
    bundle_identifier = target.bundle_identifier or ""
    if not bundle_identifier.startswith(f"{host_bundle_identifier}."):
        errors.append(
            f"app clip bundle identifier '{bundle_identifier}' must be prefixed "
            f"with the host's '{host_bundle_identifier}.'"
        )
    return errors


def read_entitlements(path: Path) -> Entitlements:
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return plistlib.load(f)
    except (OSError, plistlib.InvalidFileException) as e:
        raise TargetIOError(f"failed to read entitlements {path}: {e}") from e


def write_entitlements(path: Path, entitlements: Entitlements) -> bool:
    try:
        data = plistlib.dumps(entitlements, fmt=plistlib.FMT_XML, sort_keys=True)
    except (TypeError, OverflowError) as e:
        raise ConfigurationError(f"entitlements for {path.name} cannot be written: {e}") from e
    try:
        return write_if_changed(path, data)
    except OSError as e:
        raise TargetIOError(f"failed to write entitlements {path}: {e}") from e

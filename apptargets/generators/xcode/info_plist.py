import plistlib

from pathlib import Path
from typing import Any, Dict, Optional

from apptargets.details.defaults import ACTIVATION_RULE_KEYS, TargetType
from apptargets.details.descriptor import ResolvedTargetDescriptor
from apptargets.details.files import write_if_changed
from apptargets.errors import TargetIOError

# Extensions whose principal class is a view controller in the target module
PRINCIPAL_CLASSES = {
    TargetType.SHARE: "ShareViewController",
    TargetType.ACTION: "ActionViewController",
    TargetType.NOTIFICATION_SERVICE: "NotificationService",
    TargetType.INTENT: "IntentHandler",
    TargetType.INTENT_UI: "IntentViewController",
    TargetType.SAFARI: "SafariWebExtensionHandler",
}


def activation_rule(target: ResolvedTargetDescriptor) -> Dict[str, Any]:
    rule: Dict[str, Any] = {}
    for activation in target.activation_rules:
        key, has_max = ACTIVATION_RULE_KEYS[activation.type]
        rule[key] = activation.max_count if has_max else True
    return rule


def build_info_plist(
    target: ResolvedTargetDescriptor, host_bundle_identifier: Optional[str] = None
) -> Dict[str, Any]:
    defaults = target.defaults
    info: Dict[str, Any] = {
        "CFBundleDevelopmentRegion": "$(DEVELOPMENT_LANGUAGE)",
        "CFBundleDisplayName": target.display_name,
        "CFBundleExecutable": "$(EXECUTABLE_NAME)",
        "CFBundleIdentifier": "$(PRODUCT_BUNDLE_IDENTIFIER)",
        "CFBundleInfoDictionaryVersion": "6.0",
        "CFBundleName": "$(PRODUCT_NAME)",
        "CFBundlePackageType": "$(PRODUCT_BUNDLE_PACKAGE_TYPE)",
        "CFBundleShortVersionString": "$(MARKETING_VERSION)",
        "CFBundleVersion": "$(CURRENT_PROJECT_VERSION)",
    }

    if target.type == TargetType.CLIP:
        info["NSAppClip"] = {
            "NSAppClipRequestEphemeralUserNotification": False,
            "NSAppClipRequestLocationConfirmation": False,
        }
    elif target.type == TargetType.WATCH:
        info["WKApplication"] = True
        if host_bundle_identifier:
            info["WKCompanionAppBundleIdentifier"] = host_bundle_identifier

    if defaults.extension_point:
        extension: Dict[str, Any] = {"NSExtensionPointIdentifier": defaults.extension_point}
        if target.type in PRINCIPAL_CLASSES:
            extension["NSExtensionPrincipalClass"] = (
                f"$(PRODUCT_MODULE_NAME).{PRINCIPAL_CLASSES[target.type]}"
            )
        if target.activation_rules:
            extension["NSExtensionAttributes"] = {
                "NSExtensionActivationRule": activation_rule(target)
            }
        info["NSExtension"] = extension

    return info


def write_info_plist(
    path: Path,
    target: ResolvedTargetDescriptor,
    host_bundle_identifier: Optional[str] = None,
) -> bool:
    data = plistlib.dumps(
        build_info_plist(target, host_bundle_identifier),
        fmt=plistlib.FMT_XML,
        sort_keys=True,
    )
    try:
        return write_if_changed(path, data)
    except OSError as e:
        raise TargetIOError(f"failed to write {path}: {e}") from e

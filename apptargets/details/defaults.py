# Per-type target policy.
#
# One entry per TargetType: minimum OS version, bundle identifier suffix,
# default activation rules, and the native shape of the target (product type,
# extension point, linked frameworks). The table must stay total over
# TargetType, this is checked when the module is imported.

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from apptargets.errors import ConfigurationError
from apptargets.generators.xcode.model import ProductType


class TargetType(Enum):
    WIDGET = "widget"
    CLIP = "clip"
    STICKERS = "stickers"
    SHARE = "share"
    ACTION = "action"
    SAFARI = "safari"
    NOTIFICATION_CONTENT = "notification-content"
    NOTIFICATION_SERVICE = "notification-service"
    INTENT = "intent"
    INTENT_UI = "intent-ui"
    SPOTLIGHT = "spotlight"
    BG_DOWNLOAD = "bg-download"
    QUICKLOOK_THUMBNAIL = "quicklook-thumbnail"
    LOCATION_PUSH = "location-push"
    CREDENTIALS_PROVIDER = "credentials-provider"
    ACCOUNT_AUTH = "account-auth"
    APP_INTENT = "app-intent"
    DEVICE_ACTIVITY_MONITOR = "device-activity-monitor"
    MATTER = "matter"
    WATCH = "watch"


class Platform(Enum):
    IOS = "ios"
    ANDROID = "android"


# Content kinds accepted in share/action activation rules, mapped to the
# NSExtensionActivationRule dictionary key. Kinds without a max count are
# boolean flags.
ACTIVATION_RULE_KEYS: Dict[str, Tuple[str, bool]] = {
    "text": ("NSExtensionActivationSupportsText", False),
    "url": ("NSExtensionActivationSupportsWebURLWithMaxCount", True),
    "webpage": ("NSExtensionActivationSupportsWebPageWithMaxCount", True),
    "image": ("NSExtensionActivationSupportsImageWithMaxCount", True),
    "video": ("NSExtensionActivationSupportsMovieWithMaxCount", True),
    "file": ("NSExtensionActivationSupportsFileWithMaxCount", True),
    "attachment": ("NSExtensionActivationSupportsAttachmentsWithMaxCount", True),
}


@dataclass(frozen=True)
class ActivationRule:
    type: str
    max_count: int = 1

    def __post_init__(self):
        if self.type not in ACTIVATION_RULE_KEYS:
            raise ConfigurationError(
                f"unknown activation rule type '{self.type}', "
                f"expected one of {sorted(ACTIVATION_RULE_KEYS)}"
            )
        if self.max_count < 1:
            raise ConfigurationError(
                f"activation rule '{self.type}' needs a max count of at least 1"
            )

    @staticmethod
    def parse(value: Union[dict, "ActivationRule"]) -> "ActivationRule":
        if isinstance(value, ActivationRule):
            return value
        if not isinstance(value, dict) or not isinstance(value.get("type"), str):
            raise ConfigurationError(f"invalid activation rule {value!r}")
        max_count = value.get("maxCount", value.get("max", 1))
        try:
            max_count = int(max_count)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"activation rule '{value['type']}' has an invalid max count {max_count!r}"
            ) from None
        return ActivationRule(type=value["type"], max_count=max_count)

    def as_literal(self) -> dict:
        return {"type": self.type, "maxCount": self.max_count}


@dataclass(frozen=True)
class TargetDefaults:
    minimum_deployment_target: str
    bundle_identifier_suffix: str
    product_type: ProductType
    extension_point: Optional[str]
    default_activation_rules: Tuple[ActivationRule, ...] = ()
    frameworks: Tuple[str, ...] = ()
    requires_code: bool = True
    uses_app_group: bool = False
    requires_app_group: bool = False
    supports_entry: bool = False
    # Product file extension, "appex" for app extensions
    wrapper_extension: str = field(default="appex")


DEFAULTS: Dict[TargetType, TargetDefaults] = {
    TargetType.WIDGET: TargetDefaults(
        minimum_deployment_target="14.0",
        bundle_identifier_suffix="widget",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.widgetkit-extension",
        frameworks=("WidgetKit", "SwiftUI", "ActivityKit", "AppIntents"),
        uses_app_group=True,
        requires_app_group=True,
    ),
    TargetType.CLIP: TargetDefaults(
        minimum_deployment_target="14.0",
        bundle_identifier_suffix="clip",
        product_type=ProductType.ON_DEMAND_INSTALL_CAPABLE_APPLICATION,
        extension_point=None,
        uses_app_group=True,
        requires_app_group=True,
        supports_entry=True,
        wrapper_extension="app",
    ),
    TargetType.STICKERS: TargetDefaults(
        minimum_deployment_target="10.0",
        bundle_identifier_suffix="stickers",
        product_type=ProductType.MESSAGES_STICKER_PACK,
        extension_point="com.apple.message-payload-provider",
        requires_code=False,
    ),
    TargetType.SHARE: TargetDefaults(
        minimum_deployment_target="8.0",
        bundle_identifier_suffix="share",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.share-services",
        default_activation_rules=(
            ActivationRule("text"),
            ActivationRule("url", 1),
            ActivationRule("image", 1),
        ),
        frameworks=("Social", "MobileCoreServices"),
        uses_app_group=True,
        requires_app_group=True,
        supports_entry=True,
    ),
    TargetType.ACTION: TargetDefaults(
        minimum_deployment_target="8.0",
        bundle_identifier_suffix="action",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.services",
        default_activation_rules=(ActivationRule("image", 1),),
        supports_entry=True,
    ),
    TargetType.SAFARI: TargetDefaults(
        minimum_deployment_target="15.0",
        bundle_identifier_suffix="safari",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.Safari.web-extension",
    ),
    TargetType.NOTIFICATION_CONTENT: TargetDefaults(
        minimum_deployment_target="10.0",
        bundle_identifier_suffix="notification-content",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.usernotifications.content-extension",
        frameworks=("UserNotifications", "UserNotificationsUI"),
    ),
    TargetType.NOTIFICATION_SERVICE: TargetDefaults(
        minimum_deployment_target="10.0",
        bundle_identifier_suffix="notification-service",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.usernotifications.service",
        frameworks=("UserNotifications",),
    ),
    TargetType.INTENT: TargetDefaults(
        minimum_deployment_target="12.0",
        bundle_identifier_suffix="intent",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.intents-service",
        frameworks=("Intents",),
    ),
    TargetType.INTENT_UI: TargetDefaults(
        minimum_deployment_target="12.0",
        bundle_identifier_suffix="intent-ui",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.intents-ui-service",
        frameworks=("IntentsUI",),
    ),
    TargetType.SPOTLIGHT: TargetDefaults(
        minimum_deployment_target="9.0",
        bundle_identifier_suffix="spotlight",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.spotlight.import",
        frameworks=("CoreSpotlight",),
    ),
    TargetType.BG_DOWNLOAD: TargetDefaults(
        minimum_deployment_target="7.0",
        bundle_identifier_suffix="bg-download",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.background-asset-downloader-extension",
        frameworks=("BackgroundAssets",),
        uses_app_group=True,
        requires_app_group=True,
    ),
    TargetType.QUICKLOOK_THUMBNAIL: TargetDefaults(
        minimum_deployment_target="11.0",
        bundle_identifier_suffix="quicklook-thumbnail",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.quicklook.thumbnail",
        frameworks=("QuickLookThumbnailing",),
    ),
    TargetType.LOCATION_PUSH: TargetDefaults(
        minimum_deployment_target="15.0",
        bundle_identifier_suffix="location-push",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.location.push.service",
        frameworks=("CoreLocation",),
    ),
    TargetType.CREDENTIALS_PROVIDER: TargetDefaults(
        minimum_deployment_target="12.0",
        bundle_identifier_suffix="credentials-provider",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.authentication-services-credential-provider-ui",
        frameworks=("AuthenticationServices",),
    ),
    TargetType.ACCOUNT_AUTH: TargetDefaults(
        minimum_deployment_target="12.2",
        bundle_identifier_suffix="account-auth",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.authentication-services-account-authentication-modification-ui",
        frameworks=("AuthenticationServices",),
    ),
    TargetType.APP_INTENT: TargetDefaults(
        minimum_deployment_target="16.0",
        bundle_identifier_suffix="app-intent",
        product_type=ProductType.EXTENSIONKIT_EXTENSION,
        extension_point="com.apple.appintents-extension",
        frameworks=("AppIntents",),
    ),
    TargetType.DEVICE_ACTIVITY_MONITOR: TargetDefaults(
        minimum_deployment_target="15.0",
        bundle_identifier_suffix="device-activity-monitor",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.deviceactivity.monitor-extension",
        frameworks=("DeviceActivity",),
    ),
    TargetType.MATTER: TargetDefaults(
        minimum_deployment_target="16.1",
        bundle_identifier_suffix="matter",
        product_type=ProductType.APP_EXTENSION,
        extension_point="com.apple.matter.support.extension.device-setup",
        frameworks=("MatterSupport",),
    ),
    TargetType.WATCH: TargetDefaults(
        minimum_deployment_target="2.0",
        bundle_identifier_suffix="watch",
        product_type=ProductType.APPLICATION,
        extension_point=None,
        wrapper_extension="app",
    ),
}

# Adding a TargetType without a defaults entry must fail loudly, not at the
# first generation pass that happens to use it...
_missing = [t.value for t in TargetType if t not in DEFAULTS]
if _missing:
    raise RuntimeError(f"target defaults table is missing entries for {_missing}")


def parse_target_type(value: Union[str, TargetType, None]) -> TargetType:
    if isinstance(value, TargetType):
        return value
    if value is None:
        raise ConfigurationError("target descriptor does not declare a 'type'")
    try:
        return TargetType(value)
    except ValueError:
        raise ConfigurationError(
            f"unrecognized target type '{value}', expected one of "
            f"{[t.value for t in TargetType]}"
        ) from None


def lookup_defaults(target_type: Union[str, TargetType]) -> TargetDefaults:
    return DEFAULTS[parse_target_type(target_type)]

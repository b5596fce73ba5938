# Target descriptors.
#
# A TargetDescriptor is what a developer writes in a target's config module,
# a literal dict (or a function of the host config returning one). resolve()
# overlays the per-type defaults onto it and produces a
# ResolvedTargetDescriptor with every field populated, which is all the
# generators ever see.

import re

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from apptargets.config import APP_GROUPS_KEY, HostAppConfig
from apptargets.details.as_iterator import str_iter
from apptargets.details.defaults import (
    ActivationRule,
    Platform,
    TargetDefaults,
    TargetType,
    lookup_defaults,
    parse_target_type,
)
from apptargets.errors import ApptargetsError, ConfigurationError

# Types whose activation rules are meaningful
ACTIVATION_RULE_TYPES = (TargetType.SHARE, TargetType.ACTION)

ACCENT_COLOR_NAME = "$accent"


def sanitize_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "", name)


def parse_version(version: str) -> Tuple[int, ...]:
    try:
        return tuple(int(part) for part in str(version).split("."))
    except ValueError:
        raise ConfigurationError(f"invalid deployment target '{version}'") from None


@dataclass(frozen=True)
class ColorValue:
    light: str
    dark: Optional[str] = None

    @staticmethod
    def parse(value: Union[str, dict, "ColorValue"]) -> "ColorValue":
        if isinstance(value, ColorValue):
            return value
        if isinstance(value, str):
            return ColorValue(light=value)
        if isinstance(value, dict):
            light = value.get("light", value.get("color"))
            dark = value.get("dark")
            if not isinstance(light, str):
                raise ConfigurationError(f"color {value!r} does not declare a light value")
            if dark is not None and not isinstance(dark, str):
                raise ConfigurationError(f"color {value!r} has an invalid dark value")
            return ColorValue(light=light, dark=dark)
        raise ConfigurationError(f"invalid color {value!r}")

    def as_literal(self) -> Union[str, dict]:
        if self.dark is None:
            return self.light
        return {"light": self.light, "dark": self.dark}


def parse_colors(value: Optional[dict]) -> Dict[str, ColorValue]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"colors must be a mapping, got {value!r}")
    return {name: ColorValue.parse(color) for name, color in value.items()}


def _mapping(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{what} must be a mapping, got {value!r}")
    return dict(value)


def _string(value: Any, what: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise ConfigurationError(f"{what} must be a string, got {value!r}")


def _build_settings(value: Any) -> Dict[str, Any]:
    settings = _mapping(value, "ios.buildSettings")
    for key, setting in settings.items():
        items = setting if isinstance(setting, list) else [setting]
        if not isinstance(key, str) or not all(isinstance(i, (str, int, float)) for i in items):
            raise ConfigurationError(f"invalid build setting {key!r}: {setting!r}")
    return settings


@dataclass
class IOSOverrides:
    bundle_identifier: Optional[str] = None
    deployment_target: Optional[str] = None
    colors: Dict[str, ColorValue] = field(default_factory=dict)
    entitlements: Dict[str, Any] = field(default_factory=dict)
    activation_rules: Optional[List[ActivationRule]] = None
    entry: Optional[str] = None
    frameworks: Optional[List[str]] = None
    build_settings: Dict[str, Any] = field(default_factory=dict)
    excluded_packages: Tuple[str, ...] = ()

    @staticmethod
    def parse(value: Optional[dict]) -> "IOSOverrides":
        value = _mapping(value, "ios")
        rules = value.get("activationRules")
        if rules is not None and not isinstance(rules, (list, tuple)):
            raise ConfigurationError(f"activationRules must be a list, got {rules!r}")
        frameworks = value.get("frameworks")
        try:
            frameworks = None if frameworks is None else list(str_iter(frameworks))
        except TypeError as e:
            raise ConfigurationError(f"invalid frameworks: {e}") from None
        try:
            excluded = value.get("excludedPackages")
            excluded_packages = () if excluded is None else tuple(str_iter(excluded))
        except TypeError as e:
            raise ConfigurationError(f"invalid excludedPackages: {e}") from None
        deployment_target = value.get("deploymentTarget")
        return IOSOverrides(
            bundle_identifier=_string(value.get("bundleIdentifier"), "ios.bundleIdentifier"),
            deployment_target=None if deployment_target is None else str(deployment_target),
            colors=parse_colors(value.get("colors")),
            entitlements=_mapping(value.get("entitlements"), "ios.entitlements"),
            activation_rules=(
                None if rules is None else [ActivationRule.parse(r) for r in rules]
            ),
            entry=_string(value.get("entry"), "entry"),
            frameworks=frameworks,
            build_settings=_build_settings(value.get("buildSettings")),
            excluded_packages=excluded_packages,
        )


WIDGET_TYPES = ("glance", "remoteviews")


# Home screen widget options, the attributes of its appwidget-provider
@dataclass(frozen=True)
class WidgetOptions:
    widget_type: str = "glance"
    min_width: str = "180dp"
    min_height: str = "110dp"
    resize_mode: str = "horizontal|vertical"
    update_period_millis: int = 0
    widget_category: str = "home_screen"
    initial_layout: Optional[str] = None

    @staticmethod
    def parse(value: dict) -> "WidgetOptions":
        defaults = WidgetOptions()
        widget_type = value.get("widgetType", defaults.widget_type)
        if widget_type not in WIDGET_TYPES:
            raise ConfigurationError(
                f"invalid android.widgetType {widget_type!r}, expected one of {list(WIDGET_TYPES)}"
            )
        period = value.get("updatePeriodMillis", defaults.update_period_millis)
        if isinstance(period, bool) or not isinstance(period, int) or period < 0:
            raise ConfigurationError(f"invalid android.updatePeriodMillis {period!r}")
        return WidgetOptions(
            widget_type=widget_type,
            min_width=_string(value.get("minWidth"), "android.minWidth") or defaults.min_width,
            min_height=_string(value.get("minHeight"), "android.minHeight") or defaults.min_height,
            resize_mode=(
                _string(value.get("resizeMode"), "android.resizeMode") or defaults.resize_mode
            ),
            update_period_millis=period,
            widget_category=(
                _string(value.get("widgetCategory"), "android.widgetCategory")
                or defaults.widget_category
            ),
            initial_layout=_string(value.get("initialLayout"), "android.initialLayout"),
        )

    def as_literal(self) -> dict:
        literal = {
            "widgetType": self.widget_type,
            "minWidth": self.min_width,
            "minHeight": self.min_height,
            "resizeMode": self.resize_mode,
            "updatePeriodMillis": self.update_period_millis,
            "widgetCategory": self.widget_category,
        }
        if self.initial_layout is not None:
            literal["initialLayout"] = self.initial_layout
        return literal


@dataclass
class AndroidOverrides:
    resource_name: Optional[str] = None
    colors: Optional[Dict[str, ColorValue]] = None
    widget: WidgetOptions = field(default_factory=WidgetOptions)

    @staticmethod
    def parse(value: Optional[dict]) -> "AndroidOverrides":
        value = _mapping(value, "android")
        colors = value.get("colors")
        return AndroidOverrides(
            resource_name=_string(value.get("resourceName"), "android.resourceName"),
            colors=None if colors is None else parse_colors(colors),
            widget=WidgetOptions.parse(value),
        )


def parse_platforms(value: Any) -> Tuple[Platform, ...]:
    if value is None:
        return (Platform.IOS,)
    if isinstance(value, Platform):
        return (value,)
    if isinstance(value, str):
        names = [value]
    elif isinstance(value, (list, tuple)):
        names = list(value)
    elif isinstance(value, (set, frozenset)):
        names = sorted(value, key=lambda p: p.value if isinstance(p, Platform) else str(p))
    else:
        raise ConfigurationError(f"invalid platforms {value!r}")
    platforms = []
    for name in names:
        try:
            platform = Platform(name)
        except ValueError:
            raise ConfigurationError(
                f"invalid platform {name!r}, expected one of "
                f"{[p.value for p in Platform]}"
            ) from None
        if platform not in platforms:
            platforms.append(platform)
    if not platforms:
        raise ConfigurationError("target declares an empty platform set")
    return tuple(platforms)


@dataclass
class TargetDescriptor:
    type: TargetType
    name: Optional[str] = None
    display_name: Optional[str] = None
    platforms: Tuple[Platform, ...] = (Platform.IOS,)
    app_group: Optional[str] = None
    ios: IOSOverrides = field(default_factory=IOSOverrides)
    android: AndroidOverrides = field(default_factory=AndroidOverrides)
    directory: Optional[str] = None

    @staticmethod
    def parse(literal: dict, directory: Optional[str] = None) -> "TargetDescriptor":
        if not isinstance(literal, dict):
            raise ConfigurationError(
                f"target config must be a mapping, got {type(literal).__name__}"
            )
        target_type = parse_target_type(literal.get("type"))
        ios = _mapping(literal.get("ios"), "ios")
        # Entry and its excluded packages may also be declared at the top level
        for key in ("entry", "excludedPackages"):
            if key in literal and key not in ios:
                ios[key] = literal[key]
        return TargetDescriptor(
            type=target_type,
            name=_string(literal.get("name"), "name"),
            display_name=_string(literal.get("displayName"), "displayName"),
            platforms=parse_platforms(literal.get("platforms")),
            app_group=_string(literal.get("appGroup"), "appGroup"),
            ios=IOSOverrides.parse(ios),
            android=AndroidOverrides.parse(literal.get("android")),
            directory=_string(literal.get("directory", directory), "directory"),
        )


@dataclass(frozen=True)
class ResolvedTargetDescriptor:
    type: TargetType
    name: str
    product_name: str
    display_name: str
    platforms: Tuple[Platform, ...]
    app_group: Optional[str]
    bundle_identifier: Optional[str]
    deployment_target: str
    colors: Dict[str, ColorValue]
    entitlements: Dict[str, Any]
    activation_rules: Tuple[ActivationRule, ...]
    entry: Optional[str]
    frameworks: Tuple[str, ...]
    build_settings: Dict[str, Any]
    android_resource_name: str
    android_colors: Dict[str, ColorValue]
    excluded_packages: Tuple[str, ...] = ()
    android_widget: WidgetOptions = WidgetOptions()
    directory: Optional[str] = None

    @property
    def defaults(self) -> TargetDefaults:
        return lookup_defaults(self.type)

    def targets(self, platform: Platform) -> bool:
        return platform in self.platforms

    def as_literal(self) -> dict:
        ios: Dict[str, Any] = {
            "deploymentTarget": self.deployment_target,
            "colors": {k: v.as_literal() for k, v in self.colors.items()},
            "entitlements": dict(self.entitlements),
            "frameworks": list(self.frameworks),
            "buildSettings": dict(self.build_settings),
        }
        if self.bundle_identifier is not None:
            ios["bundleIdentifier"] = self.bundle_identifier
        if self.type in ACTIVATION_RULE_TYPES:
            ios["activationRules"] = [r.as_literal() for r in self.activation_rules]
        if self.entry is not None:
            ios["entry"] = self.entry
        if self.excluded_packages:
            ios["excludedPackages"] = list(self.excluded_packages)
        literal = {
            "type": self.type.value,
            "name": self.name,
            "displayName": self.display_name,
            "platforms": [p.value for p in self.platforms],
            "ios": ios,
            "android": {
                "resourceName": self.android_resource_name,
                "colors": {k: v.as_literal() for k, v in self.android_colors.items()},
            },
        }
        if self.type == TargetType.WIDGET:
            literal["android"].update(self.android_widget.as_literal())
        if self.app_group is not None:
            literal["appGroup"] = self.app_group
        if self.directory is not None:
            literal["directory"] = self.directory
        return literal


UserConfig = Union[dict, TargetDescriptor, Callable[[HostAppConfig], Union[dict, TargetDescriptor]]]


def _resolve_bundle_identifier(
    descriptor: TargetDescriptor, defaults: TargetDefaults, host: HostAppConfig
) -> Optional[str]:
    declared = descriptor.ios.bundle_identifier
    if declared and not declared.startswith("."):
        return declared
    if not host.bundle_identifier:
        if Platform.IOS in descriptor.platforms:
            raise ConfigurationError(
                "host app does not declare ios.bundleIdentifier, "
                "cannot derive the target bundle identifier"
            )
        return None
    # A leading dot appends to the host bundle identifier
    suffix = declared[1:] if declared else defaults.bundle_identifier_suffix
    return f"{host.bundle_identifier}.{suffix}"


def _resolve_deployment_target(
    descriptor: TargetDescriptor, defaults: TargetDefaults, host: HostAppConfig
) -> str:
    if descriptor.ios.deployment_target:
        parse_version(descriptor.ios.deployment_target)
        return str(descriptor.ios.deployment_target)
    minimum = defaults.minimum_deployment_target
    # watchOS versions are not comparable with the host's iOS version
    if descriptor.type != TargetType.WATCH and host.deployment_target:
        if parse_version(host.deployment_target) > parse_version(minimum):
            return str(host.deployment_target)
    return minimum


def _resolve_app_group(
    descriptor: TargetDescriptor, defaults: TargetDefaults, host: HostAppConfig
) -> Optional[str]:
    if descriptor.app_group:
        return descriptor.app_group
    if defaults.uses_app_group and host.app_groups:
        return host.app_groups[0]
    if defaults.requires_app_group and Platform.IOS in descriptor.platforms:
        raise ConfigurationError(
            f"{descriptor.type.value} targets need an app group, declare 'appGroup' "
            f"or add one to the host's {APP_GROUPS_KEY} entitlement"
        )
    return None


def _resolve_colors(descriptor: TargetDescriptor, host: HostAppConfig) -> Dict[str, ColorValue]:
    if descriptor.ios.colors:
        return dict(descriptor.ios.colors)
    accent = host.ios.get("accentColor") or getattr(host, "accentColor", None)
    if accent:
        return {ACCENT_COLOR_NAME: ColorValue.parse(accent)}
    return {}


def resolve(
    user_config: UserConfig,
    host: HostAppConfig,
    directory: Optional[Union[str, Path]] = None,
) -> ResolvedTargetDescriptor:
    # Function form receives the host config
    if callable(user_config) and not isinstance(user_config, TargetDescriptor):
        try:
            user_config = user_config(host)
        except ApptargetsError:
            raise
        except Exception as e:
            raise ConfigurationError(f"target function raised {type(e).__name__}: {e}") from e
    directory_name = Path(directory).name if directory is not None else None
    if isinstance(user_config, TargetDescriptor):
        descriptor = user_config
    else:
        descriptor = TargetDescriptor.parse(user_config, directory_name)

    defaults = lookup_defaults(descriptor.type)

    name = descriptor.name or descriptor.directory or directory_name
    if not name:
        raise ConfigurationError("target does not declare a 'name'")
    product_name = sanitize_name(name)
    if not product_name:
        raise ConfigurationError(f"target name '{name}' has no alphanumeric characters")

    if descriptor.ios.entry and not defaults.supports_entry:
        raise ConfigurationError(
            f"{descriptor.type.value} targets cannot declare an entry, only "
            f"{[t.value for t in TargetType if lookup_defaults(t).supports_entry]} can"
        )
    if descriptor.ios.activation_rules is not None:
        if descriptor.type not in ACTIVATION_RULE_TYPES:
            raise ConfigurationError(
                f"activationRules are only supported by "
                f"{[t.value for t in ACTIVATION_RULE_TYPES]} targets"
            )
        activation_rules = tuple(descriptor.ios.activation_rules)
    else:
        activation_rules = defaults.default_activation_rules

    if descriptor.ios.frameworks is not None:
        frameworks = tuple(descriptor.ios.frameworks)
    else:
        frameworks = defaults.frameworks

    colors = _resolve_colors(descriptor, host)
    if descriptor.android.colors is not None:
        android_colors = dict(descriptor.android.colors)
    else:
        android_colors = dict(colors)

    return ResolvedTargetDescriptor(
        type=descriptor.type,
        name=name,
        product_name=product_name,
        display_name=descriptor.display_name or name,
        platforms=descriptor.platforms,
        app_group=_resolve_app_group(descriptor, defaults, host),
        bundle_identifier=_resolve_bundle_identifier(descriptor, defaults, host),
        deployment_target=_resolve_deployment_target(descriptor, defaults, host),
        colors=colors,
        entitlements=dict(descriptor.ios.entitlements),
        activation_rules=activation_rules,
        entry=descriptor.ios.entry,
        frameworks=frameworks,
        build_settings=dict(descriptor.ios.build_settings),
        android_resource_name=descriptor.android.resource_name or product_name.lower(),
        android_colors=android_colors,
        excluded_packages=descriptor.ios.excluded_packages,
        android_widget=(
            descriptor.android.widget if descriptor.type == TargetType.WIDGET else WidgetOptions()
        ),
        directory=descriptor.directory or directory_name,
    )

# Home screen widgets on Android.
#
# A widget target gets an appwidget-provider resource describing it, a
# placeholder initial layout unless one is declared, and its receivers
# registered in the host's AndroidManifest.xml. The receiver classes
# themselves are written by the developer, under
# <package>.widget.<resource name>:
#
#   glance       <Name>WidgetReceiver and <Name>UpdateReceiver
#   remoteviews  <Name>Provider

import re

from pathlib import Path
from typing import Dict, List, Tuple
from xml.dom.minidom import Document, Element, Node, parse
from xml.parsers.expat import ExpatError

from apptargets.details.defaults import TargetType
from apptargets.details.descriptor import ResolvedTargetDescriptor
from apptargets.details.files import write_if_changed
from apptargets.details.logger import Logger
from apptargets.details.xmldoc import (
    append_element,
    append_indented,
    document_bytes,
    element_indent,
    xml_bytes,
)
from apptargets.errors import ConfigurationError, TargetIOError

ANDROID_NS = "http://schemas.android.com/apk/res/android"

APPWIDGET_UPDATE = "android.appwidget.action.APPWIDGET_UPDATE"
APPWIDGET_PROVIDER = "android.appwidget.provider"

# Receiver of the native storage module, refreshes widgets on request
TARGETS_RECEIVER = "expo.modules.targets.ExpoTargetsReceiver"
WIDGET_EVENT = "expo.modules.targets.WIDGET_EVENT"
UPDATE_WIDGET = "expo.modules.targets.UPDATE_WIDGET"

# (tag, attributes, children)
XmlTree = Tuple[str, Dict[str, str], list]


def class_name(name: str) -> str:
    return "".join(p[:1].upper() + p[1:] for p in re.split(r"[^A-Za-z0-9]+", name) if p)


def layout_name(target: ResolvedTargetDescriptor) -> str:
    return target.android_widget.initial_layout or f"widget_{target.android_resource_name}"


def provider_xml(target: ResolvedTargetDescriptor) -> bytes:
    options = target.android_widget
    xdoc = Document()
    xprovider = append_element(xdoc, "appwidget-provider")
    xprovider.setAttribute("xmlns:android", ANDROID_NS)
    attributes = {
        "minWidth": options.min_width,
        "minHeight": options.min_height,
        "resizeMode": options.resize_mode,
        "updatePeriodMillis": str(options.update_period_millis),
        "widgetCategory": options.widget_category,
        "initialLayout": f"@layout/{layout_name(target)}",
    }
    for key, value in attributes.items():
        xprovider.setAttribute(f"android:{key}", value)
    return xml_bytes(xdoc)


def placeholder_layout_xml() -> bytes:
    xdoc = Document()
    xlayout = append_element(xdoc, "FrameLayout")
    xlayout.setAttribute("xmlns:android", ANDROID_NS)
    xlayout.setAttribute("android:layout_width", "match_parent")
    xlayout.setAttribute("android:layout_height", "match_parent")
    xlayout.setAttribute("android:background", "@android:color/transparent")
    return xml_bytes(xdoc)


def write_widget_resources(target: ResolvedTargetDescriptor, res_root: Path) -> List[Path]:
    written = []
    provider = res_root.joinpath("xml", f"widgetprovider_{target.android_resource_name}.xml")
    layout = res_root.joinpath("layout", f"{layout_name(target)}.xml")
    try:
        if write_if_changed(provider, provider_xml(target)):
            written.append(provider)
        # The placeholder is only a starting point, an existing layout is kept
        if target.android_widget.initial_layout is None and not layout.exists():
            if write_if_changed(layout, placeholder_layout_xml()):
                written.append(layout)
    except OSError as e:
        raise TargetIOError(f"failed to write widget resources: {e}") from e
    return written


def _action(name: str) -> XmlTree:
    return ("action", {"android:name": name}, [])


def widget_receivers(target: ResolvedTargetDescriptor, package: str) -> List[XmlTree]:
    resource = target.android_resource_name
    prefix = f"{package}.widget.{resource}.{class_name(target.name)}"
    provider = (
        "meta-data",
        {"android:name": APPWIDGET_PROVIDER, "android:resource": f"@xml/widgetprovider_{resource}"},
        [],
    )
    receivers = [
        (
            "receiver",
            {"android:name": TARGETS_RECEIVER, "android:exported": "false"},
            [("intent-filter", {}, [_action(WIDGET_EVENT)])],
        )
    ]
    if target.android_widget.widget_type == "remoteviews":
        receivers.append(
            (
                "receiver",
                {
                    "android:name": f"{prefix}Provider",
                    "android:exported": "true",
                    "android:label": target.display_name,
                },
                [("intent-filter", {}, [_action(APPWIDGET_UPDATE), _action(WIDGET_EVENT)]), provider],
            )
        )
        return receivers
    receivers.append(
        (
            "receiver",
            {
                "android:name": f"{prefix}WidgetReceiver",
                "android:exported": "true",
                "android:label": target.display_name,
            },
            [("intent-filter", {}, [_action(APPWIDGET_UPDATE)]), provider],
        )
    )
    receivers.append(
        (
            "receiver",
            {"android:name": f"{prefix}UpdateReceiver", "android:exported": "false"},
            [("intent-filter", {}, [_action(UPDATE_WIDGET)])],
        )
    )
    return receivers


def _append_tree(xparent: Element, tree: XmlTree, indent: str, parent_indent: str, step: str):
    tag, attributes, children = tree
    xelement = append_indented(xparent, tag, indent, parent_indent)
    for key, value in attributes.items():
        xelement.setAttribute(key, value)
    for child in children:
        _append_tree(xelement, child, indent + step, indent, step)


def add_receivers(xdoc: Document, receivers: List[XmlTree]) -> List[str]:
    """
    Add the receivers missing from the manifest's <application>, matched by
    android:name. Returns the names of the receivers added.
    """
    xapplications = xdoc.documentElement.getElementsByTagName("application")
    if not xapplications:
        raise ValueError("manifest has no <application> element")
    xapplication = xapplications[0]
    existing = {
        x.getAttribute("android:name") for x in xapplication.getElementsByTagName("receiver")
    }

    parent_indent = element_indent(xapplication)
    xchildren = [c for c in xapplication.childNodes if c.nodeType == Node.ELEMENT_NODE]
    indent = element_indent(xchildren[0]) if xchildren else ""
    if indent.startswith(parent_indent) and len(indent) > len(parent_indent):
        step = indent[len(parent_indent):]
    else:
        step = "    "
        indent = parent_indent + step

    added = []
    for tree in receivers:
        name = tree[1]["android:name"]
        if name in existing:
            continue
        _append_tree(xapplication, tree, indent, parent_indent, step)
        existing.add(name)
        added.append(name)
    return added


def sync_manifest(path: Path, receivers: List[XmlTree], logger: Logger) -> bool:
    try:
        xdoc = parse(str(path))
    except (OSError, ExpatError) as e:
        raise TargetIOError(f"failed to read manifest {path}: {e}") from e
    try:
        added = add_receivers(xdoc, receivers)
    except ValueError as e:
        raise TargetIOError(f"cannot update {path}: {e}") from e
    if not added:
        return False
    try:
        write_if_changed(path, document_bytes(xdoc))
    except OSError as e:
        raise TargetIOError(f"failed to write manifest {path}: {e}") from e
    for name in added:
        logger.log(f"registered receiver {name}")
    return True


def sync_widget(
    target: ResolvedTargetDescriptor, res_root: Path, manifest: Path, package: str, logger: Logger
) -> List[Path]:
    if target.type != TargetType.WIDGET:
        return []
    if not package:
        raise ConfigurationError(
            "host app does not declare android.package, cannot register widget receivers"
        )
    written = write_widget_resources(target, res_root)
    if sync_manifest(manifest, widget_receivers(target, package), logger):
        written.append(manifest)
    return written

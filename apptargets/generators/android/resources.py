import re

from pathlib import Path
from typing import Dict, List
from xml.dom.minidom import Document

from apptargets.details.colors import to_android_hex
from apptargets.details.descriptor import ColorValue, ResolvedTargetDescriptor
from apptargets.details.files import write_if_changed
from apptargets.details.xmldoc import append_element, append_text_element, xml_bytes
from apptargets.errors import TargetIOError


# Android resource names are lowercase identifiers, "$accent" becomes "accent"
def resource_name(name: str) -> str:
    cleaned = re.sub(r"[^a-z0-9_]", "_", name.lower()).strip("_")
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"color_{cleaned}"
    return cleaned


def colors_xml(colors: Dict[str, str]) -> bytes:
    xdoc = Document()
    xresources = append_element(xdoc, "resources")
    for name, value in colors.items():
        append_text_element(xresources, "color", value, {"name": name})
    return xml_bytes(xdoc)


def _mode(colors: Dict[str, ColorValue], dark: bool) -> Dict[str, str]:
    result = {}
    for name, color in colors.items():
        value = color.dark if dark and color.dark else color.light
        result[resource_name(name)] = to_android_hex(value)
    return result


def write_color_resources(target: ResolvedTargetDescriptor, res_root: Path) -> List[Path]:
    """
    Write light and dark color resources for the target, named after its
    resource name so the host's own colors.xml is left alone.
    """
    if not target.android_colors:
        return []
    filename = f"{target.android_resource_name}_colors.xml"
    files = {
        res_root.joinpath("values", filename): colors_xml(_mode(target.android_colors, False)),
    }
    if any(c.dark for c in target.android_colors.values()):
        files[res_root.joinpath("values-night", filename)] = colors_xml(
            _mode(target.android_colors, True)
        )
    written = []
    try:
        for path, data in files.items():
            if write_if_changed(path, data):
                written.append(path)
    except OSError as e:
        raise TargetIOError(f"failed to write color resources: {e}") from e
    return written

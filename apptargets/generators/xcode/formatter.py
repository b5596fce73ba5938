"""
Xcode project file formatter.

This module converts the object arena of a ProjectGraph back into a valid
Xcode project file (.pbxproj). Output is deterministic: objects are grouped
into one section per isa, sorted by identifier, and every reference to a
known object carries the same comment Xcode itself would write. Formatting a
freshly parsed file of our own output reproduces it byte for byte.
"""

import enum
import re
from typing import Any, Dict, List, Optional

# Strings made only of these characters are written without quotes
UNQUOTED = re.compile(r"[A-Za-z0-9_$/:.]+")

# Objects Xcode writes on a single line
SINGLE_LINE_ISAS = {"PBXBuildFile", "PBXFileReference"}

PHASE_NAMES = {
    "PBXSourcesBuildPhase": "Sources",
    "PBXFrameworksBuildPhase": "Frameworks",
    "PBXResourcesBuildPhase": "Resources",
    "PBXHeadersBuildPhase": "Headers",
    "PBXCopyFilesBuildPhase": "CopyFiles",
    "PBXShellScriptBuildPhase": "ShellScript",
}

Comments = Dict[str, Optional[str]]


def format_string(value: str) -> str:
    if UNQUOTED.fullmatch(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def collect_comments(objects: Dict[str, Dict[str, Any]], project_name: str) -> Comments:
    comments: Comments = {}
    for object_id, props in objects.items():
        isa = props.get("isa")
        if isa == "PBXProject":
            comments[object_id] = "Project object"
        elif isa in PHASE_NAMES:
            comments[object_id] = props.get("name") or PHASE_NAMES[isa]
        elif isa in ("PBXContainerItemProxy", "PBXTargetDependency", "PBXBuildFile"):
            comments[object_id] = isa
        else:
            comments[object_id] = props.get("name") or props.get("path")
    # Build files are named after their file and the phase that owns them
    for props in objects.values():
        if props.get("isa") not in PHASE_NAMES:
            continue
        phase_name = props.get("name") or PHASE_NAMES[props["isa"]]
        for build_file_id in props.get("files", []):
            build_file = objects.get(build_file_id)
            if build_file is None:
                continue
            ref = build_file.get("fileRef") or build_file.get("productRef")
            file_name = comments.get(ref) if ref else None
            comments[build_file_id] = f"{file_name or '(null)'} in {phase_name}"
    # Configuration lists are named after their owner
    for props in objects.values():
        list_id = props.get("buildConfigurationList")
        if list_id is None:
            continue
        if props.get("isa") == "PBXProject":
            owner_name = project_name
        else:
            owner_name = props.get("name", "")
        comments[list_id] = (
            f'Build configuration list for {props.get("isa")} "{owner_name}"'
        )
    return comments


def format_value(value: Any, indent_level: int, comments: Comments, inline: bool = False) -> str:
    if isinstance(value, dict):
        return format_dict(value, indent_level, comments, inline)
    elif isinstance(value, list):
        return format_list(value, indent_level, comments, inline)
    elif isinstance(value, enum.Enum):
        return format_value(value.value, indent_level, comments, inline)
    elif isinstance(value, bool):
        # Xcode represents booleans as 0/1
        return "1" if value else "0"
    elif isinstance(value, (int, float)):
        return str(value)
    elif isinstance(value, str):
        if value in comments:
            comment = comments[value]
            if comment:
                return f"{value} /* {comment} */"
            return value
        return format_string(value)
    raise TypeError(f"Unsupported type: {type(value).__name__} for value: {value}")


def _ordered_keys(value_dict: Dict[str, Any]) -> List[str]:
    keys = sorted(value_dict.keys())
    if "isa" in value_dict:
        keys.remove("isa")
        keys.insert(0, "isa")
    return keys


def format_dict(value_dict: Dict[str, Any], indent_level: int, comments: Comments, inline: bool = False) -> str:
    keys = [k for k in _ordered_keys(value_dict) if value_dict[k] is not None]
    if inline:
        items = "".join(
            f"{format_string(k)} = {format_value(value_dict[k], 0, comments, True)}; "
            for k in keys
        )
        return "{" + items + "}"

    indent = "\t" * indent_level
    inner_indent = "\t" * (indent_level + 1)

    # Empty dictionaries should have braces on separate lines for Xcode compatibility
    if not keys:
        return "{\n" + indent + "}"

    result = "{\n"
    for key in keys:
        formatted_value = format_value(value_dict[key], indent_level + 1, comments)
        result += f"{inner_indent}{format_string(key)} = {formatted_value};\n"
    result += f"{indent}}}"
    return result


def format_list(value_list: List[Any], indent_level: int, comments: Comments, inline: bool = False) -> str:
    if not value_list:
        return "(\n" + "\t" * indent_level + ")"
    if inline:
        return "(" + "".join(f"{format_value(v, 0, comments, True)}, " for v in value_list) + ")"

    indent = "\t" * indent_level
    inner_indent = "\t" * (indent_level + 1)

    result = "(\n"
    for item in value_list:
        result += f"{inner_indent}{format_value(item, indent_level + 1, comments)},\n"
    result += f"{indent})"
    return result


def format_objects(objects: Dict[str, Dict[str, Any]], comments: Comments) -> str:
    sections: Dict[str, List[str]] = {}
    for object_id in sorted(objects):
        props = objects[object_id]
        isa = props.get("isa", "")
        key = format_value(object_id, 2, comments)
        if isa in SINGLE_LINE_ISAS:
            body = format_dict(props, 2, comments, inline=True)
        else:
            body = format_dict(props, 2, comments)
        sections.setdefault(isa, []).append(f"\t\t{key} = {body};\n")

    result = "{\n"
    for isa in sorted(sections):
        result += f"\n/* Begin {isa} section */\n"
        result += "".join(sections[isa])
        result += f"/* End {isa} section */\n"
    result += "\t}"
    return result


def format_pbxproj(data: Dict[str, Any], project_name: str = "Project") -> str:
    """
    Convert a parsed project file back into its string representation.

    Args:
        data: The top-level project dictionary, holding the objects arena.
        project_name: Name used in the project's configuration list comment.

    Returns:
        A string containing the formatted Xcode project file content.
    """
    objects = data["objects"]
    comments = collect_comments(objects, project_name)

    # Start with the UTF-8 marker
    result = "// !$*UTF8*$!\n{\n"
    for key in sorted(data):
        if key == "objects":
            formatted = format_objects(objects, comments)
        else:
            formatted = format_value(data[key], 1, comments)
        result += f"\t{format_string(key)} = {formatted};\n"
    result += "}\n"
    return result

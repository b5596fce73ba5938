from typing import Any, Dict, List, Set

# Properties whose values name other objects in the arena
REFERENCE_KEYS = {
    "buildConfigurationList",
    "buildConfigurations",
    "buildPhases",
    "children",
    "dependencies",
    "fileRef",
    "files",
    "mainGroup",
    "productRefGroup",
    "productReference",
    "remoteGlobalIDString",
    "target",
    "targetProxy",
    "targets",
}


def collect_ids(data: Dict[str, Any]) -> Set[str]:
    return set(data.get("objects", {}).keys())


def validate_references(data: Dict[str, Any]) -> List[str]:
    errors = []
    all_ids = collect_ids(data)

    def check(value: Any, context: str):
        if isinstance(value, str):
            if value not in all_ids:
                errors.append(f"Invalid reference in {context}: {value}")
        elif isinstance(value, list):
            for index, item in enumerate(value):
                check(item, f"{context}[{index}]")
        else:
            errors.append(f"Unknown type in {context}: {type(value).__name__}")

    root = data.get("rootObject")
    if root not in all_ids:
        errors.append(f"Invalid reference in project.rootObject: {root}")

    for object_id, props in data.get("objects", {}).items():
        isa = props.get("isa")
        if not isa:
            errors.append(f"Object {object_id} has no isa")
        for key, value in props.items():
            if key not in REFERENCE_KEYS:
                continue
            # Container proxies may point at objects in other projects
            if key == "remoteGlobalIDString" and props.get("containerPortal") != root:
                continue
            check(value, f"{isa}({object_id}).{key}")

    return errors

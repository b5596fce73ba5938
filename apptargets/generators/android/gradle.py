import re

from pathlib import Path
from typing import Optional

from apptargets.details.files import write_if_changed
from apptargets.details.logger import Logger
from apptargets.errors import TargetIOError

NAMESPACE_PATTERN = re.compile(r"namespace\s+[\"']([^\"']+)[\"']")


def fix_namespace(text: str, package: Optional[str]) -> str:
    # Nothing declared to correct towards...
    if not package:
        return text
    match = NAMESPACE_PATTERN.search(text)
    # No declaration to rewrite, the base project generator owns adding one
    if match is None or match.group(1) == package:
        return text
    return text[: match.start()] + f'namespace "{package}"' + text[match.end() :]


def fix_build_script(path: Path, package: Optional[str], logger: Logger) -> bool:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TargetIOError(f"failed to read {path}: {e}") from e
    fixed = fix_namespace(text, package)
    if fixed == text:
        logger.log(f"namespace in {path} already matches {package}")
        return False
    try:
        write_if_changed(path, fixed.encode("utf-8"))
    except OSError as e:
        raise TargetIOError(f"failed to write {path}: {e}") from e
    logger.summary(True, "Fixed Android namespace", package)
    return True

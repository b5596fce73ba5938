import os
import shutil

from pathlib import Path
from tempfile import NamedTemporaryFile, TemporaryDirectory


# Replace a file's content in one step, readers never observe a partial write
def replace_atomic(path: Path, data: bytes):
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile(dir=str(path.parent), prefix=f".{path.name}.", delete=False) as tmp:
        tmp.write(data)
    try:
        os.replace(tmp.name, str(path))
    except OSError:
        os.unlink(tmp.name)
        raise


def write_if_changed(path: Path, data: bytes) -> bool:
    if path.is_file() and path.read_bytes() == data:
        return False
    replace_atomic(path, data)
    return True


# Copy a directory tree into place all-or-nothing: the tree is staged in a
# temporary sibling directory and renamed once complete
def copy_tree_atomic(src: Path, dst: Path):
    dst.parent.mkdir(parents=True, exist_ok=True)
    with TemporaryDirectory(dir=str(dst.parent)) as tmp:
        staged = Path(tmp).joinpath(dst.name)
        shutil.copytree(str(src), str(staged))
        staged.rename(dst)

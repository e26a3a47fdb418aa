"""
Atomic file writes.

Content is written to a temporary file next to the destination, flushed and
renamed into place, so an interrupted run never leaves a half-written CSS,
manifest or bundle behind.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def write_atomic(path: PathLike, data: Union[str, bytes], mode: int = 0o644) -> Path:
    """
    Write ``data`` to ``path`` atomically and set its permission bits.

    Args:
        path: Destination file
        data: Text (written as UTF-8) or bytes
        mode: Permission bits applied before the rename

    Returns:
        The destination path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        data = data.encode("utf-8")

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        _discard(tmp_name)
        raise

    logger.debug("Wrote %s (%d bytes, mode %o)", path, len(data), mode)
    return path


def copy_atomic(src: PathLike, dest: PathLike, mode: int = 0o644) -> Path:
    """Copy a file into place atomically."""
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as out, open(src, "rb") as source:
            shutil.copyfileobj(source, out)
            out.flush()
            os.fsync(out.fileno())
        shutil.copystat(src, tmp_name)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, dest)
    except BaseException:
        _discard(tmp_name)
        raise

    logger.debug("Copied %s -> %s", src, dest)
    return dest


def _discard(name: str) -> None:
    try:
        os.unlink(name)
    except FileNotFoundError:
        pass

"""
Path Inspection

Checks that configured files, directories and links exist with the expected
type. A missing path is an ordinary diagnostic outcome, never an exception.
"""

import os
import pwd
import stat
from typing import Iterable, List

from ...config.models import PathSpec, PathType
from ...models import CheckResult

SUDO_HINT = "Re-run with sudo to inspect this path"


class PathInspector:
    """Reports existence, type and permissions for a list of PathSpecs."""

    def inspect(self, specs: Iterable[PathSpec]) -> List[CheckResult]:
        """
        Inspect each path in order.

        Args:
            specs: Paths and their expected types

        Returns:
            One CheckResult per spec
        """
        return [self.inspect_one(spec) for spec in specs]

    def inspect_one(self, spec: PathSpec) -> CheckResult:
        name = spec.display_name
        follow = spec.expected_type != PathType.SYMLINK

        try:
            st = os.stat(spec.path) if follow else os.lstat(spec.path)
        except FileNotFoundError:
            return self._missing(spec)
        except NotADirectoryError:
            return self._missing(spec)
        except PermissionError:
            return CheckResult.warn(name, f"Permission denied: {spec.path}", SUDO_HINT)
        except OSError as e:
            if os.path.lexists(spec.path):
                return CheckResult.fail(name, f"Cannot stat {spec.path}: {e.strerror or e}")
            return self._missing(spec)

        actual = _kind(st.st_mode)
        if actual != spec.expected_type:
            return CheckResult.fail(
                name,
                f"{spec.path}: expected {_describe(spec.expected_type)}, found {_describe(actual)}",
            )

        return CheckResult.ok(name, f"{spec.path} ({_metadata(spec.path, st)})")

    def _missing(self, spec: PathSpec) -> CheckResult:
        if os.path.islink(spec.path):
            detail = f"Dangling symlink: {spec.path} -> {os.readlink(spec.path)}"
        else:
            detail = f"Not found: {spec.path}"

        if spec.required:
            return CheckResult.fail(spec.display_name, detail)
        return CheckResult.warn(spec.display_name, detail + " (optional)")


def _kind(mode: int):
    if stat.S_ISLNK(mode):
        return PathType.SYMLINK
    if stat.S_ISDIR(mode):
        return PathType.DIR
    if stat.S_ISREG(mode):
        return PathType.FILE
    return None


def _describe(kind) -> str:
    return {
        PathType.FILE: "regular file",
        PathType.DIR: "directory",
        PathType.SYMLINK: "symlink",
    }.get(kind, "special file")


def _owner(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def _metadata(path: str, st: os.stat_result) -> str:
    """Size, permission bits and owner, like a short ``ls -l``."""
    perms = f"{stat.filemode(st.st_mode)} {stat.S_IMODE(st.st_mode):04o}"
    owner = _owner(st.st_uid)

    if stat.S_ISLNK(st.st_mode):
        return f"-> {os.readlink(path)}, {perms}, {owner}"
    if stat.S_ISDIR(st.st_mode):
        return f"directory, {perms}, {owner}"
    return f"{_format_size(st.st_size)}, {perms}, {owner}"


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.1f} MiB"

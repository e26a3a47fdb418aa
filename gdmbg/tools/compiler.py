"""
Resource Bundle Compiler

Wraps ``glib-compile-resources`` with a backup-before-overwrite policy: the
first time a bundle is replaced, the original is copied to
``<bundle>.backup``. That backup is never overwritten or removed afterwards.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..errors import CompileError, NotFoundError
from ..writer.files import copy_atomic
from .runner import run_tool

logger = logging.getLogger(__name__)

COMPILER = "glib-compile-resources"
BACKUP_SUFFIX = ".backup"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class BackupRecord:
    """A write-once copy of a bundle taken before it was first replaced."""
    original_path: str
    backup_path: str
    created_at: datetime


def backup_path_for(output_path: PathLike) -> Path:
    return Path(str(output_path) + BACKUP_SUFFIX)


class BundleCompiler:
    """Compiles resource manifests into bundles, keeping one pristine backup."""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def ensure_backup(self, output_path: PathLike) -> Optional[BackupRecord]:
        """
        Back up ``output_path`` unless a backup already exists.

        Returns:
            The new BackupRecord, or None if nothing was copied
        """
        output_path = Path(output_path)
        backup = backup_path_for(output_path)

        if not output_path.exists() or os.path.lexists(backup):
            return None

        mode = output_path.stat().st_mode & 0o777
        copy_atomic(output_path, backup, mode=mode)
        logger.info("Backed up %s to %s", output_path, backup)
        return BackupRecord(
            original_path=str(output_path),
            backup_path=str(backup),
            created_at=datetime.now(),
        )

    def compile(
        self,
        manifest_path: PathLike,
        source_dir: PathLike,
        output_path: PathLike,
    ) -> Optional[BackupRecord]:
        """
        Compile ``manifest_path`` into ``output_path``.

        The bundle is compiled to a temporary file and renamed into place,
        then made world-readable.

        Returns:
            BackupRecord if a backup was created by this call

        Raises:
            CompileError: The compiler exited non-zero
            ExternalToolError: The compiler is missing or timed out
        """
        output_path = Path(output_path)
        record = self.ensure_backup(output_path)

        fd, tmp_target = tempfile.mkstemp(
            dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp"
        )
        os.close(fd)

        argv = [
            COMPILER,
            f"--target={tmp_target}",
            f"--sourcedir={source_dir}",
            str(manifest_path),
        ]
        try:
            result = run_tool(argv, timeout=self.timeout, check=False)
            if result.returncode != 0:
                raise CompileError(argv, result.returncode, result.stderr)
            os.chmod(tmp_target, 0o644)
            os.replace(tmp_target, output_path)
        except BaseException:
            if os.path.exists(tmp_target):
                os.unlink(tmp_target)
            raise

        logger.info("Compiled %s", output_path)
        return record

    def restore(self, output_path: PathLike) -> Path:
        """
        Copy the backup back over ``output_path``. The backup is kept.

        Raises:
            NotFoundError: No backup exists
        """
        output_path = Path(output_path)
        backup = backup_path_for(output_path)
        if not backup.is_file():
            raise NotFoundError(f"No backup found at {backup}")

        copy_atomic(backup, output_path, mode=0o644)
        logger.info("Restored %s from %s", output_path, backup)
        return output_path


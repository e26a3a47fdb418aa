"""Base class for background solutions and the file changes they plan."""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..config.models import ToolConfig
from ..models import CheckResult, CheckStatus
from ..tools.compiler import BackupRecord
from ..writer.files import copy_atomic, write_atomic

logger = logging.getLogger(__name__)

# Leading bytes of the image formats GNOME Shell can load as a background
IMAGE_SIGNATURES = {
    b"\x89PNG\r\n\x1a\n": "PNG",
    b"\xff\xd8\xff": "JPEG",
    b"GIF87a": "GIF",
    b"GIF89a": "GIF",
}


@dataclass
class FileChange:
    """A file a solution will create or replace."""

    path: str
    description: str
    content: Optional[str] = None  # rendered text
    source: Optional[str] = None  # file copied into place
    mode: int = 0o644

    def apply(self) -> None:
        if self.source is not None:
            if os.path.exists(self.path) and os.path.samefile(self.source, self.path):
                return
            copy_atomic(self.source, self.path, mode=self.mode)
        else:
            write_atomic(self.path, self.content or "", mode=self.mode)


@dataclass
class ApplyResult:
    """Result of applying a solution."""

    solution: str
    dry_run: bool
    changes: List[FileChange] = field(default_factory=list)
    checks: List[CheckResult] = field(default_factory=list)
    backup: Optional[BackupRecord] = None

    @property
    def success(self) -> bool:
        return not any(c.status == CheckStatus.FAIL for c in self.checks)


class BackgroundSolution(ABC):
    """Base class for ways of installing a login background."""

    # Override in subclasses
    name: str = "base"
    description: str = ""

    def __init__(self, config: ToolConfig, dry_run: bool = False):
        """Initialize the solution with configuration."""
        self.config = config
        self.dry_run = dry_run
        self.notes: List[CheckResult] = []

    @abstractmethod
    def plan(self, image: Path) -> List[FileChange]:
        """Render every file the solution writes. Must not modify the system."""
        pass

    @abstractmethod
    def finish(self, image: Path, result: ApplyResult) -> List[CheckResult]:
        """Run the commands that activate the written files."""
        pass

    def apply(self, image: Union[str, Path]) -> ApplyResult:
        """
        Validate the image, write the planned files and activate them.

        With ``dry_run`` the files are rendered but nothing is written or run.
        """
        image = Path(image).resolve()
        result = ApplyResult(solution=self.name, dry_run=self.dry_run)

        image_check = check_image(image)
        result.checks.append(image_check)
        if image_check.status == CheckStatus.FAIL:
            return result

        result.changes = self.plan(image)
        result.checks.extend(self.notes)
        if self.dry_run:
            result.checks.append(CheckResult.ok(
                "Dry run", f"{len(result.changes)} files rendered, nothing written",
            ))
            return result

        for change in result.changes:
            logger.info("Writing %s to %s", change.description, change.path)
            try:
                change.apply()
            except OSError as e:
                result.checks.append(CheckResult.fail(
                    f"Write {change.description}", f"{change.path}: {e}",
                ))
                # later steps depend on every file being in place
                return result
            result.checks.append(CheckResult.ok(f"Write {change.description}", change.path))

        result.checks.extend(self.finish(image, result))
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dry_run={self.dry_run})"


def check_image(image: Path) -> CheckResult:
    """The background must be a readable image file."""
    name = "Background image"
    if not image.exists():
        return CheckResult.fail(name, f"Not found: {image}")
    if not image.is_file():
        return CheckResult.fail(name, f"Not a regular file: {image}")

    try:
        with open(image, "rb") as f:
            header = f.read(8)
    except PermissionError:
        return CheckResult.fail(name, f"Permission denied: {image}")

    for signature, kind in IMAGE_SIGNATURES.items():
        if header.startswith(signature):
            return CheckResult.ok(name, f"{image} ({kind})")

    if image.suffix.lower() == ".svg":
        return CheckResult.ok(name, f"{image} (SVG)")
    return CheckResult.warn(name, f"{image}: unrecognised image format",
                            "GNOME Shell may not be able to display it")

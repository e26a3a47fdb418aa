"""
Theme bundle solution.

Installs the image next to GNOME Shell's theme bundle, renders a stylesheet
pointing at it and recompiles the bundle. By default the stylesheet is
appended to the stock theme CSS extracted from the pristine bundle (the
backup once one exists), so the rest of the greeter keeps its styling.
``minimal`` reproduces a CSS-only bundle instead.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from ..config.models import ToolConfig
from ..errors import ExternalToolError
from ..models import CheckResult
from ..tools.compiler import BundleCompiler, backup_path_for
from ..tools.gresource import GRESOURCE, ResourceBundleInspector
from ..tools.runner import is_available
from ..writer.files import write_atomic
from ..writer.templates import render_css, render_manifest
from .base import ApplyResult, BackgroundSolution, FileChange

logger = logging.getLogger(__name__)


class GresourceSolution(BackgroundSolution):
    """Recompiles gnome-shell-theme.gresource with a custom background."""

    name = "gresource"
    description = "Modify the GNOME Shell theme bundle"

    def __init__(self, config: ToolConfig, dry_run: bool = False, minimal: bool = False):
        super().__init__(config, dry_run)
        self.minimal = minimal
        self.inspector = ResourceBundleInspector(timeout=config.timeout)
        self.compiler = BundleCompiler(timeout=config.compile_timeout)
        self._base_bundle: Optional[str] = None
        self._entries: List[str] = []

    def background_css(self, image_path: str) -> str:
        style = self.config.background
        return render_css({
            "image_path": image_path,
            "selectors": style.selectors,
            "size": style.size,
            "position": style.position,
            "repeat": style.repeat,
        })

    def plan(self, image: Path) -> List[FileChange]:
        config = self.config
        css = self.background_css(config.image_path)
        resources = [config.css_name]

        if not self.minimal:
            base_css = self._load_base_theme()
            if base_css is not None:
                css = base_css.rstrip("\n") + "\n\n" + css
                resources = self._relative_entries()

        return [
            FileChange(path=config.image_path, description="background image", source=str(image)),
            FileChange(path=config.css_path, description="theme CSS", content=css),
            FileChange(
                path=config.manifest_path,
                description="resource manifest",
                content=render_manifest(resources, prefix=config.resource_prefix),
            ),
        ]

    def finish(self, image: Path, result: ApplyResult) -> List[CheckResult]:
        checks = []
        config = self.config

        try:
            if self._base_bundle is None:
                result.backup = self.compiler.compile(
                    config.manifest_path, config.shell_dir, config.bundle_path
                )
            else:
                result.backup = self._compile_merged(result)
        except ExternalToolError as e:
            checks.append(CheckResult.fail("Compile theme bundle", str(e)))
            return checks
        except OSError as e:
            # backup copy, temporary target or staging directory could not be written
            checks.append(CheckResult.fail(
                "Compile theme bundle",
                f"{config.bundle_path}: {e}",
                "Check that the filesystem is writable and has free space",
            ))
            return checks

        if result.backup:
            checks.append(CheckResult.ok("Back up original bundle", result.backup.backup_path))
        checks.append(CheckResult.ok(
            "Compile theme bundle",
            config.bundle_path,
            "Restart GDM to see the change: sudo gdm-bg-tool restart-service",
        ))
        return checks

    def _compile_merged(self, result: ApplyResult):
        """Extract the stock theme into a staging directory and compile from there."""
        config = self.config
        css_text = next(c.content for c in result.changes if c.path == config.css_path)

        with tempfile.TemporaryDirectory(prefix="gdm-bg-tool-") as staging:
            self.inspector.extract_tree(
                self._base_bundle, config.resource_prefix, staging, self._entries
            )
            write_atomic(Path(staging) / config.css_name, css_text)
            return self.compiler.compile(config.manifest_path, staging, config.bundle_path)

    def _load_base_theme(self) -> Optional[str]:
        """
        Read the stock stylesheet from the pristine bundle.

        Returns:
            The stock CSS, or None to fall back to a CSS-only bundle
        """
        config = self.config
        backup = backup_path_for(config.bundle_path)
        candidates = [str(backup), config.bundle_path]
        base = next((c for c in candidates if os.path.isfile(c)), None)

        if base is None:
            self._note("No existing theme bundle to merge with")
            return None
        if not is_available(GRESOURCE):
            self._note(f"{GRESOURCE} not installed, cannot merge with {base}")
            return None

        try:
            entries = self.inspector.list_entries(base)
            if config.css_resource not in entries:
                self._note(f"{base} has no {config.css_resource}")
                return None
            css = self.inspector.extract_entry(base, config.css_resource)
        except ExternalToolError as e:
            self._note(f"Could not read {base}: {e}")
            return None

        logger.debug("Merging with %s (%d entries)", base, len(entries))
        self._base_bundle = base
        self._entries = entries
        return css.decode("utf-8", errors="replace")

    def _relative_entries(self) -> List[str]:
        prefix = self.config.resource_prefix + "/"
        names = [
            e[len(prefix):] for e in self._entries
            if e.startswith(prefix) and not e.endswith("/") and ".." not in Path(e).parts
        ]
        if self.config.css_name not in names:
            names.append(self.config.css_name)
        return names

    def _note(self, message: str) -> None:
        self.notes.append(CheckResult.warn(
            "Merge with stock theme", message + "; building a CSS-only bundle",
        ))

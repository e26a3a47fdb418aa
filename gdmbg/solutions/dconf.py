"""
dconf solution.

Copies the image to a world-readable pixmap, writes a key file into the
greeter's system dconf database and recompiles the database.
"""

from pathlib import Path
from typing import List

from ..errors import ExternalToolError
from ..models import CheckResult
from ..tools.runner import run_tool
from ..writer.templates import render_dconf_override, render_dconf_profile
from .base import ApplyResult, BackgroundSolution, FileChange


class DconfSolution(BackgroundSolution):
    """Overrides the greeter background through the gdm dconf database."""

    name = "dconf"
    description = "Use dconf to override GDM settings"

    def plan(self, image: Path) -> List[FileChange]:
        config = self.config
        style = config.background
        changes = [
            FileChange(path=config.pixmap_path, description="background pixmap", source=str(image)),
            FileChange(
                path=config.dconf_override_path,
                description="dconf override",
                content=render_dconf_override(
                    config.pixmap_path,
                    options=style.picture_options,
                    primary_color=style.primary_color,
                ),
            ),
        ]

        if not self._profile_ok():
            changes.append(FileChange(
                path=config.dconf_profile,
                description="dconf profile",
                content=render_dconf_profile(config.dconf_db_name),
            ))

        return changes

    def finish(self, image: Path, result: ApplyResult) -> List[CheckResult]:
        try:
            run_tool(["dconf", "update"], timeout=self.config.timeout)
        except ExternalToolError as e:
            return [CheckResult.fail("Update dconf database", str(e), "Run: sudo dconf update")]

        return [CheckResult.ok(
            "Update dconf database",
            "dconf update completed",
            "Restart GDM to see the change: sudo gdm-bg-tool restart-service",
        )]

    def _profile_ok(self) -> bool:
        """An existing profile that already lists the database is left alone."""
        profile = Path(self.config.dconf_profile)
        try:
            text = profile.read_text()
        except OSError:
            return False
        return f"system-db:{self.config.dconf_db_name}" in text.split()

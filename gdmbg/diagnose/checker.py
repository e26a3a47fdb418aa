"""
Diagnostic Checker

Main orchestrator for the read-only login-screen checks.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config.models import ToolConfig
from ..errors import GdmBgError
from ..models import CheckResult, DiagnosticReport
from .checks.bundle import validate_bundle
from .checks.css import check_css_references
from .checks.dconf import (
    check_gdm_user_db,
    check_local_overrides,
    check_schema_overrides,
    check_user_theme,
    validate_dconf,
)
from .checks.paths import PathInspector
from .checks.symlinks import SymlinkResolver
from .checks.system import validate_system

logger = logging.getLogger(__name__)

CheckFn = Callable[[], List[CheckResult]]


class DiagnosticChecker:
    """
    Orchestrates diagnostic checks.

    Runs a series of checks to find out:
    - Which GDM and dconf configuration files are present
    - Whether the installed image, CSS and bundle exist
    - Where the alternatives-managed theme link points
    - Which images the CSS and the bundle reference
    - What the greeter's system and gdm user dconf databases set
    - Whether GDM is running and which extensions may interfere

    Each category runs in isolation: an error inside one becomes a Fail
    result for that category and the remaining categories still run.
    """

    def __init__(self, config: ToolConfig):
        """
        Initialize the checker.

        Args:
            config: Tool configuration
        """
        self.config = config
        self.paths = PathInspector()
        self.symlinks = SymlinkResolver()

    def categories(self) -> Dict[str, CheckFn]:
        """Check categories in run order."""
        return {
            "gdm-config": lambda: self.paths.inspect(self.config.gdm_config_paths),
            "theme-files": lambda: self.paths.inspect(self.config.managed_paths()),
            "theme-locations": lambda: self.paths.inspect(self.config.theme_locations),
            "theme-link": lambda: [self.symlinks.resolve_first(self.config.theme_link)],
            "css": self._check_css_file,
            "bundle": lambda: validate_bundle(self.config),
            "dconf": lambda: validate_dconf(self.config, self.paths),
            "dconf-local": lambda: check_local_overrides(self.config, self.paths),
            "gdm-user-db": lambda: [check_gdm_user_db(self.config)],
            "schema-overrides": lambda: check_schema_overrides(self.config),
            "user-theme": lambda: [check_user_theme(self.config)],
            "system": lambda: validate_system(self.config),
        }

    def run_all(self) -> DiagnosticReport:
        """
        Run all diagnostic checks.

        Returns:
            DiagnosticReport with all check results
        """
        report = DiagnosticReport()
        for name, check in self.categories().items():
            report.extend(self._run_isolated(name, check))
        return report

    def run_check(self, check_name: str) -> Optional[List[CheckResult]]:
        """
        Run a specific category by name.

        Returns:
            Results, or None if the category does not exist
        """
        check = self.categories().get(check_name)
        if check is None:
            return None
        return self._run_isolated(check_name, check)

    def _run_isolated(self, name: str, check: CheckFn) -> List[CheckResult]:
        logger.debug("Running %s checks", name)
        try:
            return list(check())
        except PermissionError as e:
            return [CheckResult.warn(name, f"Permission denied: {e}", "Re-run with sudo")]
        except (GdmBgError, OSError) as e:
            logger.debug("%s checks aborted", name, exc_info=True)
            return [CheckResult.fail(name, f"Check aborted: {e}")]
        except ValueError as e:
            # undecodable or malformed file contents
            logger.debug("%s checks aborted", name, exc_info=True)
            return [CheckResult.fail(name, f"Check aborted: unreadable data: {e}")]

    def _check_css_file(self) -> List[CheckResult]:
        """Analyze the installed stylesheet on disk."""
        css_path = Path(self.config.css_path)
        if not css_path.is_file():
            return [CheckResult.warn("CSS background (file)", f"{css_path} not present, nothing to analyze")]

        text = css_path.read_text(errors="replace")
        return check_css_references(text, "file", inspector=self.paths)

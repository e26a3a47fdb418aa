"""
Shell theme solution.

Installs a small GNOME Shell theme that imports the stock stylesheet and
overrides the background, then selects it for the gdm user through the
user-theme extension.
"""

from pathlib import Path
from typing import List

from ..errors import ExternalToolError
from ..models import CheckResult
from ..tools.runner import as_user, run_tool
from ..writer.templates import render_css
from .base import ApplyResult, BackgroundSolution, FileChange

STOCK_STYLESHEET = "resource:///org/gnome/shell/theme/gnome-shell.css"


class ThemeSolution(BackgroundSolution):
    """Installs a custom shell theme for the greeter."""

    name = "theme"
    description = "Create a proper theme in the system themes directory"

    @property
    def shell_dir(self) -> Path:
        return Path(self.config.theme_dir) / "gnome-shell"

    def plan(self, image: Path) -> List[FileChange]:
        config = self.config
        style = config.background
        theme_image = self.shell_dir / config.image_name

        css = render_css({
            "image_path": str(theme_image),
            "selectors": style.selectors,
            "size": style.size,
            "position": style.position,
            "repeat": style.repeat,
            "import_url": STOCK_STYLESHEET,
        })

        return [
            FileChange(path=str(theme_image), description="theme image", source=str(image)),
            FileChange(path=str(self.shell_dir / "gnome-shell.css"), description="theme CSS", content=css),
        ]

    def finish(self, image: Path, result: ApplyResult) -> List[CheckResult]:
        config = self.config
        settings = [
            ("Enable user-theme extension",
             ["org.gnome.shell", "enabled-extensions", f"['{config.user_theme_extension}']"]),
            ("Select greeter theme",
             ["org.gnome.shell.extensions.user-theme", "name", config.theme_name]),
        ]

        checks = []
        for name, args in settings:
            argv = as_user(config.gdm_user, ["dbus-launch", "gsettings", "set", *args])
            try:
                run_tool(argv, timeout=config.timeout)
            except ExternalToolError as e:
                checks.append(CheckResult.fail(
                    name, str(e),
                    "Install gnome-shell-extensions to get the user-theme extension",
                ))
                return checks
            checks.append(CheckResult.ok(name, " ".join(args)))

        return checks

"""Ways of installing a custom GDM login background.

- gresource: recompile the GNOME Shell theme bundle (default)
- dconf: override the greeter's dconf database
- theme: install a shell theme and select it with the user-theme extension
"""

from ..config.models import Solution, ToolConfig
from .base import ApplyResult, BackgroundSolution, FileChange, check_image
from .dconf import DconfSolution
from .gresource import GresourceSolution
from .theme import ThemeSolution

SOLUTIONS = {
    Solution.GRESOURCE: GresourceSolution,
    Solution.DCONF: DconfSolution,
    Solution.THEME: ThemeSolution,
}


def get_solution(
    name: str,
    config: ToolConfig,
    dry_run: bool = False,
    minimal: bool = False,
) -> BackgroundSolution:
    """Get the solution implementation for a name."""
    try:
        solution = Solution(name.lower())
    except ValueError:
        supported = ", ".join(s.value for s in Solution)
        raise ValueError(f"Unknown solution: {name}. Supported: {supported}")

    if solution == Solution.GRESOURCE:
        return GresourceSolution(config, dry_run=dry_run, minimal=minimal)
    return SOLUTIONS[solution](config, dry_run=dry_run)


__all__ = [
    "ApplyResult",
    "BackgroundSolution",
    "FileChange",
    "check_image",
    "DconfSolution",
    "GresourceSolution",
    "ThemeSolution",
    "SOLUTIONS",
    "get_solution",
]

"""
System State Validation

Process, service and shell-extension checks, system-wide and per user.
"""

import re
from pathlib import Path
from typing import List

from ...config.models import ToolConfig
from ...errors import ExternalToolError
from ...models import CheckResult
from ...tools.runner import run_tool
from ...tools.service import ServiceController

EXTENSION_PATTERN = re.compile(r"(theme|user|gdm)", re.IGNORECASE)


def validate_system(config: ToolConfig) -> List[CheckResult]:
    """Run the process, service and extension checks."""
    results = [
        check_processes(config),
        ServiceController(timeout=config.service_timeout).status(config.service_names),
        check_extensions(config),
    ]
    results.extend(check_user_extensions(config))
    return results


def check_processes(config: ToolConfig) -> CheckResult:
    """Look for running GDM processes."""
    name = "GDM processes"
    try:
        result = run_tool(["pgrep", "-a", "gdm"], timeout=config.timeout, check=False)
    except ExternalToolError as e:
        return CheckResult.warn(name, f"Could not list processes: {e}")

    processes = [line for line in result.stdout.splitlines() if line.strip()]
    if not processes:
        return CheckResult.warn(name, "No GDM processes found")

    return CheckResult.ok(name, f"{len(processes)} running", *processes[:5])


def check_extensions(config: ToolConfig) -> CheckResult:
    """List system shell extensions that can change the greeter theme."""
    name = "Shell extensions"
    ext_dir = Path(config.extensions_dir)

    if not ext_dir.is_dir():
        return CheckResult.warn(name, f"{ext_dir} does not exist")

    try:
        found = sorted(p.name for p in ext_dir.iterdir() if EXTENSION_PATTERN.search(p.name))
    except PermissionError:
        return CheckResult.warn(name, f"Permission denied: {ext_dir}")

    if not found:
        return CheckResult.ok(name, "None found")

    detail = ", ".join(found)
    if config.user_theme_extension in found:
        return CheckResult.ok(name, detail)
    return CheckResult.ok(name, detail, f"{config.user_theme_extension} is needed for the theme solution")


def check_user_extensions(config: ToolConfig) -> List[CheckResult]:
    """List theme-related extensions each local user has installed."""
    home_root = Path(config.home_root)
    if not home_root.is_dir():
        return []

    try:
        homes = sorted(p for p in home_root.iterdir() if p.is_dir())
    except PermissionError:
        return [CheckResult.warn("User extensions", f"Permission denied: {home_root}")]

    results = []
    for home in homes:
        ext_dir = home / config.user_extensions_subdir
        name = f"Extensions for user {home.name}"
        try:
            if not ext_dir.is_dir():
                continue
            found = sorted(p.name for p in ext_dir.iterdir() if EXTENSION_PATTERN.search(p.name))
        except PermissionError:
            results.append(CheckResult.warn(name, f"Permission denied: {ext_dir}", "Re-run with sudo"))
            continue
        results.append(CheckResult.ok(name, ", ".join(found) or "None found"))

    return results

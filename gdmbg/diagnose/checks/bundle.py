"""
Theme Bundle Validation

Looks inside the compiled theme bundle GDM actually loads.
"""

import os
from typing import List, Optional

from ...config.models import ToolConfig
from ...errors import ExternalToolError
from ...models import CheckResult
from ...tools.gresource import GRESOURCE, ResourceBundleInspector
from ...tools.runner import is_available
from .css import check_css_references


def active_bundle(config: ToolConfig) -> str:
    """The bundle GDM loads: the theme link's target if there is one, else the configured bundle."""
    for candidate in config.theme_link.candidates:
        if os.path.lexists(candidate):
            return os.path.realpath(candidate)
    return os.path.realpath(config.bundle_path)


def validate_bundle(
    config: ToolConfig,
    inspector: Optional[ResourceBundleInspector] = None,
) -> List[CheckResult]:
    """
    List the active bundle, confirm it carries the shell stylesheet and
    check the stylesheet's background references.

    Args:
        config: Tool configuration
        inspector: Bundle inspector (created from config if omitted)

    Returns:
        List of check results
    """
    inspector = inspector or ResourceBundleInspector(timeout=config.timeout)
    bundle = active_bundle(config)

    if not os.path.isfile(bundle):
        return [CheckResult.fail("Theme bundle contents", f"No bundle at {bundle}")]

    if not is_available(GRESOURCE):
        return [CheckResult.warn(
            "Theme bundle contents",
            "gresource command not available for inspection",
            "Install it with: sudo apt install libglib2.0-bin",
        )]

    if not os.access(bundle, os.R_OK):
        return [CheckResult.warn("Theme bundle contents", f"Permission denied reading {bundle}",
                                 "Re-run with sudo")]

    results = []
    try:
        entries = inspector.list_entries(bundle)
    except ExternalToolError as e:
        return [CheckResult.fail("Theme bundle contents", str(e))]

    results.append(CheckResult.ok("Theme bundle contents", f"{bundle}: {len(entries)} resources"))

    if config.css_resource not in entries:
        results.append(CheckResult.fail(
            "Bundle stylesheet",
            f"{config.css_resource} not present in {bundle}",
        ))
        return results

    try:
        css = inspector.extract_entry(bundle, config.css_resource)
    except ExternalToolError as e:
        results.append(CheckResult.fail("Bundle stylesheet", f"Could not extract CSS: {e}"))
        return results

    results.append(CheckResult.ok("Bundle stylesheet", f"{config.css_resource} ({len(css)} bytes)"))
    results.extend(check_css_references(css.decode("utf-8", errors="replace"), "bundle"))
    return results

"""
Diagnostic Check Implementations

Individual check modules for different areas of the login-screen setup.
"""

from .paths import PathInspector
from .symlinks import SymlinkResolver
from .css import CssAnalyzer, CssRule, check_css_references
from .bundle import validate_bundle
from .dconf import validate_dconf, check_schema_overrides, check_user_theme
from .system import validate_system

__all__ = [
    "PathInspector",
    "SymlinkResolver",
    "CssAnalyzer",
    "CssRule",
    "check_css_references",
    "validate_bundle",
    "validate_dconf",
    "check_schema_overrides",
    "check_user_theme",
    "validate_system",
]

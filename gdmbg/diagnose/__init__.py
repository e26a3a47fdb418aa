"""
Diagnostic Module

Read-only inspection of the GDM login-screen background setup.
"""

from .checker import DiagnosticChecker
from .checks import CssAnalyzer, CssRule, PathInspector, SymlinkResolver

__all__ = [
    "DiagnosticChecker",
    "CssAnalyzer",
    "CssRule",
    "PathInspector",
    "SymlinkResolver",
]

"""
External Tool Wrappers

Subprocess front-ends for gresource, glib-compile-resources and systemctl.
"""

from .runner import run_tool, which, is_available, as_user
from .gresource import ResourceBundleInspector
from .compiler import BackupRecord, BundleCompiler
from .service import ServiceController

__all__ = [
    "run_tool",
    "which",
    "is_available",
    "as_user",
    "ResourceBundleInspector",
    "BackupRecord",
    "BundleCompiler",
    "ServiceController",
]

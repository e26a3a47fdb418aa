"""Configuration handling for gdm-bg-tool."""

from .models import (
    BackgroundStyle,
    PathSpec,
    PathType,
    Solution,
    SymlinkSpec,
    ToolConfig,
)
from .loader import ConfigLoader

__all__ = [
    "BackgroundStyle",
    "PathSpec",
    "PathType",
    "Solution",
    "SymlinkSpec",
    "ToolConfig",
    "ConfigLoader",
]

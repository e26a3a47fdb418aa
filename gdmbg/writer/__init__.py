"""Rendering and atomic writing of GDM background configuration files."""

from .templates import (
    render_css,
    render_manifest,
    render_dconf_override,
    render_dconf_profile,
)
from .files import write_atomic, copy_atomic

__all__ = [
    "render_css",
    "render_manifest",
    "render_dconf_override",
    "render_dconf_profile",
    "write_atomic",
    "copy_atomic",
]

"""
Pydantic models for tool configuration.

Every path, service name and theme constant the tool touches lives here, so
older and newer Ubuntu/GNOME releases can be handled by editing a YAML file
instead of the code.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PathType(str, Enum):
    """Kind of filesystem object a path is expected to be."""
    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"


class Solution(str, Enum):
    """Ways of getting a custom background onto the login screen."""
    GRESOURCE = "gresource"
    DCONF = "dconf"
    THEME = "theme"


class PathSpec(BaseModel):
    """A path the diagnostics expect to find."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Absolute filesystem path")
    expected_type: PathType = Field(default=PathType.FILE, description="Expected object type")
    required: bool = Field(default=True, description="Missing is a failure rather than a warning")
    label: Optional[str] = Field(None, description="Human-readable name for reports")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"Path must be absolute: {v}")
        return v

    @property
    def display_name(self) -> str:
        return self.label or self.path


class SymlinkSpec(BaseModel):
    """Candidate locations of an alternatives-managed link and where it should point."""

    model_config = ConfigDict(frozen=True)

    candidates: List[str] = Field(..., min_length=1, description="Link paths, checked in order")
    expected_target: str = Field(..., description="Path the link should resolve to")
    label: str = Field(default="GDM theme link")


class BackgroundStyle(BaseModel):
    """CSS background properties for the generated selector blocks."""

    model_config = ConfigDict(frozen=True)

    selectors: List[str] = Field(
        default_factory=lambda: [
            "#lockDialogGroup",
            ".login-dialog",
            ".unlock-dialog",
            ".screen-shield-background",
        ],
        min_length=1,
    )
    size: str = "cover"
    position: str = "center center"
    repeat: str = "no-repeat"
    picture_options: str = Field(default="zoom", description="dconf picture-options value")
    primary_color: str = "#000000"

    @field_validator("primary_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not v.startswith("#") or len(v) not in (4, 7):
            raise ValueError(f"Invalid colour: {v}")
        return v


class ToolConfig(BaseModel):
    """Complete configuration for one run of the tool."""

    model_config = ConfigDict(frozen=True)

    # gresource solution
    shell_dir: str = "/usr/share/gnome-shell"
    image_name: str = "loginbg.png"
    css_name: str = "gnome-shell.css"
    manifest_name: str = "gnome-shell-theme.gresource.xml"
    bundle_name: str = "gnome-shell-theme.gresource"
    resource_prefix: str = "/org/gnome/shell/theme"
    theme_link: SymlinkSpec = Field(
        default_factory=lambda: SymlinkSpec(
            candidates=[
                "/usr/share/gnome-shell/gdm-theme.gresource",
                "/usr/share/gnome-shell/gdm3-theme.gresource",
            ],
            expected_target="/usr/share/gnome-shell/gnome-shell-theme.gresource",
        )
    )

    # dconf solution
    dconf_db_dir: str = "/etc/dconf/db/gdm.d"
    dconf_override_name: str = "01-background"
    dconf_profile: str = "/etc/dconf/profile/gdm"
    pixmap_path: str = "/usr/share/pixmaps/gdm-background.png"
    dconf_extra_dirs: List[str] = Field(
        default_factory=lambda: ["/etc/dconf/db/local.d"],
        description="Other system key-file directories scanned for background keys",
    )
    gdm_user_db: str = "/var/lib/gdm3/.config/dconf/user"

    # theme solution
    themes_dir: str = "/usr/share/themes"
    theme_name: str = "custom-gdm-theme"
    user_theme_extension: str = "user-theme@gnome-shell-extensions.gnome.org"

    gdm_user: str = "gdm"
    service_names: List[str] = Field(default_factory=lambda: ["gdm3", "gdm"], min_length=1)
    extensions_dir: str = "/usr/share/gnome-shell/extensions"
    home_root: str = Field(default="/home", description="Parent of user home directories")
    user_extensions_subdir: str = ".local/share/gnome-shell/extensions"
    schema_overrides: List[str] = Field(
        default_factory=lambda: [
            "/usr/share/glib-2.0/schemas/10_ubuntu-settings.gschema.override",
            "/usr/share/glib-2.0/schemas/ubuntu.gschema.override",
        ]
    )
    gdm_config_paths: List[PathSpec] = Field(default_factory=list)
    theme_locations: List[PathSpec] = Field(default_factory=list)

    background: BackgroundStyle = Field(default_factory=BackgroundStyle)

    timeout: float = Field(default=5.0, gt=0, description="Seconds allowed per external command")
    compile_timeout: float = Field(default=30.0, gt=0)
    service_timeout: float = Field(default=15.0, gt=0)

    @field_validator("resource_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("resource_prefix must start with '/'")
        return v.rstrip("/")

    @property
    def image_path(self) -> str:
        return str(Path(self.shell_dir) / self.image_name)

    @property
    def css_path(self) -> str:
        return str(Path(self.shell_dir) / self.css_name)

    @property
    def manifest_path(self) -> str:
        return str(Path(self.shell_dir) / self.manifest_name)

    @property
    def bundle_path(self) -> str:
        return str(Path(self.shell_dir) / self.bundle_name)

    @property
    def backup_path(self) -> str:
        return self.bundle_path + ".backup"

    @property
    def css_resource(self) -> str:
        return f"{self.resource_prefix}/{self.css_name}"

    @property
    def dconf_override_path(self) -> str:
        return str(Path(self.dconf_db_dir) / self.dconf_override_name)

    @property
    def dconf_db_name(self) -> str:
        return Path(self.dconf_db_dir).name.rsplit(".", 1)[0]

    @property
    def theme_dir(self) -> str:
        return str(Path(self.themes_dir) / self.theme_name)

    def managed_paths(self) -> List[PathSpec]:
        """Files the gresource solution installs and GDM reads."""
        return [
            PathSpec(path=self.image_path, expected_type=PathType.FILE, label="Background image"),
            PathSpec(path=self.css_path, expected_type=PathType.FILE, label="Theme CSS"),
            PathSpec(path=self.bundle_path, expected_type=PathType.FILE, label="Compiled theme bundle"),
            PathSpec(path=self.manifest_path, expected_type=PathType.FILE, required=False,
                     label="Resource manifest"),
        ]

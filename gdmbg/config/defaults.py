"""
Default configuration values.

Paths match a stock Ubuntu install with GDM 3 and the Yaru theme.
"""

import os
import pwd
from typing import Any, Dict, List, Optional


def get_default_gdm_config_paths() -> List[Dict[str, Any]]:
    """GDM and dconf files that influence the greeter."""
    return [
        {"path": "/etc/gdm3/greeter.dconf-defaults", "expected_type": "file", "required": False},
        {"path": "/etc/gdm3/custom.conf", "expected_type": "file", "required": False},
        {"path": "/etc/dconf/db/gdm.d", "expected_type": "dir", "required": False},
        {"path": "/etc/dconf/profile/gdm", "expected_type": "file", "required": False},
        {"path": "/var/lib/gdm3/.config/dconf/user", "expected_type": "file", "required": False},
    ]


def get_default_theme_locations(home: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Places GNOME Shell themes are commonly installed.

    Args:
        home: Home directory whose personal theme folders are included
            (defaults to the invoking user's)
    """
    locations = [
        {"path": "/usr/share/gnome-shell/theme/Yaru/gnome-shell.css", "expected_type": "file",
         "required": False},
        {"path": "/usr/share/themes/Yaru/gnome-shell/gnome-shell.css", "expected_type": "file",
         "required": False},
        {"path": "/usr/share/themes", "expected_type": "dir", "required": False},
        {"path": "/usr/local/share/themes", "expected_type": "dir", "required": False},
    ]

    home = home or invoking_user_home()
    if home and home.startswith("/") and home != "/":
        home = home.rstrip("/")
        for subdir in (".themes", ".local/share/themes"):
            locations.append({"path": f"{home}/{subdir}", "expected_type": "dir", "required": False})

    return locations


def invoking_user_home() -> Optional[str]:
    """Home of the user who ran the tool, looking through sudo."""
    user = os.environ.get("SUDO_USER") or os.environ.get("USER")
    if not user:
        return None
    try:
        return pwd.getpwnam(user).pw_dir
    except KeyError:
        return None


def get_default_config() -> Dict[str, Any]:
    """Full default configuration, in the shape written by ``init-config``."""
    from .models import ToolConfig

    config = ToolConfig(
        gdm_config_paths=get_default_gdm_config_paths(),
        theme_locations=get_default_theme_locations(),
    )
    return config.model_dump(mode="json")

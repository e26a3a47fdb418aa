import subprocess
from pathlib import Path

from gdmbg.config import ToolConfig

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def write_png(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(PNG_HEADER + b"\x00" * 32)
    return path


def completed(argv, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(list(argv), returncode, stdout, stderr)


def make_config(root: Path, **overrides) -> ToolConfig:
    """A configuration whose every path lives under ``root``."""
    shell = root / "gnome-shell"
    shell.mkdir(parents=True, exist_ok=True)
    data = dict(
        shell_dir=str(shell),
        theme_link={
            "candidates": [str(shell / "gdm-theme.gresource")],
            "expected_target": str(shell / "gnome-shell-theme.gresource"),
        },
        dconf_db_dir=str(root / "dconf" / "db" / "gdm.d"),
        dconf_profile=str(root / "dconf" / "profile" / "gdm"),
        pixmap_path=str(root / "pixmaps" / "gdm-background.png"),
        dconf_extra_dirs=[str(root / "dconf" / "db" / "local.d")],
        gdm_user_db=str(root / "gdm3" / ".config" / "dconf" / "user"),
        home_root=str(root / "home"),
        themes_dir=str(root / "themes"),
        extensions_dir=str(root / "extensions"),
        schema_overrides=[],
        gdm_config_paths=[],
        theme_locations=[],
    )
    data.update(overrides)
    return ToolConfig(**data)


def fake_compiler(calls=None, returncode=0, stderr=""):
    """Stand-in for run_tool that behaves like glib-compile-resources."""
    def run(argv, timeout=None, check=True, text=True):
        if calls is not None:
            calls.append(list(argv))
        if returncode != 0:
            return completed(argv, returncode, "", stderr)
        target = next(a for a in argv if a.startswith("--target="))[len("--target="):]
        Path(target).write_bytes(b"compiled bundle")
        return completed(argv)
    return run

"""
dconf and gsettings Validation

Checks the system dconf databases the greeter reads, the gdm user's own
database, Ubuntu's schema overrides and the user-theme setting of the gdm
user.
"""

import configparser
import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

from ...config.models import PathSpec, PathType, ToolConfig
from ...errors import ExternalToolError
from ...models import CheckResult
from ...tools.runner import as_user, is_available, run_tool
from .css import file_uri_path
from .paths import PathInspector

BACKGROUND_KEYS = ("picture-uri", "picture-uri-dark")
OVERRIDE_PATTERN = re.compile(r"(picture-uri|background|theme)", re.IGNORECASE)


def validate_dconf(config: ToolConfig, inspector: Optional[PathInspector] = None) -> List[CheckResult]:
    """
    Validate the greeter's dconf database.

    Returns:
        List of check results
    """
    inspector = inspector or PathInspector()
    results = []

    if not is_available("dconf"):
        results.append(CheckResult.warn(
            "dconf command",
            "dconf command not available",
            "Install it with: sudo apt install dconf-cli",
        ))

    db_dir = Path(config.dconf_db_dir)
    if not db_dir.is_dir():
        results.append(CheckResult.warn("dconf background override", f"{db_dir} does not exist"))
        return results

    keyfiles, scanned = scan_overrides(db_dir, inspector)
    results.extend(scanned)
    if keyfiles is None:
        return results

    results.append(_check_profile(config))
    results.append(_check_database_fresh(db_dir, keyfiles))
    return results


def check_local_overrides(
    config: ToolConfig,
    inspector: Optional[PathInspector] = None,
) -> List[CheckResult]:
    """Scan the other system key-file directories (``local.d``) for background keys."""
    inspector = inspector or PathInspector()
    results = []

    for extra in config.dconf_extra_dirs:
        db_dir = Path(extra)
        if not db_dir.is_dir():
            continue
        _, scanned = scan_overrides(db_dir, inspector)
        results.extend(scanned)

    return results


def scan_overrides(
    db_dir: Path,
    inspector: PathInspector,
) -> Tuple[Optional[List[Path]], List[CheckResult]]:
    """
    Check every background image named in a key-file directory.

    Returns:
        The key files found (None if the directory is unreadable) and the results
    """
    label = db_dir.name
    results = []

    try:
        keyfiles = sorted(p for p in db_dir.iterdir() if p.is_file())
    except PermissionError:
        results.append(CheckResult.warn(f"dconf background override ({label})",
                                        f"Permission denied: {db_dir}", "Re-run with sudo"))
        return None, results

    uris = []
    for keyfile in keyfiles:
        try:
            uris.extend((keyfile, uri) for uri in read_background_uris(keyfile))
        except PermissionError:
            results.append(CheckResult.warn(f"dconf keyfile {keyfile.name}", "Permission denied",
                                            "Re-run with sudo"))
        except configparser.Error as e:
            results.append(CheckResult.fail(f"dconf keyfile {keyfile.name}", f"Unparseable: {e}"))

    if not uris:
        results.append(CheckResult.warn(
            f"dconf background override ({label})",
            f"No picture-uri set in {db_dir}",
        ))
        return keyfiles, results

    for keyfile, uri in uris:
        if not uri.startswith("file://"):
            results.append(CheckResult.warn(f"dconf {keyfile.name}", f"Non-file URI: {uri}"))
            continue
        results.append(inspector.inspect_one(PathSpec(
            path=file_uri_path(uri),
            expected_type=PathType.FILE,
            label=f"dconf image ({keyfile.name})",
        )))

    return keyfiles, results


def read_background_uris(keyfile: Path) -> List[str]:
    """Collect picture-uri values from a dconf key file."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    with open(keyfile, "r", errors="replace") as f:
        parser.read_file(f)

    uris = []
    for section in parser.sections():
        for key in BACKGROUND_KEYS:
            value = parser.get(section, key, fallback=None)
            if value:
                uris.append(value.strip().strip("'\""))
    return uris


def _check_profile(config: ToolConfig) -> CheckResult:
    profile = Path(config.dconf_profile)
    expected = f"system-db:{config.dconf_db_name}"
    try:
        text = profile.read_text(errors="replace")
    except FileNotFoundError:
        return CheckResult.fail("dconf profile", f"{profile} not found",
                                "The greeter ignores the database without a profile")
    except PermissionError:
        return CheckResult.warn("dconf profile", f"Permission denied: {profile}")

    if expected not in text.split():
        return CheckResult.fail("dconf profile", f"{profile} does not list {expected}")
    return CheckResult.ok("dconf profile", f"{profile} lists {expected}")


def _check_database_fresh(db_dir: Path, keyfiles: List[Path]) -> CheckResult:
    """The compiled database must be newer than its key files."""
    compiled = db_dir.with_suffix("")
    if not compiled.exists():
        return CheckResult.fail("dconf database", f"{compiled} has not been compiled",
                                "Run: sudo dconf update")

    newest = max((k.stat().st_mtime for k in keyfiles), default=0)
    if compiled.stat().st_mtime < newest:
        return CheckResult.warn("dconf database", f"{compiled} is older than its key files",
                                "Run: sudo dconf update")
    return CheckResult.ok("dconf database", f"{compiled} is up to date")


def check_schema_overrides(config: ToolConfig) -> List[CheckResult]:
    """Report background and theme keys in Ubuntu's gschema overrides."""
    results = []

    for override in config.schema_overrides:
        path = Path(override)
        if not path.is_file():
            continue
        try:
            lines = path.read_text(errors="replace").splitlines()
        except PermissionError:
            results.append(CheckResult.warn(f"Schema override {path.name}", "Permission denied"))
            continue

        matches = [line.strip() for line in lines if OVERRIDE_PATTERN.search(line)]
        if matches:
            results.append(CheckResult.ok(
                f"Schema override {path.name}",
                f"{len(matches)} theme/background settings",
                *matches[:5],
            ))
        else:
            results.append(CheckResult.ok(f"Schema override {path.name}",
                                          "No theme-related settings"))

    return results


def check_user_theme(config: ToolConfig) -> CheckResult:
    """Read the user-theme extension setting as the gdm user."""
    name = "GDM user theme"

    if os.geteuid() != 0:
        return CheckResult.warn(name, "Skipped (requires root)", "Re-run with sudo")

    argv = as_user(config.gdm_user, [
        "gsettings", "get", "org.gnome.shell.extensions.user-theme", "name",
    ])
    try:
        result = run_tool(argv, timeout=config.timeout)
    except ExternalToolError as e:
        return CheckResult.warn(name, f"User theme extension not accessible: {e}")

    return CheckResult.ok(name, f"Current theme: {result.stdout.strip() or 'none'}")


def check_gdm_user_db(config: ToolConfig) -> CheckResult:
    """
    Dump the gdm user's own dconf database.

    The greeter profile lists ``user-db:user`` before the system database,
    so a background stored here wins over the system override.
    """
    name = "GDM user dconf database"
    user_db = Path(config.gdm_user_db)

    if not os.path.lexists(user_db):
        return CheckResult.ok(name, f"No user database at {user_db}")
    if os.geteuid() != 0:
        return CheckResult.warn(name, "Skipped (requires root)", "Re-run with sudo")
    if not is_available("dconf"):
        return CheckResult.warn(name, "dconf command not available")

    try:
        result = run_tool(as_user(config.gdm_user, ["dconf", "dump", "/"]), timeout=config.timeout)
    except ExternalToolError as e:
        return CheckResult.warn(name, f"Could not read GDM dconf settings: {e}")

    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    uris = [
        line.split("=", 1)[1].strip().strip("'\"")
        for line in lines
        if line.split("=", 1)[0] in BACKGROUND_KEYS
    ]
    if uris:
        return CheckResult.warn(
            name,
            f"{user_db} sets {', '.join(uris)}",
            "This value takes precedence over the system database",
        )
    return CheckResult.ok(name, f"{len(lines)} lines, no background keys", *lines[:20])

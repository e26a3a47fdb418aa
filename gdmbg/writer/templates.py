"""
Configuration file rendering.

Renders the login-screen CSS, the GResource XML manifest and the dconf
override key file. These are pure functions: they return text and never
touch the filesystem, so callers decide where and how the output is written.

Templates use ``{{placeholder}}`` substitution.
"""

import re
from typing import Any, Dict, Iterable, Mapping, Sequence
from xml.sax.saxutils import escape, quoteattr

# Pattern for matching {{placeholder}} syntax
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")

DEFAULT_PREFIX = "/org/gnome/shell/theme"

DEFAULT_SELECTORS = (
    "#lockDialogGroup",
    ".login-dialog",
    ".unlock-dialog",
    ".screen-shield-background",
)

CSS_HEADER = "/* GDM login background, generated by gdm-bg-tool */\n"

CSS_IMPORT = '@import url("{{import_url}}");\n'

CSS_BLOCK = """\
{{selector}} {
    background: url("file://{{image_path}}") {{repeat}} {{position}};
    background-size: {{size}};
}
"""

MANIFEST_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<gresources>
  <gresource prefix={{prefix}}>
{{files}}  </gresource>
</gresources>
"""

DCONF_SECTION = """\
[{{schema}}]
picture-uri='file://{{image_path}}'
{{extra_keys}}picture-options='{{options}}'
primary-color='{{primary_color}}'
"""

DCONF_PROFILE = """\
user-db:user
system-db:{{db_name}}
file-db:/usr/share/gdm/greeter-dconf-defaults
"""


def substitute(template: str, values: Mapping[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders; unknown names are left untouched."""
    def replace_match(match):
        key = match.group(1)
        if key in values:
            return str(values[key])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace_match, template)


def _css_string(value: str) -> str:
    """Escape a value for use inside a double-quoted CSS string."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\a ")


def render_css(template_vars: Mapping[str, Any]) -> str:
    """
    Render the login-screen stylesheet.

    Args:
        template_vars: ``image_path`` (required, absolute) plus optional
            ``selectors``, ``size``, ``position``, ``repeat`` and ``import_url``

    Returns:
        CSS text with one block per selector, each pointing at the image
    """
    image_path = template_vars.get("image_path")
    if not image_path:
        raise ValueError("image_path is required")
    image_path = str(image_path)
    if not image_path.startswith("/"):
        raise ValueError(f"image_path must be absolute: {image_path}")

    selectors: Sequence[str] = template_vars.get("selectors") or DEFAULT_SELECTORS
    values: Dict[str, Any] = {
        "image_path": _css_string(image_path),
        "size": template_vars.get("size", "cover"),
        "position": template_vars.get("position", "center center"),
        "repeat": template_vars.get("repeat", "no-repeat"),
    }

    parts = [CSS_HEADER]
    if template_vars.get("import_url"):
        parts.append(substitute(CSS_IMPORT, {"import_url": _css_string(template_vars["import_url"])}))
    for selector in selectors:
        parts.append("\n")
        parts.append(substitute(CSS_BLOCK, dict(values, selector=selector)))

    return "".join(parts)


def render_manifest(resources: Iterable[str], prefix: str = DEFAULT_PREFIX) -> str:
    """
    Render a GResource XML manifest.

    Args:
        resources: File names relative to the source directory, in order
        prefix: Resource path prefix the files are published under
    """
    resources = list(resources)
    if not resources:
        raise ValueError("A manifest needs at least one resource")

    files = "".join(f"    <file>{escape(name)}</file>\n" for name in resources)
    return substitute(MANIFEST_TEMPLATE, {"prefix": quoteattr(prefix), "files": files})


def render_dconf_override(
    image_path: str,
    options: str = "zoom",
    primary_color: str = "#000000",
) -> str:
    """
    Render a dconf key file setting the desktop and screensaver backgrounds.

    The background schema also gets ``picture-uri-dark`` so GNOME 42 and
    later use the same image in dark mode.
    """
    if not image_path.startswith("/"):
        raise ValueError(f"image_path must be absolute: {image_path}")

    quoted = image_path.replace("\\", "\\\\").replace("'", "\\'")
    sections = [
        ("org/gnome/desktop/background", f"picture-uri-dark='file://{quoted}'\n"),
        ("org/gnome/desktop/screensaver", ""),
    ]
    return "\n".join(
        substitute(DCONF_SECTION, {
            "schema": schema,
            "image_path": quoted,
            "extra_keys": extra,
            "options": options,
            "primary_color": primary_color,
        })
        for schema, extra in sections
    )


def render_dconf_profile(db_name: str = "gdm") -> str:
    """Render the dconf profile that makes the greeter read the ``db_name`` database."""
    return substitute(DCONF_PROFILE, {"db_name": db_name})

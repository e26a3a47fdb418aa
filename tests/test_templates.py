import configparser
import re
import unittest

from gdmbg.diagnose.checks.css import CssAnalyzer
from gdmbg.writer.templates import (
    DEFAULT_SELECTORS,
    render_css,
    render_dconf_override,
    render_dconf_profile,
    render_manifest,
)

BLOCK = re.compile(r"([^{}]+)\{([^{}]*)\}")


class RenderCssTests(unittest.TestCase):
    def test_every_block_points_at_the_image(self) -> None:
        css = render_css({"image_path": "/a/b.png"})
        blocks = BLOCK.findall(css)
        self.assertEqual(len(DEFAULT_SELECTORS), len(blocks))
        for selector, body in blocks:
            self.assertIn("file:///a/b.png", body, selector)

    def test_custom_selectors_and_style(self) -> None:
        css = render_css({
            "image_path": "/usr/share/gnome-shell/loginbg.png",
            "selectors": ["#lockDialogGroup"],
            "size": "contain",
            "position": "top left",
            "repeat": "repeat",
        })
        self.assertIn("#lockDialogGroup {", css)
        self.assertIn("background-size: contain;", css)
        self.assertIn('url("file:///usr/share/gnome-shell/loginbg.png") repeat top left;', css)
        self.assertNotIn(".login-dialog", css)

    def test_rendered_css_is_readable_by_the_analyzer(self) -> None:
        css = render_css({"image_path": "/a/b.png", "selectors": ["#lockDialogGroup"]})
        [rule] = CssAnalyzer().analyze(css)
        self.assertEqual("file:///a/b.png", rule.background_url)
        self.assertEqual(("#lockDialogGroup",), rule.selectors)

    def test_import_line_comes_first(self) -> None:
        css = render_css({
            "image_path": "/a/b.png",
            "import_url": "resource:///org/gnome/shell/theme/gnome-shell.css",
        })
        first_rule = css.index("{")
        self.assertLess(css.index('@import url("resource:///org/gnome/shell/theme/gnome-shell.css");'),
                        first_rule)

    def test_quotes_in_path_are_escaped(self) -> None:
        css = render_css({"image_path": '/tmp/a"b.png', "selectors": ["#x"]})
        self.assertIn('file:///tmp/a\\"b.png', css)

    def test_image_path_is_required_and_absolute(self) -> None:
        with self.assertRaises(ValueError):
            render_css({})
        with self.assertRaises(ValueError):
            render_css({"image_path": "loginbg.png"})


class RenderManifestTests(unittest.TestCase):
    def test_matches_gnome_manifest_layout(self) -> None:
        expected = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            "<gresources>\n"
            '  <gresource prefix="/org/gnome/shell/theme">\n'
            "    <file>gnome-shell.css</file>\n"
            "  </gresource>\n"
            "</gresources>\n"
        )
        self.assertEqual(expected, render_manifest(["gnome-shell.css"]))

    def test_file_names_are_escaped_and_ordered(self) -> None:
        xml = render_manifest(["b.css", "a&b.svg"], prefix="/org/example")
        self.assertLess(xml.index("b.css"), xml.index("a&amp;b.svg"))
        self.assertIn('prefix="/org/example"', xml)

    def test_empty_manifest_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            render_manifest([])


class RenderDconfTests(unittest.TestCase):
    def test_override_sets_background_and_screensaver(self) -> None:
        text = render_dconf_override("/usr/share/pixmaps/gdm-background.png")
        parser = configparser.ConfigParser(interpolation=None)
        parser.read_string(text)

        self.assertEqual(
            ["org/gnome/desktop/background", "org/gnome/desktop/screensaver"],
            parser.sections(),
        )
        for section in parser.sections():
            self.assertEqual(
                "'file:///usr/share/pixmaps/gdm-background.png'",
                parser.get(section, "picture-uri"),
            )
            self.assertEqual("'zoom'", parser.get(section, "picture-options"))
            self.assertEqual("'#000000'", parser.get(section, "primary-color"))
        self.assertTrue(parser.has_option("org/gnome/desktop/background", "picture-uri-dark"))

    def test_override_options_are_configurable(self) -> None:
        text = render_dconf_override("/bg.jpg", options="scaled", primary_color="#112233")
        self.assertIn("picture-options='scaled'", text)
        self.assertIn("primary-color='#112233'", text)

    def test_profile_names_the_system_database(self) -> None:
        self.assertIn("system-db:gdm\n", render_dconf_profile("gdm"))


if __name__ == "__main__":
    unittest.main()

import os
import time
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock
from urllib.parse import quote

from gdmbg.diagnose import DiagnosticChecker
from gdmbg.diagnose.checks.bundle import active_bundle, validate_bundle
from gdmbg.diagnose.checks.dconf import (
    check_gdm_user_db,
    check_local_overrides,
    check_schema_overrides,
    check_user_theme,
    read_background_uris,
    validate_dconf,
)
from gdmbg.diagnose.checks.system import (
    check_extensions,
    check_processes,
    check_user_extensions,
    validate_system,
)
from gdmbg.errors import ExternalToolError, ToolNotFoundError
from gdmbg.models import CheckResult, CheckStatus

from tests.helpers import completed, make_config, write_png


class CheckTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.root = Path(os.path.realpath(self._tmp.name))
        self.config = make_config(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def by_name(self, results, name):
        return next(r for r in results if r.name == name)


class DconfCheckTests(CheckTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.image = write_png(self.root / "pixmaps" / "gdm-background.png")
        self.db_dir = Path(self.config.dconf_db_dir)
        self.db_dir.mkdir(parents=True)
        self.keyfile = self.db_dir / "01-background"
        self.keyfile.write_text(
            "[org/gnome/desktop/background]\n"
            f"picture-uri='file://{self.image}'\n"
            "picture-options='zoom'\n"
        )
        profile = Path(self.config.dconf_profile)
        profile.parent.mkdir(parents=True)
        profile.write_text("user-db:user\nsystem-db:gdm\n")
        self.compiled = self.db_dir.with_suffix("")
        self.compiled.write_bytes(b"GVariant")
        later = time.time() + 10
        os.utime(self.compiled, (later, later))

    def validate(self):
        with mock.patch("gdmbg.diagnose.checks.dconf.is_available", return_value=True):
            return validate_dconf(self.config)

    def test_complete_override_passes(self) -> None:
        results = self.validate()
        self.assertEqual(3, len(results))
        self.assertTrue(all(r.status == CheckStatus.PASS for r in results), results)
        self.assertEqual("dconf image (01-background)", results[0].name)

    def test_missing_image_fails(self) -> None:
        self.image.unlink()
        result = self.by_name(self.validate(), "dconf image (01-background)")
        self.assertEqual(CheckStatus.FAIL, result.status)

    def test_profile_without_database_fails(self) -> None:
        Path(self.config.dconf_profile).write_text("user-db:user\n")
        self.assertEqual(CheckStatus.FAIL, self.by_name(self.validate(), "dconf profile").status)

    def test_uncompiled_and_stale_database(self) -> None:
        earlier = time.time() - 3600
        os.utime(self.compiled, (earlier, earlier))
        self.assertEqual(CheckStatus.WARN, self.by_name(self.validate(), "dconf database").status)

        self.compiled.unlink()
        result = self.by_name(self.validate(), "dconf database")
        self.assertEqual(CheckStatus.FAIL, result.status)
        self.assertIn("Run: sudo dconf update", result.hints)

    def test_missing_database_directory_warns(self) -> None:
        config = make_config(self.root, dconf_db_dir=str(self.root / "nowhere.d"))
        with mock.patch("gdmbg.diagnose.checks.dconf.is_available", return_value=False):
            results = validate_dconf(config)
        self.assertEqual([CheckStatus.WARN, CheckStatus.WARN], [r.status for r in results])

    def test_unparseable_keyfile_fails(self) -> None:
        (self.db_dir / "00-broken").write_text("picture-uri='file:///x.png'\n")
        result = self.by_name(self.validate(), "dconf keyfile 00-broken")
        self.assertEqual(CheckStatus.FAIL, result.status)

    def test_uris_are_unquoted(self) -> None:
        self.assertEqual([f"file://{self.image}"], read_background_uris(self.keyfile))

    def test_percent_encoded_uri_names_existing_image(self) -> None:
        spaced = write_png(self.root / "pixmaps" / "my bg.png")
        self.keyfile.write_text(
            "[org/gnome/desktop/background]\n"
            f"picture-uri='file://{quote(str(spaced))}'\n"
        )
        result = self.by_name(self.validate(), "dconf image (01-background)")
        self.assertEqual(CheckStatus.PASS, result.status)
        self.assertIn(str(spaced), result.detail)

    def test_non_utf8_bytes_do_not_abort_the_checks(self) -> None:
        self.keyfile.write_bytes(
            b"# caf\xe9\n[org/gnome/desktop/background]\n"
            + f"picture-uri='file://{self.image}'\n".encode()
        )
        Path(self.config.dconf_profile).write_bytes(b"user-db:user\nsystem-db:gdm\n# \xff\n")
        results = self.validate()
        self.assertEqual([CheckStatus.PASS] * 3, [r.status for r in results])

        checked = DiagnosticChecker(self.config).run_check("dconf")
        self.assertEqual(CheckStatus.PASS, self.by_name(checked, "dconf image (01-background)").status)

    def test_profile_and_database_checked_without_picture_uri(self) -> None:
        self.keyfile.write_text("[org/gnome/login-screen]\nbanner-message-enable=true\n")
        results = self.validate()
        self.assertEqual(CheckStatus.WARN, self.by_name(results, "dconf background override (gdm.d)").status)
        self.assertEqual(CheckStatus.PASS, self.by_name(results, "dconf profile").status)
        self.assertEqual(CheckStatus.PASS, self.by_name(results, "dconf database").status)


class OtherDconfSourceTests(CheckTestCase):
    def test_local_overrides_are_scanned(self) -> None:
        local = Path(self.config.dconf_extra_dirs[0])
        local.mkdir(parents=True)
        (local / "00-bg").write_text(
            "[org/gnome/desktop/background]\n"
            f"picture-uri='file://{self.root / 'gone.png'}'\n"
        )
        [result] = check_local_overrides(self.config)
        self.assertEqual("dconf image (00-bg)", result.name)
        self.assertEqual(CheckStatus.FAIL, result.status)

    def test_absent_local_directory_is_skipped(self) -> None:
        self.assertEqual([], check_local_overrides(self.config))

    def write_user_db(self) -> None:
        user_db = Path(self.config.gdm_user_db)
        user_db.parent.mkdir(parents=True)
        user_db.write_bytes(b"GVariant")

    def dump(self, output, euid=0):
        with mock.patch("gdmbg.diagnose.checks.dconf.os.geteuid", return_value=euid), \
                mock.patch("gdmbg.diagnose.checks.dconf.is_available", return_value=True), \
                mock.patch("gdmbg.diagnose.checks.dconf.run_tool",
                           return_value=completed([], stdout=output)) as run:
            return check_gdm_user_db(self.config), run

    def test_no_user_database(self) -> None:
        result, run = self.dump("")
        self.assertEqual(CheckStatus.PASS, result.status)
        run.assert_not_called()

    def test_user_database_needs_root(self) -> None:
        self.write_user_db()
        result, run = self.dump("", euid=1000)
        self.assertEqual(CheckStatus.WARN, result.status)
        run.assert_not_called()

    def test_user_database_background_takes_precedence(self) -> None:
        self.write_user_db()
        result, run = self.dump(
            "[org/gnome/desktop/background]\npicture-uri='file:///usr/share/backgrounds/warty.png'\n"
        )
        self.assertEqual(["sudo", "-n", "-u", "gdm", "dconf", "dump", "/"], run.call_args.args[0])
        self.assertEqual(CheckStatus.WARN, result.status)
        self.assertIn("file:///usr/share/backgrounds/warty.png", result.detail)

    def test_user_database_without_background(self) -> None:
        self.write_user_db()
        result, _ = self.dump("[org/gnome/desktop/a11y]\nalways-show-universal-access-status=true\n")
        self.assertEqual(CheckStatus.PASS, result.status)
        self.assertEqual("2 lines, no background keys", result.detail)


class SchemaAndUserThemeTests(CheckTestCase):
    def test_override_lines_become_hints(self) -> None:
        override = self.root / "10_ubuntu-settings.gschema.override"
        override.write_text(
            "[org.gnome.desktop.interface]\n"
            "gtk-theme = 'Yaru'\n"
            "[org.gnome.desktop.background]\n"
            "show-desktop-icons = true\n"
        )
        config = make_config(self.root, schema_overrides=[str(override), str(self.root / "absent")])
        [result] = check_schema_overrides(config)
        self.assertEqual(CheckStatus.PASS, result.status)
        self.assertIn("gtk-theme = 'Yaru'", result.hints)

    def test_user_theme_needs_root(self) -> None:
        with mock.patch("gdmbg.diagnose.checks.dconf.os.geteuid", return_value=1000), \
                mock.patch("gdmbg.diagnose.checks.dconf.run_tool") as run:
            result = check_user_theme(self.config)
        self.assertEqual(CheckStatus.WARN, result.status)
        run.assert_not_called()

    def test_user_theme_is_read_as_gdm(self) -> None:
        with mock.patch("gdmbg.diagnose.checks.dconf.os.geteuid", return_value=0), \
                mock.patch("gdmbg.diagnose.checks.dconf.run_tool",
                           return_value=completed([], stdout="'custom-gdm-theme'\n")) as run:
            result = check_user_theme(self.config)
        self.assertEqual("Current theme: 'custom-gdm-theme'", result.detail)
        self.assertEqual(["sudo", "-n", "-u", "gdm", "gsettings"], run.call_args.args[0][:5])


class BundleCheckTests(CheckTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.image = write_png(self.root / "gnome-shell" / "loginbg.png")
        Path(self.config.bundle_path).write_bytes(b"GVariant")
        self.inspector = mock.MagicMock()
        self.inspector.list_entries.return_value = [
            "/org/gnome/shell/theme/gnome-shell.css",
            "/org/gnome/shell/theme/pad-osd.css",
        ]
        self.inspector.extract_entry.return_value = (
            f'#lockDialogGroup {{ background: url("file://{self.image}"); }}'.encode()
        )

    def validate(self):
        with mock.patch("gdmbg.diagnose.checks.bundle.is_available", return_value=True):
            return validate_bundle(self.config, self.inspector)

    def test_bundle_with_existing_background(self) -> None:
        results = self.validate()
        self.assertEqual([CheckStatus.PASS] * 3, [r.status for r in results])
        self.assertIn("2 resources", results[0].detail)
        self.inspector.extract_entry.assert_called_once_with(
            self.config.bundle_path, "/org/gnome/shell/theme/gnome-shell.css"
        )

    def test_bundle_without_stylesheet_fails(self) -> None:
        self.inspector.list_entries.return_value = ["/org/gnome/shell/theme/pad-osd.css"]
        results = self.validate()
        self.assertEqual(CheckStatus.FAIL, results[-1].status)
        self.assertEqual("Bundle stylesheet", results[-1].name)

    def test_unreadable_bundle_fails(self) -> None:
        self.inspector.list_entries.side_effect = ExternalToolError(["gresource", "list"], 1, "corrupt")
        [result] = self.validate()
        self.assertEqual(CheckStatus.FAIL, result.status)
        self.assertIn("corrupt", result.detail)

    def test_missing_gresource_tool_warns(self) -> None:
        with mock.patch("gdmbg.diagnose.checks.bundle.is_available", return_value=False):
            [result] = validate_bundle(self.config, self.inspector)
        self.assertEqual(CheckStatus.WARN, result.status)
        self.inspector.list_entries.assert_not_called()

    def test_missing_bundle_fails(self) -> None:
        os.unlink(self.config.bundle_path)
        [result] = self.validate()
        self.assertEqual(CheckStatus.FAIL, result.status)

    def test_theme_link_target_is_the_active_bundle(self) -> None:
        other = self.root / "Yaru.gresource"
        other.write_bytes(b"")
        os.symlink(other, self.config.theme_link.candidates[0])
        self.assertEqual(str(other), active_bundle(self.config))


class SystemCheckTests(CheckTestCase):
    def test_running_processes(self) -> None:
        output = "812 /usr/sbin/gdm3\n990 gdm-session-worker [pam/gdm-launch-environment]\n"
        with mock.patch("gdmbg.diagnose.checks.system.run_tool",
                        return_value=completed([], stdout=output)):
            result = check_processes(self.config)
        self.assertEqual(CheckStatus.PASS, result.status)
        self.assertEqual("2 running", result.detail)

    def test_missing_pgrep_warns(self) -> None:
        with mock.patch("gdmbg.diagnose.checks.system.run_tool",
                        side_effect=ToolNotFoundError(["pgrep"])):
            self.assertEqual(CheckStatus.WARN, check_processes(self.config).status)

    def test_extensions_mention_user_theme(self) -> None:
        ext_dir = Path(self.config.extensions_dir)
        (ext_dir / "ubuntu-dock@ubuntu.com").mkdir(parents=True)
        (ext_dir / "user-theme@gnome-shell-extensions.gnome.org").mkdir()
        result = check_extensions(self.config)
        self.assertEqual("user-theme@gnome-shell-extensions.gnome.org", result.detail)
        self.assertEqual((), result.hints)

    def test_extensions_of_each_user(self) -> None:
        home = self.root / "home"
        alice = home / "alice" / self.config.user_extensions_subdir
        (alice / "user-theme@gnome-shell-extensions.gnome.org").mkdir(parents=True)
        (alice / "dash-to-panel@jderose9.github.com").mkdir()
        (home / "bob").mkdir()

        [result] = check_user_extensions(self.config)
        self.assertEqual("Extensions for user alice", result.name)
        self.assertEqual(CheckStatus.PASS, result.status)
        self.assertEqual("user-theme@gnome-shell-extensions.gnome.org", result.detail)

    def test_service_status_uses_service_timeout(self) -> None:
        config = make_config(self.root, service_timeout=7)
        with mock.patch("gdmbg.diagnose.checks.system.ServiceController") as controller, \
                mock.patch("gdmbg.diagnose.checks.system.run_tool",
                           return_value=completed([], stdout="812 /usr/sbin/gdm3\n")):
            validate_system(config)
        controller.assert_called_once_with(timeout=7)
        controller.return_value.status.assert_called_once_with(config.service_names)


class DiagnosticCheckerTests(CheckTestCase):
    def test_failing_category_does_not_stop_the_run(self) -> None:
        error = ExternalToolError(["gresource", "list"], 1, "corrupt bundle")
        with mock.patch("gdmbg.diagnose.checker.validate_bundle", side_effect=error), \
                mock.patch("gdmbg.diagnose.checker.validate_system", return_value=[]), \
                mock.patch("gdmbg.diagnose.checker.check_user_theme",
                           return_value=CheckResult.warn("GDM user theme", "Skipped")):
            report = DiagnosticChecker(self.config).run_all()

        names = [r.name for r in report.checks]
        aborted = self.by_name(report.checks, "bundle")
        self.assertEqual(CheckStatus.FAIL, aborted.status)
        self.assertIn("Check aborted", aborted.detail)
        self.assertLess(names.index("Background image"), names.index("bundle"))
        self.assertIn("GDM user theme", names)
        self.assertEqual(1, report.exit_code)

    def test_css_file_references_are_checked(self) -> None:
        image = write_png(self.root / "gnome-shell" / "loginbg.png")
        Path(self.config.css_path).write_text(f'.login-dialog {{ background: url("file://{image}"); }}')
        results = DiagnosticChecker(self.config).run_check("css")
        self.assertEqual([CheckStatus.PASS], [r.status for r in results])

    def test_undecodable_data_aborts_only_its_category(self) -> None:
        error = UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")
        with mock.patch("gdmbg.diagnose.checker.validate_system", side_effect=error):
            [result] = DiagnosticChecker(self.config).run_check("system")
        self.assertEqual(CheckStatus.FAIL, result.status)
        self.assertIn("Check aborted", result.detail)

    def test_unknown_category(self) -> None:
        self.assertIsNone(DiagnosticChecker(self.config).run_check("nonsense"))

    def test_categories_run_in_fixed_order(self) -> None:
        self.assertEqual(
            ["gdm-config", "theme-files", "theme-locations", "theme-link", "css", "bundle",
             "dconf", "dconf-local", "gdm-user-db", "schema-overrides", "user-theme", "system"],
            list(DiagnosticChecker(self.config).categories()),
        )


if __name__ == "__main__":
    unittest.main()

import json
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from gdmbg.config import PathSpec
from gdmbg.diagnose import PathInspector
from gdmbg.models import CheckResult, CheckStatus, DiagnosticReport
from gdmbg.report import OutputFormat, Reporter, render


class ReporterTests(unittest.TestCase):
    RESULTS = [
        CheckResult.ok("Background image", "/usr/share/gnome-shell/loginbg.png (2.0 KiB)"),
        CheckResult.warn("dconf command", "dconf command not available",
                         "Install it with: sudo apt install dconf-cli"),
        CheckResult.fail("Theme CSS", "Not found: /usr/share/gnome-shell/gnome-shell.css"),
    ]

    def test_json_is_an_array_of_results(self) -> None:
        data = json.loads(Reporter().render(self.RESULTS, OutputFormat.JSON))
        self.assertEqual(3, len(data))
        self.assertEqual(
            {"name": "dconf command", "status": "warn", "detail": "dconf command not available",
             "hints": ["Install it with: sudo apt install dconf-cli"]},
            data[1],
        )

    def test_text_groups_failures_first(self) -> None:
        text = render(self.RESULTS)
        self.assertLess(text.index("[Fail] Theme CSS"), text.index("[Warn] dconf command"))
        self.assertLess(text.index("[Warn] dconf command"), text.index("[Pass] Background image"))
        self.assertIn("Errors (1)", text)
        self.assertTrue(text.rstrip().endswith("(1 failed, 1 warnings)"))

    def test_hints_only_when_requested(self) -> None:
        hint = "Install it with: sudo apt install dconf-cli"
        self.assertNotIn(hint, Reporter().render(self.RESULTS))
        self.assertIn(hint, Reporter(show_hints=True).render(self.RESULTS))

    def test_plain_text_has_no_escape_codes(self) -> None:
        self.assertNotIn("\x1b[", Reporter(color=False).render(self.RESULTS))

    def test_one_labelled_line_per_check(self) -> None:
        with TemporaryDirectory() as tmpdir:
            present = Path(tmpdir) / "loginbg.png"
            present.write_bytes(b"\x89PNG")
            os.chmod(present, 0o644)
            specs = [
                PathSpec(path=str(present), label="Background image"),
                PathSpec(path=str(Path(tmpdir) / "gnome-shell.css"), label="Theme CSS"),
            ]
            results = PathInspector().inspect(specs)

        lines = render(results).splitlines()
        self.assertEqual(1, len([line for line in lines if "Pass" in line]))
        self.assertEqual(1, len([line for line in lines if "Fail" in line]))
        self.assertEqual(1, DiagnosticReport(results).exit_code)


class DiagnosticReportTests(unittest.TestCase):
    def test_warnings_do_not_fail_the_run(self) -> None:
        report = DiagnosticReport([CheckResult.ok("a", "x"), CheckResult.warn("b", "y")])
        self.assertTrue(report.passed)
        self.assertEqual(0, report.exit_code)
        self.assertEqual("OK with warnings: 1/2 checks passed (0 failed, 1 warnings)", report.summary())

    def test_any_failure_fails_the_run(self) -> None:
        report = DiagnosticReport()
        report.add(CheckResult.ok("a", "x"))
        report.add(CheckResult.fail("b", "y"))
        self.assertEqual(1, report.exit_code)
        self.assertEqual(["b"], [c.name for c in report.failures])

    def test_result_string_carries_status_label(self) -> None:
        result = CheckResult(name="Theme link", status=CheckStatus.PASS, detail="a -> b")
        self.assertEqual("[Pass] Theme link: a -> b", str(result))


if __name__ == "__main__":
    unittest.main()

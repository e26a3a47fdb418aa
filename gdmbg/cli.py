"""
Command-line interface for gdm-bg-tool.

Diagnoses and configures the GDM login-screen background.
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from . import __version__
from .config import ConfigLoader, Solution, ToolConfig
from .diagnose import DiagnosticChecker
from .errors import ConfigError, NotFoundError
from .models import CheckResult, DiagnosticReport
from .report import OutputFormat, Reporter
from .solutions import ApplyResult, get_solution
from .tools.compiler import BundleCompiler
from .tools.service import ServiceController

console = Console()
err_console = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

FORMAT_OPTION = click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="Output format",
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _require_root(action: str) -> None:
    """Exit with a usage error unless running as root."""
    if os.geteuid() != 0:
        err_console.print(f"[red]{action} must be run as root (use sudo)[/red]")
        sys.exit(EXIT_USAGE)


def _emit(results: List[CheckResult], fmt: str, hints: bool = False) -> int:
    """Print results and return the exit code they imply."""
    reporter = Reporter(color=console.is_terminal, show_hints=hints, width=console.width)
    click.echo(reporter.render(results, OutputFormat(fmt)), nl=fmt == OutputFormat.JSON.value)
    return DiagnosticReport(list(results)).exit_code


# ============================================================
# Main CLI Group
# ============================================================

@click.group()
@click.version_option(version=__version__, prog_name="gdm-bg-tool")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="GDM_BG_TOOL_CONFIG",
    help="YAML configuration file (or set GDM_BG_TOOL_CONFIG)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every command and file write")
@click.pass_context
def cli(ctx, config_path: Optional[str], verbose: bool):
    """
    GDM login background tool

    Find out why the login screen does not show your background, and set it.
    """
    ctx.ensure_object(dict)
    _setup_logging(verbose)

    try:
        ctx.obj["config"] = ConfigLoader(config_path).load()
    except ConfigError as e:
        err_console.print(f"[red]Error loading configuration: {escape(str(e))}[/red]")
        sys.exit(EXIT_USAGE)


# ============================================================
# DIAGNOSE Command
# ============================================================

@cli.command()
@FORMAT_OPTION
@click.option("--hints", is_flag=True, help="Show follow-up advice for each result")
@click.option("--check", "checks", multiple=True, help="Only run these check categories")
@click.pass_context
def diagnose(ctx, fmt: str, hints: bool, checks: tuple):
    """Run every read-only check and report the findings."""
    config: ToolConfig = ctx.obj["config"]
    checker = DiagnosticChecker(config)

    if checks:
        report = DiagnosticReport()
        for name in checks:
            results = checker.run_check(name)
            if results is None:
                valid = ", ".join(checker.categories())
                raise click.BadParameter(f"unknown check '{name}' (choose from {valid})",
                                         param_hint="--check")
            report.extend(results)
    else:
        report = checker.run_all()

    if fmt == OutputFormat.TEXT.value and console.is_terminal:
        console.print("\n[bold blue]GDM Background Diagnostics[/bold blue]\n")

    sys.exit(_emit(report.checks, fmt, hints))


# ============================================================
# APPLY Command
# ============================================================

@cli.command()
@click.option(
    "--image",
    "-i",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Background image to install",
)
@click.option(
    "--solution",
    "-s",
    type=click.Choice([s.value for s in Solution]),
    default=Solution.GRESOURCE.value,
    help="How to install the background",
)
@click.option("--minimal", is_flag=True, help="gresource: build a CSS-only bundle instead of merging")
@click.option("--dry-run", "-n", is_flag=True, help="Render files without writing anything")
@click.option("--restart", is_flag=True, help="Restart the display manager afterwards")
@FORMAT_OPTION
@click.pass_context
def apply(ctx, image: str, solution: str, minimal: bool, dry_run: bool, restart: bool, fmt: str):
    """Install a login-screen background."""
    config: ToolConfig = ctx.obj["config"]
    if not dry_run:
        _require_root("apply")

    impl = get_solution(solution, config, dry_run=dry_run, minimal=minimal)
    result = impl.apply(Path(image))

    if dry_run and fmt == OutputFormat.TEXT.value:
        _show_changes(result)

    checks = list(result.checks)
    if restart and not dry_run and result.success:
        checks.append(ServiceController(timeout=config.service_timeout).restart(config.service_names))

    sys.exit(_emit(checks, fmt, hints=True))


def _show_changes(result: ApplyResult) -> None:
    console.print(f"\n[bold blue]Dry run: {result.solution} solution[/bold blue]\n")
    for change in result.changes:
        if change.source is not None:
            console.print(f"[cyan]copy[/cyan] {escape(change.source)} -> {escape(change.path)} "
                          f"(mode {change.mode:04o})")
        else:
            console.rule(Text(f"{change.description}: {change.path}"), align="left")
            # rendered files are shown verbatim; dconf key files look like markup
            console.print(Text(change.content or ""), soft_wrap=True)
    console.print()


# ============================================================
# RESTART-SERVICE Command
# ============================================================

@cli.command("restart-service")
@FORMAT_OPTION
@click.pass_context
def restart_service(ctx, fmt: str):
    """Restart the display manager, trying each configured unit name."""
    config: ToolConfig = ctx.obj["config"]
    _require_root("restart-service")

    controller = ServiceController(timeout=config.service_timeout)
    sys.exit(_emit([controller.restart(config.service_names)], fmt, hints=True))


# ============================================================
# RESTORE Command
# ============================================================

@cli.command()
@FORMAT_OPTION
@click.pass_context
def restore(ctx, fmt: str):
    """Put the original theme bundle back from its backup."""
    config: ToolConfig = ctx.obj["config"]
    _require_root("restore")

    compiler = BundleCompiler(timeout=config.compile_timeout)
    try:
        compiler.restore(config.bundle_path)
    except NotFoundError as e:
        result = CheckResult.fail("Restore theme bundle", str(e))
    except OSError as e:
        result = CheckResult.fail("Restore theme bundle", f"{config.bundle_path}: {e}")
    else:
        result = CheckResult.ok(
            "Restore theme bundle",
            f"{config.bundle_path} restored from {config.backup_path}",
            "Restart GDM to see the change: sudo gdm-bg-tool restart-service",
        )

    sys.exit(_emit([result], fmt, hints=True))


# ============================================================
# INIT-CONFIG Command
# ============================================================

@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default="./gdm-bg-tool.yaml",
    help="Where to write the configuration",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def init_config(ctx, output: str, force: bool):
    """Write the active configuration to a YAML file for editing."""
    output_path = Path(output)
    if output_path.exists() and not force:
        err_console.print(f"[yellow]{output} exists; use --force to overwrite[/yellow]")
        sys.exit(EXIT_FAILED)

    ConfigLoader.save(ctx.obj["config"], output_path)
    console.print(Panel.fit(
        f"[green]Configuration written to[/green] [cyan]{output}[/cyan]\n\n"
        f"Use it with: [yellow]gdm-bg-tool --config {output} diagnose[/yellow]",
        title="Configuration",
    ))


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    cli()

"""unitreg CLI — a scripted host for the unit registry."""

import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from unitreg import __version__

console = Console()


@click.group()
@click.version_option(version=__version__)
def main():
    """unitreg — ownership-aware registry of weighted, labelled units.

    The registry has no network or storage layer of its own; these commands
    play the host role for development and inspection.
    """


# ── Run ──────────────────────────────────────────────────────────────


@main.command()
@click.argument("scenario_path")
@click.option("--admin", default=None, help="Override the scenario's administrator")
@click.option("--audit-dir", default=None, help="Write an audit trail to this directory")
def run(scenario_path: str, admin: str | None, audit_dir: str | None):
    """Replay a YAML scenario against a fresh registry.

    Exits with status 1 if any step's outcome differs from its expectation.
    """
    from unitreg.scenario.runner import ScenarioError, ScenarioRunner, load_scenario
    from unitreg.security.audit_log import AuditLogger

    console.print(f"\n[bold blue]unitreg[/] — Running scenario: {scenario_path}\n")

    try:
        scenario = load_scenario(scenario_path)
        audit = AuditLogger(audit_dir) if audit_dir else None
        report = ScenarioRunner(scenario, admin=admin, audit=audit).run()
    except ScenarioError as e:
        console.print(f"  [red]Scenario error:[/] {escape(str(e))}")
        sys.exit(2)

    table = Table(title=scenario.name or "Scenario")
    table.add_column("#", style="dim", width=4)
    table.add_column("Operation", style="cyan")
    table.add_column("Caller")
    table.add_column("Height", justify="right")
    table.add_column("Outcome")
    table.add_column("Expected", justify="center")

    for r in report.results:
        outcome = f"[green]{escape(repr(r.value))}[/]" if r.ok else f"[red]{r.error_kind}[/]"
        expected = "[green]Y[/]" if r.matched else "[red]N[/]"
        table.add_row(str(r.index), r.op, r.caller, str(r.height), outcome, expected)

    console.print(table)
    console.print(Panel(report.summary(), title="Result"))

    if not report.passed:
        sys.exit(1)


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.option("--signature", "-s", required=True)
@click.option("--weight", "-w", required=True, type=int)
@click.option("--description", "-d", required=True)
@click.option("--label", "-l", "labels", multiple=True, help="Repeat for each label")
def check(signature: str, weight: int, description: str, labels: tuple):
    """Check unit fields against the registry's validators."""
    from unitreg.utils.validator import check_unit_fields

    issues = check_unit_fields(signature, weight, description, list(labels))
    if issues:
        for issue in issues:
            console.print(f"  [red]x[/] {issue}")
        sys.exit(1)
    console.print("  [green]v[/] All fields valid")


# ── Audit ────────────────────────────────────────────────────────────


@main.command()
@click.option("--audit-dir", required=True, help="Audit trail directory")
@click.option("--caller", "-c", default=None, help="Only entries by this caller")
@click.option("--operation", "-o", default=None, help="Only this operation (create, update, ...)")
@click.option("--unit", "-u", "unit_id", default=None, type=int, help="Only entries for this unit")
@click.option("--failed", is_flag=True, help="Only rejected calls")
@click.option("--format", "fmt", default="table", type=click.Choice(["table", "json", "csv"]))
def audit(
    audit_dir: str,
    caller: str | None,
    operation: str | None,
    unit_id: int | None,
    failed: bool,
    fmt: str,
):
    """Show the registry audit trail, most recent first."""
    from unitreg.security.audit_log import AuditLogger

    trail = AuditLogger(audit_dir)
    filters = {"caller": caller, "operation": operation, "unit_id": unit_id, "failed_only": failed}

    if fmt != "table":
        click.echo(trail.export(fmt, **filters), nl=False)
        return

    entries = trail.events(**filters)
    if not entries:
        console.print("[yellow]No audit entries found.[/]")
        return

    table = Table(title=f"Audit trail ({len(entries)})")
    table.add_column("Recorded", style="dim")
    table.add_column("Caller", style="cyan")
    table.add_column("Operation")
    table.add_column("Target")
    table.add_column("Result")

    for e in entries:
        result = "[green]ok[/]" if e.ok else f"[red]{e.error_kind}[/]"
        table.add_row(e.recorded_at, escape(e.caller), e.operation, e.target, result)

    console.print(table)


# ── Config ───────────────────────────────────────────────────────────


@main.command(name="config")
@click.option("--config", "-c", "config_path", default=None, help="YAML config file")
def show_config(config_path: str | None):
    """Print the effective registry configuration."""
    from unitreg.config import ConfigError, load_config

    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        console.print(f"  [red]Config error:[/] {escape(str(e))}")
        sys.exit(2)

    table = Table(title="Registry configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("admin", cfg.admin)
    table.add_row("stability_index", str(cfg.stability_index))
    table.add_row("flux_value", str(cfg.flux_value))
    table.add_row("audit_dir", cfg.audit_dir or "(disabled)")
    console.print(table)


if __name__ == "__main__":
    main()

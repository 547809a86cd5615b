"""
Command-line interface for the layerconf configuration library.

Provides load, validate, convert, test, export, audit, interactive and demo
commands on top of the configuration pipeline.
"""

import json
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.syntax import Syntax
from rich.table import Table

from .config.loader import ConfigurationManager
from .config.schema import Schema, SchemaManager
from .exceptions import LayerconfException
from .pipeline.context import get_context
from .pipeline.models import AuditEntry, ConfigFormat, ExitCode, ValidationResult
from .pipeline.orchestrator import ConfigOrchestrator
from .pipeline.report_generator import ReportGenerator
from .utils.helpers import split_paths
from .utils.logger import get_logger, setup_logging

console = Console()

FORMAT_CHOICES = [member.value for member in ConfigFormat] + ["yml"]


def load_schema_option(schema_path: Optional[str]) -> Optional[Schema]:
    """Load the schema named by a --schema option, if any."""
    if not schema_path:
        return None
    return SchemaManager().load_schema(Path(schema_path))


def print_config(config: dict) -> None:
    """Print a configuration as highlighted JSON."""
    console.print(Syntax(json.dumps(config, indent=2, default=str), "json", word_wrap=True))


def show_validation_result(result: ValidationResult, title: str) -> None:
    """Display a validation result as a table of checks plus findings."""
    table = Table(title=title)
    table.add_column("Check", style="cyan")
    table.add_column("Result")
    for name, passed in result.tests.items():
        table.add_row(name.replace("_", " "), "[green]passed[/green]" if passed else "[red]failed[/red]")
    console.print(table)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"   [yellow]•[/yellow] {escape(warning)}")

    if result.errors:
        console.print("\n[red]❌ Errors:[/red]")
        for error in result.errors:
            console.print(f"   [red]•[/red] {escape(error)}")

    status = "[green]✅ Configuration is valid[/green]" if result.is_valid else "[red]❌ Configuration is invalid[/red]"
    console.print(f"\n{status}")


def show_audit_log(entries: List[AuditEntry]) -> None:
    """Display audit entries as a table."""
    if not entries:
        console.print("[dim]No audit entries recorded in this session.[/dim]")
        return

    table = Table(title="Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Paths")
    table.add_column("Result")
    for entry in entries:
        outcome = "[green]ok[/green]" if entry.success else f"[red]failed[/red] {escape(entry.error or '')}"
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            entry.action.value,
            "\n".join(entry.paths),
            outcome
        )
    console.print(table)


def fail(message: str) -> None:
    """Print an error and exit with the failure code."""
    console.print(f"[red]❌ {escape(message)}[/red]")
    sys.exit(ExitCode.FAILURE)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, verbose):
    """Layered configuration loader: merge, expand, validate and convert."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    setup_logging("DEBUG" if verbose else "WARNING", rich_output=True)


@cli.command()
@click.argument('config_path', type=click.Path())
@click.option('--override', '-o', 'overrides', default='', help='Comma-separated override file paths')
@click.option('--expand-env/--no-expand-env', default=True, help='Expand environment references')
@click.option('--schema', '-s', 'schema_path', help='JSON Schema document (JSON or YAML)')
def load(config_path, overrides, expand_env, schema_path):
    """Load a configuration with overrides and print the result."""
    try:
        schema = load_schema_option(schema_path)
        config = ConfigOrchestrator().import_configuration(
            config_path, split_paths(overrides), expand_env=expand_env,
            validate=schema is not None, schema=schema
        )
    except LayerconfException as e:
        fail(str(e))

    print_config(config)
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.argument('config_path', type=click.Path())
@click.option('--schema', '-s', 'schema_path', required=True, help='JSON Schema document (JSON or YAML)')
@click.option('--override', '-o', 'overrides', default='', help='Comma-separated override file paths')
@click.option('--expand-env/--no-expand-env', default=True, help='Expand environment references')
def validate(config_path, schema_path, overrides, expand_env):
    """Validate a merged configuration against a schema."""
    try:
        schema = load_schema_option(schema_path)
        ConfigOrchestrator().import_configuration(
            config_path, split_paths(overrides), expand_env=expand_env,
            validate=True, schema=schema
        )
    except LayerconfException as e:
        fail(f"Validation failed: {e}")

    console.print(f"[green]✅ {config_path} is valid against {schema_path}[/green]")
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.argument('config_path', type=click.Path())
@click.option('--output', '-O', 'output_path', required=True, type=click.Path(), help='Output file path')
@click.option('--format', '-f', 'output_format', required=True,
              type=click.Choice(FORMAT_CHOICES, case_sensitive=False), help='Output format')
@click.option('--indent', is_flag=True, help='Pretty-print JSON output')
def convert(config_path, output_path, output_format, indent):
    """Convert a configuration file to another format."""
    try:
        written = ConfigOrchestrator().convert_configuration(
            config_path, output_path, output_format, indent
        )
    except LayerconfException as e:
        fail(str(e))

    console.print(f"[green]✅ Converted {config_path} → {written}[/green]")
    sys.exit(ExitCode.SUCCESS)


@cli.command(name='test')
@click.argument('config_path', type=click.Path())
@click.option('--schema', '-s', 'schema_path', help='JSON Schema document (JSON or YAML)')
@click.option('--expand-env', is_flag=True, help='Also check environment expansion')
@click.option('--report-dir', type=click.Path(), help='Write JSON, Markdown and JUnit reports here')
def test_command(config_path, schema_path, expand_env, report_dir):
    """Run every check against a configuration file and report findings."""
    try:
        schema = load_schema_option(schema_path)
    except LayerconfException as e:
        fail(f"Could not load schema: {e}")

    result = ConfigOrchestrator().test_configuration(config_path, schema, test_expansion=expand_env)
    show_validation_result(result, f"Configuration Test: {config_path}")

    if report_dir:
        generator = ReportGenerator(Path(report_dir))
        report = generator.validation_report(result, Path(config_path))
        saved = generator.save_report(
            report, f"{Path(config_path).stem}_test", ["json", "md", "xml"], result
        )
        console.print(f"📋 Reports saved: {', '.join(str(path) for path in saved)}")

    sys.exit(ExitCode.SUCCESS if result.is_valid else ExitCode.FAILURE)


@cli.command()
@click.argument('config_path', type=click.Path())
@click.option('--output', '-O', 'output_path', required=True, type=click.Path(), help='Output file path')
@click.option('--format', '-f', 'output_format', default='json',
              type=click.Choice(FORMAT_CHOICES, case_sensitive=False), help='Output format')
@click.option('--override', '-o', 'overrides', default='', help='Comma-separated override file paths')
@click.option('--expand-env/--no-expand-env', default=True, help='Expand environment references')
@click.option('--indent', is_flag=True, help='Pretty-print JSON output')
def export(config_path, output_path, output_format, overrides, expand_env, indent):
    """Load a merged configuration and write it out."""
    orchestrator = ConfigOrchestrator()
    try:
        config = orchestrator.import_configuration(
            config_path, split_paths(overrides), expand_env=expand_env, validate=False
        )
        written = orchestrator.export_configuration(config, output_path, output_format, indent)
    except LayerconfException as e:
        fail(str(e))

    console.print(f"[green]✅ Exported configuration to {written}[/green]")
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.option('--report-dir', type=click.Path(), help='Also save the audit log as JSON and Markdown')
def audit(report_dir):
    """Show the audit log recorded by this process."""
    entries = get_context().audit_log
    show_audit_log(entries)

    if report_dir:
        generator = ReportGenerator(Path(report_dir))
        generator.save_report(generator.audit_report(entries), "audit_log", ["json", "md"])
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.argument('config_path', type=click.Path(exists=True, dir_okay=False))
def interactive(config_path):
    """Explore and edit a loaded configuration interactively."""
    logger = get_logger(__name__)
    manager = ConfigurationManager(Path(config_path))
    try:
        manager.load_configuration(force_reload=True)
    except LayerconfException as e:
        fail(str(e))

    console.print(Panel.fit(
        "Commands: [cyan]get KEY[/cyan], [cyan]set KEY VALUE[/cyan], [cyan]show[/cyan], "
        "[cyan]reload[/cyan], [cyan]audit[/cyan], [cyan]quit[/cyan]",
        title=f"🔧 {config_path}"
    ))

    while True:
        command = Prompt.ask("[bold cyan]layerconf[/bold cyan]").strip()
        if not command:
            continue
        action, _, rest = command.partition(" ")
        action = action.lower()

        if action in ("quit", "exit"):
            break
        elif action == "show":
            print_config(manager.configuration or {})
        elif action == "get" and rest:
            value = manager.get(rest.strip())
            console.print(value if value is not None else "[dim]<not set>[/dim]")
        elif action == "set" and rest:
            key, _, value = rest.strip().partition(" ")
            manager.set(key, value)
            console.print(f"[green]✓[/green] {key} = {value}")
        elif action == "reload":
            try:
                manager.load_configuration(force_reload=True)
                console.print("[green]✓[/green] Reloaded")
            except LayerconfException as e:
                logger.debug(f"Reload failed: {e}")
                console.print(f"[red]❌ {escape(str(e))}[/red]")
        elif action == "audit":
            show_audit_log(get_context().audit_log)
        else:
            console.print(f"[yellow]Unknown command: {command}[/yellow]")

    sys.exit(ExitCode.SUCCESS)


@cli.command()
def demo():
    """Run load, test and export against generated sample files."""
    orchestrator = ConfigOrchestrator()

    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        base_path = root / "app.yaml"
        base_path.write_text(
            "Application:\n"
            "  Name: demo\n"
            "  LogDir: ${HOME}/logs\n"
            "Database:\n"
            "  Host: localhost\n"
            "  Timeout: 30\n",
            encoding='utf-8'
        )
        override_dir = root / "production"
        override_dir.mkdir()
        override_path = override_dir / "config-override.json"
        override_path.write_text(json.dumps({"Database": {"Timeout": 60}}), encoding='utf-8')

        schema = (Schema("demo")
                  .add_property("Application", "object", required=True)
                  .add_property("Database", "object", required=True,
                                validators=[lambda db: db.get("Timeout", 0) > 0]))

        console.print(Panel.fit("[bold]Base[/bold] app.yaml + [bold]override[/bold] production/config-override.json"))
        try:
            config = orchestrator.import_configuration(
                base_path, [override_path], expand_env=True, validate=True, schema=schema
            )
            print_config(config)

            result = orchestrator.test_configuration(base_path, schema, test_expansion=True)
            show_validation_result(result, "Demo Configuration Test")

            for config_format in ConfigFormat:
                output = orchestrator.export_configuration(
                    config, root / "export" / f"app.{config_format.value}", config_format, indent=True
                )
                console.print(Panel(escape(output.read_text(encoding='utf-8')), title=config_format.value.upper()))
        except LayerconfException as e:
            fail(str(e))

    show_audit_log(get_context().audit_log)
    sys.exit(ExitCode.SUCCESS)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

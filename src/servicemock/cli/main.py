"""
servicemock CLI - Main entry point.

Shows how servicemock would build a class, without building it.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from servicemock.analyzer.reflection import ClassReflection, MethodReflection
from servicemock.analyzer.resolver import ParameterResolver
from servicemock.config.loader import (
    DEFAULT_CONFIG_FILE,
    ConfigurationError,
    generate_default_config,
    load_config,
)
from servicemock.config.models import ServiceMockConfig
from servicemock.errors import ServiceMockError

app = typer.Typer(
    name="servicemock",
    help="Inspect how services under test get built with mocked dependencies",
    no_args_is_help=True,
)

console = Console()


# =============================================================================
# Helper Functions
# =============================================================================


def method_table(owner: str, method: MethodReflection, resolver: ParameterResolver) -> tuple[Table, int]:
    """Build the decision table for one method. Returns the table and its error count."""
    table = Table(title=f"{method.name}()", title_justify="left")
    table.add_column("Parameter", style="cyan")
    table.add_column("Annotation")
    table.add_column("Decision")

    errors = 0
    for parameter in method.parameters():
        annotation = "-" if not parameter.has_type else _format_annotation(parameter.annotation)

        if parameter.is_variadic:
            table.add_row(parameter.name, annotation, "[dim]override only[/dim]")
            continue

        try:
            decision = resolver.resolve(owner, parameter, method)
        except ServiceMockError as e:
            errors += 1
            table.add_row(parameter.name, annotation, f"[bold red]{type(e).__name__}[/bold red]: {e}")
            continue

        if decision.is_mock:
            table.add_row(parameter.name, annotation, f"[green]mock[/green] {decision.mock_type.__qualname__}")
        else:
            table.add_row(parameter.name, annotation, f"[yellow]default[/yellow] {decision.default!r}")

    return table, errors


def _format_annotation(annotation) -> str:
    if isinstance(annotation, type):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def plan(
    target: str = typer.Argument(..., help="Class to inspect (pkg.module:Class or pkg.module.Class)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    path: str = typer.Option(".", "--path", "-p", help="Directory added to the import path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Show which parameters would be mocked and which would use defaults.

    Examples:
        servicemock plan app.mailer:Mailer
        servicemock plan app.mailer.Mailer --config servicemock.yaml
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(name)s: %(message)s")

    sys.path.insert(0, str(Path(path).resolve()))

    try:
        cfg = load_config(Path(config) if config else None)
        reflection = ClassReflection.for_identifier(target)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        raise typer.Exit(1)
    except ServiceMockError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    display_config(reflection.name, cfg)
    resolver = ParameterResolver(cfg)
    errors = 0

    init = reflection.constructor()
    if init is None:
        console.print("[dim]No constructor: instantiated without arguments[/dim]")
    else:
        table, count = method_table(reflection.name, init, resolver)
        console.print(table)
        errors += count

    if cfg.injection.enabled:
        try:
            injection = reflection.injection_methods(cfg.injection.marker_attribute)
        except ServiceMockError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

        if not injection:
            console.print("[dim]No injection methods[/dim]")
        for method in injection:
            table, count = method_table(reflection.name, method, resolver)
            console.print(table)
            errors += count

    if errors:
        console.print(f"\n[bold red]{errors} parameter(s) need an explicit value or a fix[/bold red]")
        raise typer.Exit(1)

    console.print(f"\n[green]✓[/green] {reflection.name} can be built")


@app.command()
def init(
    output: str = typer.Option(f"./{DEFAULT_CONFIG_FILE}", "--output", "-o", help="Output path for config file"),
):
    """
    Generate a default configuration file.

    Creates a servicemock.yaml with the defaults that you can customize.
    """
    output_path = Path(output)

    if output_path.exists():
        if not typer.confirm(f"{output} already exists. Overwrite?"):
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Abort()

    generate_default_config(output_path)
    console.print(f"[green]✓[/green] Generated configuration file: {output}")


def display_config(target: str, cfg: ServiceMockConfig):
    """Display the class and the settings that affect it."""
    strategy = "autospec" if cfg.mocks.autospec else "spec"
    info_text = f"""
[bold cyan]Class:[/bold cyan] {target}
[bold cyan]Mock Strategy:[/bold cyan] {strategy}{" (spec_set)" if cfg.mocks.spec_set else ""}
[bold cyan]Injection Marker:[/bold cyan] {cfg.injection.marker_attribute if cfg.injection.enabled else "disabled"}
    """
    console.print(Panel(info_text.strip(), title="Build Plan", border_style="bold green"))


# =============================================================================
# Entry Point
# =============================================================================


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

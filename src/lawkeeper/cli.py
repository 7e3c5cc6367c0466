# src/lawkeeper/cli.py
"""Lawkeeper Command Line Interface.

Entry point for the lawkeeper CLI tool.
"""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from lawkeeper import __version__
from lawkeeper.contracts.errors import DeclarationError, LawkeeperError
from lawkeeper.contracts.models import BindingOutcome
from lawkeeper.core.config import MAX_TRIAL_COUNT, LawkeeperSettings, load_settings
from lawkeeper.core.logging import configure_logging
from lawkeeper.plugins.manager import ContractPluginManager
from lawkeeper.runtime import Runtime

__all__ = [
    "app",
]

app = typer.Typer(
    name="lawkeeper",
    help="Lawkeeper: law-checked capability contracts.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"lawkeeper version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Lawkeeper: law-checked capability contracts."""


def _load_config(settings: Path | None) -> LawkeeperSettings:
    """Load settings, or defaults when no file is given.

    Raises:
        typer.Exit: file missing, malformed YAML or invalid values
    """
    try:
        if settings is None:
            return LawkeeperSettings()
        return load_settings(settings.expanduser())
    except yaml.YAMLError as e:
        problem = getattr(e, "problem", None) or e
        typer.echo(f"YAML syntax error in {settings}: {problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None
    except ValueError as e:
        # Top level is not a mapping, or a LAWKEEPER_ list value is not JSON
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _build_manager(config: LawkeeperSettings, plugins: list[str], no_builtin: bool) -> ContractPluginManager:
    """Plugin manager with built-in, configured, command line and entry point plugins."""
    manager = ContractPluginManager()
    if not no_builtin:
        manager.register_builtin_plugins()
    try:
        for path in (*config.plugins, *plugins):
            manager.register_module(path)
    except ImportError as e:
        typer.echo(f"Error loading plugin: {e}", err=True)
        raise typer.Exit(1) from None
    manager.load_entrypoints()
    return manager


def _describe(outcome: BindingOutcome) -> str:
    if not outcome.committed:
        return f"rejected  {outcome.describe()}: {outcome.error}"
    if outcome.bypassed:
        return f"bypassed  {outcome.describe()}: {outcome.bypass_reason}"
    laws = len(outcome.laws_checked)
    return f"ok        {outcome.describe()} ({laws} law{'s' if laws != 1 else ''}, {outcome.trials} trials)"


_SETTINGS_OPTION = typer.Option(None, "--settings", "-s", help="Path to settings YAML file.")
_PLUGIN_OPTION = typer.Option([], "--plugin", "-p", help="Module to register as a plugin (repeatable).")
_NO_BUILTIN_OPTION = typer.Option(False, "--no-builtin", help="Skip the built-in Semigroup/Monoid plugin.")


@app.command()
def verify(
    settings: Path | None = _SETTINGS_OPTION,
    plugin: list[str] = _PLUGIN_OPTION,
    no_builtin: bool = _NO_BUILTIN_OPTION,
    trials: int | None = typer.Option(
        None,
        "--trials",
        "-n",
        min=1,
        max=MAX_TRIAL_COUNT,
        help="Trials per law (overrides verification.trial_count).",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
) -> None:
    """Declare plugin contracts and verify every contributed instance.

    Exits with status 1 if a declaration fails or any binding is rejected.
    """
    config = _load_config(settings)
    if trials is not None:
        verification = config.verification.model_copy(update={"trial_count": trials})
        config = config.model_copy(update={"verification": verification})

    configure_logging(
        json_output=json_logs or config.logging.json_output,
        level="DEBUG" if verbose else config.logging.level,
    )

    runtime = Runtime(config)
    manager = _build_manager(config, plugin, no_builtin)
    try:
        result = manager.install(runtime)
    except DeclarationError as e:
        typer.echo(f"Declaration error: {e}", err=True)
        raise typer.Exit(1) from None
    except LawkeeperError as e:
        # Unknown contract named by a plugin instance
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    for outcome in result.outcomes:
        typer.echo(_describe(outcome))
    typer.echo(f"{len(result.committed)} committed, {len(result.rejected)} rejected")

    if not result.ok:
        raise typer.Exit(1)


@app.command()
def contracts(
    settings: Path | None = _SETTINGS_OPTION,
    plugin: list[str] = _PLUGIN_OPTION,
    no_builtin: bool = _NO_BUILTIN_OPTION,
) -> None:
    """List contracts contributed by plugins, without binding instances."""
    config = _load_config(settings)
    configure_logging(json_output=config.logging.json_output, level=config.logging.level)

    runtime = Runtime(config)
    manager = _build_manager(config, plugin, no_builtin)
    try:
        manager.declare_contracts(runtime)
    except DeclarationError as e:
        typer.echo(f"Declaration error: {e}", err=True)
        raise typer.Exit(1) from None
    except LawkeeperError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if not runtime.contracts():
        typer.echo("No contracts declared.")
        return

    for contract in runtime.contracts():
        operations = ", ".join(str(op) for op in contract.operations) or "-"
        typer.echo(f"{contract.name}({operations})")
        dependencies = runtime.registry.transitive_dependencies(contract.name)
        if dependencies:
            typer.echo(f"  depends on: {', '.join(dependencies)}")
        if contract.bypass_all:
            typer.echo("  laws: bypassed")
        else:
            typer.echo(f"  laws: {', '.join(contract.law_names)}")

# src/tessera/cli.py
"""tessera Command Line Interface.

Entry point for the tessera CLI tool. Widget tasks are addressed as
`<module-name>:<task>`, e.g. `tessera task hero-widgets:list`.
"""

import asyncio
from pathlib import Path

import typer
from pydantic import ValidationError

from tessera import __version__
from tessera.core.config import TesseraSettings, load_settings, resolve_config
from tessera.core.logging import configure_logging
from tessera.engine.bootstrap import Site, build_site
from tessera.widgets.config_base import WidgetConfigError
from tessera.widgets.manager import WidgetPluginManager

app = typer.Typer(
    name="tessera",
    help="tessera: declarative widget types for content management.",
    no_args_is_help=True,
)

# Tasks every widget type supports
WIDGET_TASKS = ("list",)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tessera version {__version__}")
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
    """tessera: declarative widget types for content management."""
    pass


def _load(settings: str, verbose: bool = False) -> TesseraSettings:
    """Load settings, reporting problems the way every command does."""
    settings_path = Path(settings)
    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    configure_logging(
        "DEBUG" if verbose else config.logging.level,
        json_output=config.logging.json_output,
    )
    return config


def _build(settings: str, config: TesseraSettings) -> Site:
    try:
        return build_site(config, base_dir=Path(settings).parent)
    except WidgetConfigError as e:
        typer.echo(f"Widget configuration error: {e}", err=True)
        raise typer.Exit(1) from None
    except OSError as e:
        typer.echo(f"Error reading documents: {e}", err=True)
        raise typer.Exit(1) from None
    except ValueError as e:
        # Duplicate widget type names, malformed document files
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def task(
    name: str = typer.Argument(
        ...,
        help="Task to run, as <module-name>:<task>, e.g. hero-widgets:list.",
    ),
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging on stderr.",
    ),
) -> None:
    """Run a widget module task.

    `list` prints one `<slug>:<dotPath>` line per stored widget of the
    module's type. It never modifies documents.
    """
    module_name, sep, task_name = name.rpartition(":")
    if not sep or not module_name:
        typer.echo(f"Error: Task must be given as <module-name>:<task>, got '{name}'", err=True)
        raise typer.Exit(1)
    if task_name not in WIDGET_TASKS:
        typer.echo(f"Error: Unknown task '{task_name}'.", err=True)
        typer.echo(f"Valid tasks: {', '.join(WIDGET_TASKS)}", err=True)
        raise typer.Exit(1)

    config = _load(settings, verbose)
    site = _build(settings, config)

    widget_type = site.registry.get_by_module(module_name)
    if widget_type is None:
        typer.echo(f"Error: No widget module named '{module_name}'.", err=True)
        raise typer.Exit(1)

    asyncio.run(widget_type.list(typer.echo))


@app.command()
def widgets(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """List the widget types configured for a site."""
    config = _load(settings)
    site = _build(settings, config)

    if not len(site.registry):
        typer.echo("No widget modules configured.")
        return
    for widget_type in site.registry:
        flags = " (deferred)" if widget_type.defer else ""
        typer.echo(
            f"  {widget_type.name:16} {widget_type.module_name:24} "
            f"{widget_type.label}{flags}"
        )


@app.command()
def plugins() -> None:
    """List available widget plugins."""
    manager = WidgetPluginManager()
    manager.register_builtin_plugins()

    typer.echo("\nWIDGET PLUGINS:")
    for cls in manager.get_widget_types():
        summary = (cls.__doc__ or "").strip().splitlines()[0:1]
        typer.echo(f"  {cls.plugin_name:12} - {summary[0] if summary else cls.__name__}")
    typer.echo()  # Final newline


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help="Print the resolved configuration as JSON.",
    ),
) -> None:
    """Validate site configuration, including every widget module's options."""
    config = _load(settings)
    site = _build(settings, config)

    typer.echo(f"Configuration valid: {Path(settings).name}")
    typer.echo(f"  Widget types: {', '.join(site.registry.names()) or '(none)'}")
    typer.echo(f"  Store: {config.store.path or '(memory)'}")
    if show:
        from tessera.core.canonical import canonical_json

        typer.echo(canonical_json(resolve_config(config)))


if __name__ == "__main__":
    app()

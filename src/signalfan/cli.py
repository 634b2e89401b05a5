# src/signalfan/cli.py
"""signalfan Command Line Interface.

Inspect discoverable clients and validate dispatcher settings files.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from signalfan import __version__
from signalfan.config import load_settings
from signalfan.errors import ClientConfigurationError
from signalfan.factory import build_clients, discover_client_registry

app = typer.Typer(
    name="signalfan",
    help="signalfan: fan analytics and error events out to pluggable clients.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"signalfan version {__version__}")
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
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """signalfan: fan analytics and error events out to pluggable clients."""
    from signalfan.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")


@dataclass(frozen=True)
class ClientInfo:
    """Metadata for a discoverable client class.

    Attributes:
        name: The client name used in settings files.
        client_type: "analytics" or "error".
        description: First line of the client class docstring.
    """

    name: str
    client_type: str
    description: str


def _build_client_infos() -> list[ClientInfo]:
    registry = discover_client_registry()
    infos = []
    for name, client_class in registry.items():
        doc = (client_class.__doc__ or "").strip()
        description = doc.splitlines()[0] if doc else "(no description)"
        infos.append(ClientInfo(name=name, client_type=client_class.client_type.value, description=description))
    return infos


@app.command("clients")
def clients_list(
    client_type: str | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Filter by client type (analytics, error).",
    ),
) -> None:
    """List discoverable clients."""
    infos = _build_client_infos()
    valid_types = {"analytics", "error"}

    if client_type and client_type not in valid_types:
        typer.echo(f"Error: Invalid type '{client_type}'.", err=True)
        typer.echo(f"Valid types: {', '.join(sorted(valid_types))}", err=True)
        raise typer.Exit(1)

    types_to_show = [client_type] if client_type else sorted(valid_types)
    for ctype in types_to_show:
        typer.echo(f"\n{ctype.upper()} CLIENTS:")
        matching = [info for info in infos if info.client_type == ctype]
        if not matching:
            typer.echo("  (none available)")
        for info in matching:
            typer.echo(f"  {info.name:20} - {info.description}")

    typer.echo()


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate dispatcher settings and the clients they name."""
    settings_path = Path(settings).expanduser()

    try:
        config = load_settings(settings_path)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    except (YamlParserError, YamlScannerError) as e:
        typer.secho(f"YAML syntax error in {settings_path}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.secho("Configuration errors:", fg=typer.colors.RED, err=True)
        for error in e.errors():
            loc = ".".join(str(part) for part in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    try:
        clients = build_clients(config)
    except ClientConfigurationError as e:
        typer.secho(f"Client error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None

    typer.secho("Configuration valid!", fg=typer.colors.GREEN)
    typer.echo(f"  Isolate client failures: {config.isolate_client_failures}")
    typer.echo(f"  Redirect delay: {config.redirect_delay_seconds}s")
    if not clients:
        typer.echo("  Clients: (none)")
    for client in clients:
        typer.echo(f"  Client: {client.name} ({client.client_type.value})")


if __name__ == "__main__":
    app()

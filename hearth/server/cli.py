"""Hearth CLI — servers, rankings, stats, and config editing."""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Any, NoReturn, get_args

import httpx
import typer
from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.table import Table

from hearth import config as config_mod
from hearth.client import HearthClient
from hearth.config import HearthConfig, loadConfig
from hearth.version import __version__

_cli = typer.Typer(
    name="hearth",
    help="Usage heat scoring with scheduled decay.",
    no_args_is_help=False,
    rich_markup_mode="rich",
)
_config_cli = typer.Typer(help="Read/write [bold]~/.hearth/config.json[/bold].")
_cli.add_typer(_config_cli, name="config")

_console = Console()

_LEVEL_STYLES = {
    "blazing": "bold red",
    "critical": "red",
    "hot": "dark_orange",
    "warm": "yellow",
    "cool": "cyan",
    "cold": "blue",
}


def _checkFormat(format: str) -> None:
    if format not in ("human", "json"):
        raise typer.BadParameter(f"Invalid format {format!r}; choose human or json")


def _setupLogging() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")


def _client(url: str | None) -> HearthClient:
    return HearthClient(url or f"http://localhost:{loadConfig().port}/api")


def _fail(format: str, message: str) -> NoReturn:
    if format == "json":
        print(json.dumps({"ok": False, "error": message}))
    else:
        _console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


# ============================================================
# Servers
# ============================================================


def _versionCallback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


@_cli.callback(invoke_without_command=True)
def _default(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_versionCallback, is_eager=True, help="Show version."
    ),
) -> None:
    """Start the MCP server on stdio (default when no subcommand given)."""
    if ctx.invoked_subcommand is None:
        from hearth.server.mcp import mcp

        _setupLogging()
        mcp.run(transport="stdio")


@_cli.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default from config)"),
) -> None:
    """Run the REST API + MCP SSE server with the decay scheduler."""
    import uvicorn

    from hearth.server.app import createApp

    _setupLogging()
    cfg = loadConfig()
    uvicorn.run(createApp(cfg), host=host, port=port or cfg.port)


# ============================================================
# Queries (against a running server)
# ============================================================


@_cli.command()
def hottest(
    limit: int = typer.Option(10, "--limit", "-n", help="Max items"),
    recent: bool = typer.Option(False, "--recent", help="Rank recent items by heat + recency"),
    url: str | None = typer.Option(None, "--url", help="API base URL"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Show the hottest tracked items."""
    _checkFormat(format)
    try:
        with _client(url) as client:
            data = client.hot(limit=limit) if recent else client.hottest(limit)
    except httpx.HTTPError as e:
        _fail(format, f"Hearth server unreachable: {e}")

    if format == "json":
        print(json.dumps(data))
        raise typer.Exit()

    t = Table(box=box.SIMPLE, padding=(0, 1))
    t.add_column("#", style="dim", justify="right")
    t.add_column("item")
    t.add_column("heat", justify="right")
    t.add_column("level")
    t.add_column("opens", justify="right")
    t.add_column("edits", justify="right")
    for i, rec in enumerate(data["records"], start=1):
        style = _LEVEL_STYLES.get(rec["level"], "")
        t.add_row(
            str(i),
            rec["identifier"],
            f"{rec['heat_score']:.1f}",
            f"[{style}]{rec['level']}[/{style}]" if style else rec["level"],
            str(rec["metrics"]["access_count"]),
            str(rec["metrics"]["edit_count"]),
        )
    _console.print(t)


@_cli.command()
def stats(
    url: str | None = typer.Option(None, "--url", help="API base URL"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Show heat distribution and decay status."""
    _checkFormat(format)
    try:
        with _client(url) as client:
            data = client.stats()
    except httpx.HTTPError as e:
        _fail(format, f"Hearth server unreachable: {e}")

    if format == "json":
        print(json.dumps(data))
        raise typer.Exit()

    _console.print(
        f"[bold]{data['total_records']}[/bold] items, "
        f"avg heat {data['average_heat']:.1f} (max {data['max_heat']:.1f}), "
        f"{data['favorite_count']} favorites"
    )
    t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    t.add_column("level")
    t.add_column("count", justify="right")
    for level, count in data["levels"].items():
        t.add_row(f"[{_LEVEL_STYLES[level]}]{level}[/]", str(count))
    _console.print(t)
    decay = data["decay"]
    state = "[green]running[/green]" if decay["is_running"] else "[dim]stopped[/dim]"
    _console.print(
        f"decay {state}: {decay['rate_percent']}% every {decay['interval_minutes']} min"
    )


# ============================================================
# Config
# ============================================================


def _modelOf(annotation: Any) -> type[BaseModel] | None:
    candidates = [annotation, *get_args(annotation)]
    for c in candidates:
        if isinstance(c, type) and issubclass(c, BaseModel):
            return c
    return None


def _fieldAnnotation(dotpath: str) -> Any:
    """Annotation of a scalar HearthConfig field; None for sections or unknown keys."""
    model: type[BaseModel] | None = HearthConfig
    *parents, leaf = dotpath.split(".")
    for part in parents:
        f = model.model_fields.get(part)
        model = _modelOf(f.annotation) if f else None
        if model is None:
            return None
    f = model.model_fields.get(leaf)
    if f is None or _modelOf(f.annotation) is not None:
        return None
    return f.annotation


def _typeName(annotation: Any) -> str:
    args = [a for a in get_args(annotation) if a is not type(None)]
    base = args[0] if args else annotation
    name = getattr(base, "__name__", str(base))
    return f"{name} | None" if type(None) in get_args(annotation) else name


def _coerce(value: str, annotation: Any) -> Any:
    """Parse a CLI string into the field's scalar type."""
    args = get_args(annotation)
    if args and value.lower() in ("none", "null") and type(None) in args:
        return None
    base = next((a for a in args if a is not type(None)), annotation) if args else annotation
    if base is bool:
        lowered = value.lower()
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
        raise ValueError(f"Expected bool, got {value!r}")
    if base in (int, float):
        return base(value)
    return value


def _show(v: Any) -> str:
    if v is None:
        return "[dim](not set)[/dim]"
    if isinstance(v, bool):
        return str(v).lower()
    return str(v)


@_config_cli.command("list")
def config_list(
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Pretty-print the current config grouped by section."""
    _checkFormat(format)
    current = loadConfig().model_dump()
    if format == "json":
        print(json.dumps(current))
        raise typer.Exit()

    defaults = HearthConfig().model_dump()
    top = {k: v for k, v in current.items() if not isinstance(v, dict)}
    sections = [("General", top, defaults)]
    sections += [
        (name.capitalize(), value, defaults[name])
        for name, value in current.items()
        if isinstance(value, dict)
    ]
    for title, values, section_defaults in sections:
        _console.print(f"\n[bold]{title}[/bold]")
        t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
        t.add_column("key", style="dim")
        t.add_column("val")
        for key, val in values.items():
            shown = _show(val)
            if val != section_defaults.get(key):
                shown = f"[yellow]{shown}[/yellow]"
            t.add_row(key, shown)
        _console.print(t)


@_config_cli.command("get")
def config_get(
    dotpath: str = typer.Argument(help="Dot-separated key, e.g. decay.rate_percent"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Get a single config value."""
    _checkFormat(format)
    node: Any = loadConfig().model_dump()
    for part in dotpath.split("."):
        if not (isinstance(node, dict) and part in node):
            _fail(format, f"Key not found: {dotpath}")
        node = node[part]
    ann = _fieldAnnotation(dotpath)
    type_name = _typeName(ann) if ann else "section"
    if format == "json":
        print(json.dumps({"key": dotpath, "value": node, "type": type_name}))
    else:
        _console.print(f"[bold]{dotpath}[/bold] = {_show(node)}  [dim]({type_name})[/dim]")


@_config_cli.command("set")
def config_set(
    dotpath: str = typer.Argument(help="Dot-separated key path"),
    value: str = typer.Argument(help="Value (type-coerced via schema)"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Set a config value. Out-of-range numbers are clamped on load."""
    _checkFormat(format)
    ann = _fieldAnnotation(dotpath)
    if ann is None:
        _fail(format, f"Key not found: {dotpath}")
    try:
        coerced = _coerce(value, ann)
    except ValueError as e:
        _fail(format, f"Invalid value: {e}")

    path = config_mod.CONFIG_PATH
    raw: dict = {}
    if path.exists():
        with contextlib.suppress(json.JSONDecodeError):
            raw = json.loads(path.read_text())

    *parents, leaf = dotpath.split(".")
    node = raw
    for part in parents:
        if not isinstance(node.get(part), dict):
            node[part] = {}
        node = node[part]
    node[leaf] = coerced

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(raw, indent=2) + "\n")
    if format == "json":
        print(json.dumps({"ok": True, "key": dotpath, "value": coerced}))
    else:
        _console.print(f"[green]Set[/green] {dotpath} = {coerced!r}")


def main() -> None:
    _cli()


if __name__ == "__main__":
    main()

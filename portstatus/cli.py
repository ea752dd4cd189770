import logging
import sys
from pathlib import Path
from typing import List, Optional

import pydantic
import typer

from . import __version__
from .analysis.ports import SECTIONS, PortConnections
from .config import Settings, load_config
from .models import ReportModel
from .report.jsonout import render_json
from .report.text import render_listing, render_text
from .sources import PortSource, PsutilPortSource, load_snapshot
from .utils.time import now_utc


logger = logging.getLogger(__name__)

app = typer.Typer(help="Portstatus: report used and open local TCP/UDP ports")


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _show_version(value: bool):
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", callback=_show_version, is_eager=True
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG/INFO/WARNING/ERROR)."),
):
    level = log_level.upper()
    if level not in LOG_LEVELS:
        typer.echo(f"Unknown log level '{log_level}'. Expected one of: {', '.join(LOG_LEVELS)}", err=True)
        raise typer.Exit(2)
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _check_sections(names: List[str]) -> None:
    unknown = [n for n in names if n not in SECTIONS]
    if unknown:
        typer.echo(
            f"Unknown section(s): {', '.join(unknown)}. Expected one of: {', '.join(SECTIONS)}",
            err=True,
        )
        raise typer.Exit(2)


def _wait_for_enter() -> None:
    sys.stdin.readline()


def _build_analyzer(
    settings: Settings,
    start: Optional[int],
    end: Optional[int],
    snapshot: Optional[Path],
    ipv6: Optional[bool],
) -> PortConnections:
    # CLI values win over the config file
    start_port = start if start is not None else settings.start_port
    end_port = end if end is not None else settings.end_port
    include_ipv6 = settings.include_ipv6 if ipv6 is None else ipv6

    source: PortSource
    if snapshot:
        logger.info(f"Using port snapshot {snapshot}")
        try:
            source = load_snapshot(snapshot)
        except pydantic.ValidationError as e:
            typer.echo(f"Invalid port snapshot {snapshot}: {e}", err=True)
            raise typer.Exit(2)
    else:
        source = PsutilPortSource(include_ipv6=include_ipv6)
    return PortConnections(start_port, end_port, source=source)


@app.command()
def report(
    start: Optional[int] = typer.Option(None, "--start", "-s", help="First port of the range (default 0)."),
    end: Optional[int] = typer.Option(None, "--end", "-e", help="Last port of the range (default 65535)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file."),
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", exists=True, readable=True, help="YAML port snapshot to analyze instead of live OS state."),
    ipv6: Optional[bool] = typer.Option(None, "--ipv6/--no-ipv6", help="Include IPv6 sockets (default from config, else on)."),
    pause: bool = typer.Option(True, "--pause/--no-pause", help="Wait for Enter after each report.", show_default=True),
):
    """Print the open ports report, then the used ports report."""
    settings = load_config(config)
    _check_sections(settings.sections)
    analyzer = _build_analyzer(settings, start, end, snapshot, ipv6)

    for name in settings.sections:
        typer.echo(render_listing(analyzer.listing(name)), nl=False)
        if pause:
            _wait_for_enter()


@app.command()
def show(
    sections: List[str] = typer.Argument(..., help=f"Sections to print: {', '.join(SECTIONS)}."),
    start: Optional[int] = typer.Option(None, "--start", "-s", help="First port of the range (default 0)."),
    end: Optional[int] = typer.Option(None, "--end", "-e", help="Last port of the range (default 65535)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file."),
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", exists=True, readable=True, help="YAML port snapshot to analyze instead of live OS state."),
    ipv6: Optional[bool] = typer.Option(None, "--ipv6/--no-ipv6", help="Include IPv6 sockets (default from config, else on)."),
    fmt: str = typer.Option("text", "--format", "-f", help="Output format: text or json."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report to this file instead of stdout."),
):
    """Print one or more port sections as text or JSON."""
    _check_sections(sections)
    if fmt not in {"text", "json"}:
        typer.echo(f"Unknown format '{fmt}'. Expected text or json.", err=True)
        raise typer.Exit(2)

    settings = load_config(config)
    analyzer = _build_analyzer(settings, start, end, snapshot, ipv6)

    result = ReportModel(
        generated_at=now_utc(),
        port_range=analyzer.port_range,
        sections=[analyzer.listing(name) for name in sections],
    )
    text = render_json(result) + "\n" if fmt == "json" else render_text(result, separator="\n")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Written: {output}")
    else:
        typer.echo(text, nl=False)


def main():
    app()


if __name__ == "__main__":
    main()

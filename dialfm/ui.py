"""UI display helpers — station tables, parsed requests, DJ scripts."""
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import APP_VERSION, WEB_HOST, WEB_PORT
from .request_parser import DJRequest
from .stations import STATIONS, current_show

console = Console()


def print_header():
    console.print(
        f"\n  [bold cyan]♪  dialfm[/bold cyan]"
        f"  [dim]v{APP_VERSION}[/dim]"
    )


def print_serving(host: str = WEB_HOST, port: int = WEB_PORT):
    console.print(f"  [green]●[/green] Listening on [bold]http://{host}:{port}[/bold]  [dim](Ctrl+C to stop)[/dim]")


def print_stations():
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("id", style="cyan")
    table.add_column("freq", justify="right")
    table.add_column("station")
    table.add_column("dj")
    table.add_column("on air now", style="dim")
    table.add_column("years", justify="right")
    for s in STATIONS:
        table.add_row(
            s.id,
            s.frequency,
            f"[bold]{s.label}[/bold] [dim]{s.tagline}[/dim]",
            f"{s.dj.name} ({s.dj.tone})",
            current_show(s).name,
            f"{s.year_range[0]}–{s.year_range[1]}",
        )
    console.print(table)


def print_voices(voices: list[dict]):
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("voice", style="cyan")
    table.add_column("gender")
    table.add_column("locale")
    for v in voices:
        table.add_row(v["ShortName"], v["Gender"], v["Locale"])
    console.print(table)


def print_request(text: str, request: Optional[DJRequest]):
    if request is None:
        console.print(f"  [yellow]?[/yellow]  Nothing recognisable in [italic]{text!r}[/italic]")
        return
    lines = [f"  [bold]{request.label}[/bold]  [dim]({request.type})[/dim]"]
    if request.year_range:
        lines.append(f"  years   {request.year_range[0]}–{request.year_range[1]}")
    if request.genre_boost:
        lines.append(f"  genres  {', '.join(request.genre_boost)}")
    if request.energy_range:
        lines.append(f"  energy  {request.energy_range[0]:.1f}–{request.energy_range[1]:.1f}")
    if request.artist_search:
        lines.append(f"  artist  {request.artist_search}")
    if request.discovery:
        lines.append("  discovery mode")
    lines.append(f"  [dim]expires after {request.expires_after_tracks} tracks[/dim]")
    console.print(Panel("\n".join(lines), title="request", border_style="cyan", expand=False))


def print_script(segment: str, markup: str, spoken: str):
    console.print(Panel(
        f"[dim]{_escape(markup)}[/dim]\n\n{_escape(spoken)}",
        title=segment,
        border_style="magenta",
        expand=False,
    ))


def _escape(text: str) -> str:
    return text.replace("[", r"\[")

"""CLI entry point for the match-data gateways.

Usage:
    python -m scoreline.ingestion.runner match-data <stgAzuroId>
    python -m scoreline.ingestion.runner h2h <homeTeamId> <awayTeamId> --sport basketball --league nba
    python -m scoreline.ingestion.runner lineup <stgAzuroId>
    python -m scoreline.ingestion.runner parse-score '{"score": {"current": "2 - 1"}}' --sport football
    python -m scoreline.ingestion.runner live-stats '{"scoreBoard": {"goals": {"h": 1, "g": 0}, "time": "54"}}'
    python -m scoreline.ingestion.runner serve --port 8000
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from scoreline.models.gateway import GatewayResponse
from scoreline.models.scores import NormalizedScore

app = typer.Typer(help="Scoreline match-data gateway CLI")
console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_result(title: str, result: GatewayResponse, show_json: bool) -> None:
    body = result.body
    color = "green" if result.status_code == 200 and "error" not in body else "yellow"
    if result.status_code >= 400:
        color = "red"

    table = Table(title=title)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Status", f"[{color}]{result.status_code}[/{color}]")
    for key in ("source", "error", "reason", "warning", "matchId", "sportSlug"):
        if body.get(key) is not None:
            table.add_row(key, str(body[key]))
    console.print(table)

    if show_json:
        console.print_json(json.dumps(body, default=str))
    if result.status_code >= 400:
        raise typer.Exit(1)


@app.command("match-data")
def match_data(
    stg_azuro_id: str = typer.Argument(..., help="stg_azuro_games id"),
    show_json: bool = typer.Option(False, "--json", help="Print the full response body"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Fetch (or serve cached) provider data for a match."""
    _setup_logging(log_level)
    from scoreline.ingestion.match_data import fetch_match_data

    console.print(f"[cyan]▶ Fetching match data for {stg_azuro_id}...[/cyan]")
    result = fetch_match_data(stg_azuro_id)
    body = result.body
    _print_result("Match Data", result, show_json)
    if result.status_code == 200:
        console.print(
            f"  [green]✓ events={len(body.get('events') or [])} "
            f"statistics={'yes' if body.get('statistics') else 'no'} "
            f"states={'yes' if body.get('states') else 'no'}[/green]"
        )


@app.command()
def h2h(
    home_team_id: str = typer.Argument(..., help="Internal home team id"),
    away_team_id: str = typer.Argument(..., help="Internal away team id"),
    limit: int = typer.Option(5, help="Maximum meetings to return"),
    sport: str = typer.Option("football", help="Sport slug (football, nba, hockey, cricket, ...)"),
    league: Optional[str] = typer.Option(None, "--league", help="League slug (selects nba/nhl routes)"),
    show_json: bool = typer.Option(False, "--json", help="Print the full response body"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Head-to-head summary for two teams."""
    _setup_logging(log_level)
    from scoreline.ingestion.h2h import fetch_h2h

    result = fetch_h2h(home_team_id, away_team_id, limit=limit, sport=sport, league_slug=league)
    _print_result("Head to Head", result, show_json)

    summary = result.body.get("summary")
    if summary:
        console.print(
            f"  [green]✓ home={summary['homeWins']} draws={summary['draws']} "
            f"away={summary['awayWins']} total={summary['totalMatches']}[/green]"
        )
    matches = result.body.get("matches") or []
    if matches:
        table = Table(title="Meetings")
        table.add_column("Date")
        table.add_column("Home")
        table.add_column("Score", justify="center")
        table.add_column("Away")
        for m in matches:
            table.add_row(
                str(m.get("date") or ""),
                m["homeTeam"]["name"],
                f"{m['homeScore']} - {m['awayScore']}",
                m["awayTeam"]["name"],
            )
        console.print(table)


@app.command()
def lineup(
    stg_azuro_id: str = typer.Argument(..., help="stg_azuro_games id"),
    show_json: bool = typer.Option(False, "--json", help="Print the full response body"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Fetch (or serve cached) lineups for a match."""
    _setup_logging(log_level)
    from scoreline.ingestion.lineups import fetch_match_lineup

    result = fetch_match_lineup(stg_azuro_id)
    _print_result("Lineups", result, show_json)
    for key in ("homeTeam", "awayTeam"):
        team = result.body.get(key)
        if team:
            starters = sum(len(row) if isinstance(row, list) else 1 for row in team["initialLineup"])
            console.print(
                f"  [green]✓ {team['name']}: starters={starters} "
                f"substitutes={len(team['substitutes'])}[/green]"
            )


def _read_json(value: str, what: str) -> Any:
    """Decode a JSON literal, or the contents of the file it names."""
    if value.lstrip().startswith(("{", "[")):
        raw = value
    else:
        try:
            raw = Path(value).read_text(encoding="utf-8")
        except OSError as e:
            console.print(f"[red]Cannot read {value}: {e}[/red]")
            raise typer.Exit(1)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid {what} JSON: {e}[/red]")
        raise typer.Exit(1)


def _print_breakdown(score: NormalizedScore) -> None:
    if not score.breakdown:
        return
    table = Table(title="Breakdown")
    table.add_column("Period")
    table.add_column("Home", justify="right")
    table.add_column("Away", justify="right")
    for p in score.breakdown:
        table.add_row(p.label, str(p.home), str(p.away))
    console.print(table)


@app.command("parse-score")
def parse_score(
    states: str = typer.Argument(..., help="States JSON literal or path to a JSON file"),
    sport: str = typer.Option("football", help="Sport slug"),
) -> None:
    """Parse a match ``states`` blob into a normalized score."""
    from scoreline.sports.states import parse_states_score

    score = parse_states_score(_read_json(states, "states"), sport)
    if score is None:
        console.print("[dim]No score could be parsed.[/dim]")
        return

    console.print(f"[bold]{score.home} - {score.away}[/bold]")
    _print_breakdown(score)


@app.command("live-stats")
def live_stats(
    statistics: str = typer.Argument(..., help="Live statistics JSON literal or path to a JSON file"),
    sport: str = typer.Option("football", help="Sport slug"),
    is_live: bool = typer.Option(True, "--live/--not-live", help="Whether the match is in play"),
    states: Optional[str] = typer.Option(None, "--states", help="States JSON shown when live numbers are not"),
    show_json: bool = typer.Option(False, "--json", help="Print the extracted live stats"),
) -> None:
    """Show the live scoreboard a client would render for a statistics blob."""
    from scoreline.sports.live import (
        extract_live_stats,
        format_game_time,
        select_display_score,
        select_renderer,
    )
    from scoreline.sports.states import parse_states_score

    blob = _read_json(statistics, "statistics")
    parsed = parse_states_score(_read_json(states, "states"), sport) if states else None
    live = extract_live_stats(blob if isinstance(blob, dict) else {}, sport, is_available=True)

    renderer = select_renderer(sport, live) if is_live else None
    score = select_display_score(sport, is_live, live, parsed)
    clock = format_game_time(sport, is_live, live)

    table = Table(title="Live Score")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Renderer", renderer or "-")
    table.add_row("Score", f"{score.home} - {score.away}" if score else "-")
    table.add_row("Time", clock or "-")
    console.print(table)
    if score is not None:
        _print_breakdown(score)
    if show_json:
        console.print_json(live.model_dump_json(exclude_none=True))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default: settings)"),
) -> None:
    """Run the HTTP gateways with uvicorn."""
    import uvicorn

    from scoreline.config import get_settings

    level = log_level or get_settings().log_level
    _setup_logging(level)
    console.print(f"[bold]Serving on[/bold] http://{host}:{port}")
    uvicorn.run("scoreline.web.app:app", host=host, port=port, log_level=level.lower())


if __name__ == "__main__":
    app()

"""Main CLI interface for the cricket scorer."""

import logging
from typing import Optional

import pydantic
import typer
from loguru import logger
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import settings
from ..coordinator import MatchCoordinator
from ..database import create_tables, drop_tables, get_database_engine, get_session_factory, session_scope
from ..exceptions import ScoringError
from ..models import TeamSide, TossDecision, WicketType
from ..roster import PlayerRegistry
from ..schemas import BallEventCreate, MatchCreate
from ..scoring import ScoringEngine
from ..scoring.state_machine import display_overs
from ..stats import get_player_rankings

# Initialize rich console
console = Console()


# Configure logging
def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Setup logging configuration; loguru output goes through the same handlers."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    
    console_handler = RichHandler(console=console, show_time=True, show_path=False)
    console_handler.setLevel(log_level)
    
    handlers = [console_handler]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    
    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True
    )
    
    logger.remove()
    for handler in handlers:
        logger.add(handler, level=log_level, format="{message}")


app = typer.Typer(
    name="cricket-scorer",
    help="Cricket Scorer - ball-by-ball scoring and player statistics",
    no_args_is_help=True
)

# Global state
app_state = {}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    db_url: Optional[str] = typer.Option(None, "--db-url", envvar="DB_URL", help="SQLAlchemy database URL"),
):
    """Cricket Scorer - ball-by-ball scoring and player statistics."""
    log_level = "DEBUG" if verbose else settings.logging.level
    setup_logging(log_level, log_file or settings.logging.file)
    
    engine = get_database_engine(db_url)
    session_factory = get_session_factory(engine)
    app_state["engine"] = engine
    app_state["session_factory"] = session_factory
    app_state["scoring"] = ScoringEngine(session_factory)
    app_state["coordinator"] = MatchCoordinator(session_factory)
    app_state["registry"] = PlayerRegistry(session_factory)


def _fail(e: Exception):
    console.print(f"[red]❌ {e}[/red]")
    raise typer.Exit(1)


def _print_innings(innings, ledger=None):
    console.print(
        f"[bold]Innings {innings.innings_number}[/bold] (team {innings.team.value}): "
        f"[green]{innings.display_score}[/green] in {innings.display_overs} overs "
        f"- {innings.status.value}"
        + (f", target {innings.target}" if innings.target is not None else "")
    )
    if ledger:
        table = Table(title="Ball by ball")
        table.add_column("#", style="cyan")
        table.add_column("Ball", style="magenta")
        table.add_column("Batter", style="green")
        table.add_column("Bowler", style="green")
        table.add_column("Outcome", style="yellow")
        for event in ledger:
            outcome = event.display_text
            if event.is_wicket and event.wicket_type is not None:
                outcome += f" ({event.wicket_type.display_name})"
            table.add_row(str(event.ball_sequence), event.label, str(event.batter_id), str(event.bowler_id), outcome)
        console.print(table)


@app.command("setup-db")
def setup_db(force: bool = typer.Option(False, "--force", help="Force recreation of tables")):
    """Initialize database schema."""
    console.print("[bold]Setting up database schema...[/bold]")
    try:
        if force:
            console.print("Dropping existing tables...")
            drop_tables(app_state["engine"])
        create_tables(app_state["engine"])
        console.print("[green]✅ Database schema initialized successfully![/green]")
    except Exception as e:
        console.print(f"[red]❌ Database setup failed: {e}[/red]")
        raise typer.Exit(1)


@app.command("add-player")
def add_player(
    name: str = typer.Argument(..., help="Player name"),
    pool_id: Optional[str] = typer.Option(None, "--pool", help="Player pool ID"),
):
    """Register a player with zeroed statistics."""
    try:
        player = app_state["registry"].add_player(name, pool_id=pool_id)
    except ScoringError as e:
        _fail(e)
    console.print(f"[green]✅ Player {player.id}: {player.name}[/green]")


@app.command("new-match")
def new_match(
    team_a: str = typer.Option(..., "--team-a", help="Team A name"),
    team_b: str = typer.Option(..., "--team-b", help="Team B name"),
    overs: int = typer.Option(..., "--overs", help="Overs per innings"),
    two_innings: bool = typer.Option(False, "--two-innings", help="Each side bats twice"),
    wide_runs: bool = typer.Option(True, "--wide-runs/--no-wide-runs", help="Credit one run per wide/no-ball"),
    pool_id: Optional[str] = typer.Option(None, "--pool", help="Player pool ID"),
    user: str = typer.Option(..., "--as", envvar="SCORER_USER", help="Acting user"),
):
    """Create a match; the acting user becomes its scorer."""
    try:
        data = MatchCreate(
            pool_id=pool_id,
            created_by=user,
            team_a_name=team_a,
            team_b_name=team_b,
            overs_per_innings=overs,
            two_innings=two_innings,
            wide_no_ball_runs=wide_runs,
        )
        match = app_state["coordinator"].create_match(data)
    except (ScoringError, pydantic.ValidationError) as e:
        _fail(e)
    console.print(f"[green]✅ Match {match.id}: {match.team_a_name} vs {match.team_b_name}[/green]")


@app.command("add-to-team")
def add_to_team(
    match_id: int = typer.Argument(..., help="Match ID"),
    player_id: int = typer.Argument(..., help="Player ID"),
    side: TeamSide = typer.Argument(..., help="Team side"),
    captain: bool = typer.Option(False, "--captain", help="Mark as captain"),
):
    """Add a player to one side of a match."""
    try:
        member = app_state["coordinator"].add_player_to_team(match_id, player_id, side, is_captain=captain)
    except ScoringError as e:
        _fail(e)
    console.print(f"[green]✅ Membership {member.id}: player {player_id} in team {side.value}[/green]")


@app.command("batting-order")
def batting_order(
    membership_id: int = typer.Argument(..., help="Team membership ID"),
    order: int = typer.Argument(..., help="Batting position"),
):
    """Set a player's batting position."""
    try:
        app_state["coordinator"].set_batting_order(membership_id, order)
    except ScoringError as e:
        _fail(e)
    console.print("[green]✅ Batting order updated[/green]")


@app.command("toss")
def toss(
    match_id: int = typer.Argument(..., help="Match ID"),
    winner: TeamSide = typer.Argument(..., help="Toss winner"),
    decision: TossDecision = typer.Argument(..., help="bat or field"),
):
    """Record the toss."""
    try:
        app_state["coordinator"].set_toss(match_id, winner, decision)
    except ScoringError as e:
        _fail(e)
    console.print(f"[green]✅ Team {winner.value} won the toss and chose to {decision.value}[/green]")


@app.command("start-innings")
def start_innings(
    match_id: int = typer.Argument(..., help="Match ID"),
    side: TeamSide = typer.Argument(..., help="Batting side"),
    target: Optional[int] = typer.Option(None, "--target", help="Runs needed to win"),
    chase: bool = typer.Option(False, "--chase", help="Set target from the first innings"),
):
    """Start an innings."""
    scoring = app_state["scoring"]
    try:
        if chase and target is None:
            target = scoring.chase_target(match_id)
        innings = scoring.start_innings(match_id, side, target=target)
    except ScoringError as e:
        _fail(e)
    console.print(f"[green]✅ Innings {innings.id} started (innings {innings.innings_number}, team {side.value})[/green]")


@app.command("set-batters")
def set_batters(
    innings_id: int = typer.Argument(..., help="Innings ID"),
    batter1: int = typer.Argument(..., help="Striker player ID"),
    batter2: int = typer.Argument(..., help="Non-striker player ID"),
):
    """Set the two batters at the crease."""
    try:
        app_state["scoring"].set_batters(innings_id, batter1, batter2)
    except ScoringError as e:
        _fail(e)
    console.print("[green]✅ Batters set[/green]")


@app.command("set-bowler")
def set_bowler(
    innings_id: int = typer.Argument(..., help="Innings ID"),
    bowler: int = typer.Argument(..., help="Bowler player ID"),
):
    """Set the current bowler."""
    try:
        app_state["scoring"].set_bowler(innings_id, bowler)
    except ScoringError as e:
        _fail(e)
    console.print("[green]✅ Bowler set[/green]")


@app.command("ball")
def ball(
    innings_id: int = typer.Argument(..., help="Innings ID"),
    runs: int = typer.Option(0, "--runs", "-r", help="Bat runs"),
    batter: Optional[int] = typer.Option(None, "--batter", help="Striker (defaults to batter 1)"),
    bowler: Optional[int] = typer.Option(None, "--bowler", help="Bowler (defaults to current bowler)"),
    wide: bool = typer.Option(False, "--wide", help="Wide"),
    no_ball: bool = typer.Option(False, "--no-ball", help="No-ball"),
    wicket: Optional[WicketType] = typer.Option(None, "--wicket", help="Dismissal type"),
    run_out_batter: Optional[int] = typer.Option(None, "--run-out-batter", help="Batter run out"),
    grant_without_ball: bool = typer.Option(False, "--gwb", help="Grant without ball"),
    expected_sequence: Optional[int] = typer.Option(None, "--expect", help="Fail unless this is the next ball number"),
    user: str = typer.Option(..., "--as", envvar="SCORER_USER", help="Acting user"),
):
    """Record one delivery."""
    scoring = app_state["scoring"]
    try:
        innings = scoring.get_innings(innings_id)
        proposed = BallEventCreate(
            batter_id=batter if batter is not None else innings.current_batter1_id,
            bowler_id=bowler if bowler is not None else innings.current_bowler_id,
            runs_scored=runs,
            is_wide=wide,
            is_no_ball=no_ball,
            is_wicket=wicket is not None,
            wicket_type=wicket,
            run_out_batter_id=run_out_batter,
            grant_without_ball=grant_without_ball,
        )
        event = scoring.record_ball(innings_id, proposed, user, expected_sequence=expected_sequence)
        innings = scoring.get_innings(innings_id)
    except (ScoringError, pydantic.ValidationError) as e:
        _fail(e)
    console.print(f"[green]✅ Ball #{event.ball_sequence} ({event.label}): {event.display_text}[/green]")
    _print_innings(innings)


@app.command("undo")
def undo(
    innings_id: int = typer.Argument(..., help="Innings ID"),
    user: str = typer.Option(..., "--as", envvar="SCORER_USER", help="Acting user"),
):
    """Remove the last recorded ball."""
    scoring = app_state["scoring"]
    try:
        event = scoring.undo_last_ball(innings_id, user)
        innings = scoring.get_innings(innings_id)
    except ScoringError as e:
        _fail(e)
    console.print(f"[yellow]↩ Removed ball #{event.ball_sequence} ({event.label}): {event.display_text}[/yellow]")
    _print_innings(innings)


@app.command("scorecard")
def scorecard(innings_id: int = typer.Argument(..., help="Innings ID")):
    """Show innings totals and the ball-by-ball ledger."""
    scoring = app_state["scoring"]
    try:
        innings = scoring.get_innings(innings_id)
        ledger = scoring.get_ledger(innings_id)
    except ScoringError as e:
        _fail(e)
    _print_innings(innings, ledger)


@app.command("rankings")
def rankings(
    category: str = typer.Option("runs", "--category", "-c", help="runs, wickets or average"),
    pool_id: Optional[str] = typer.Option(None, "--pool", help="Player pool ID"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Number of players"),
):
    """Show player rankings."""
    with session_scope(app_state["session_factory"]) as session:
        rows = get_player_rankings(session, category=category, pool_id=pool_id, limit=limit)
    
    table = Table(title=f"Rankings by {category}")
    table.add_column("#", style="cyan")
    table.add_column("Player", style="green")
    table.add_column("Inns", style="magenta")
    table.add_column("Runs", style="yellow")
    table.add_column("Avg", style="yellow")
    table.add_column("SR", style="yellow")
    table.add_column("Wkts", style="red")
    table.add_column("Econ", style="red")
    for row in rows:
        table.add_row(
            str(row.rank),
            row.player_name,
            str(row.innings),
            str(row.runs),
            f"{row.batting_average:.2f}",
            f"{row.strike_rate:.2f}",
            str(row.wickets),
            f"{row.economy:.2f}",
        )
    console.print(table)


@app.command("transfer")
def transfer(
    match_id: int = typer.Argument(..., help="Match ID"),
    to_user: str = typer.Argument(..., help="User to hand scoring to"),
):
    """Request a scoring handoff."""
    try:
        request = app_state["coordinator"].transfer_match(match_id, to_user)
    except ScoringError as e:
        _fail(e)
    console.print(f"[green]✅ Transfer {request.id} requested: {request.from_user_id} → {request.to_user_id}[/green]")


@app.command("accept-transfer")
def accept_transfer(
    transfer_id: int = typer.Argument(..., help="Transfer ID"),
    user: Optional[str] = typer.Option(None, "--as", envvar="SCORER_USER", help="Acting user"),
):
    """Accept a scoring handoff."""
    try:
        accepted = app_state["coordinator"].accept_transfer(transfer_id, caller_id=user)
    except ScoringError as e:
        _fail(e)
    console.print(f"[green]✅ {accepted.to_user_id} now scores match {accepted.match_id}[/green]")


@app.command("complete-match")
def complete_match(match_id: int = typer.Argument(..., help="Match ID")):
    """Complete a match and print its summary."""
    try:
        summary = app_state["coordinator"].complete_match(match_id)
    except ScoringError as e:
        _fail(e)
    
    table = Table(title=f"{summary.team_a_name} vs {summary.team_b_name}")
    table.add_column("Innings", style="cyan")
    table.add_column("Team", style="magenta")
    table.add_column("Score", style="green")
    table.add_column("Overs", style="yellow")
    for entry in summary.innings_summary:
        table.add_row(str(entry.innings_number), entry.team.value, f"{entry.runs}/{entry.wickets}", display_overs(*divmod(round(entry.overs * 6), 6)))
    console.print(table)
    console.print(f"[green]✅ Match {match_id} completed ({summary.total_balls} balls)[/green]")

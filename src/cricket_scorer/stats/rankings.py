"""Player rankings derived from cumulative statistics."""

from typing import Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Player, PlayerStats
from ..schemas import PlayerRanking

SORT_KEYS: Dict[str, Callable[[PlayerStats], float]] = {
    "runs": lambda s: s.runs,
    "wickets": lambda s: s.wickets,
    "average": lambda s: s.runs / max(s.innings, 1),
}


def get_player_rankings(
    session: Session,
    category: str = "runs",
    pool_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[PlayerRanking]:
    """Top players by runs, wickets or batting average; unknown categories rank by runs."""
    sort_key = SORT_KEYS.get(category, SORT_KEYS["runs"])
    limit = limit or settings.scoring.rankings_limit
    
    query = select(Player, PlayerStats).join(PlayerStats, PlayerStats.player_id == Player.id)
    if pool_id is not None:
        query = query.where(Player.pool_id == pool_id)
    rows = session.execute(query).all()
    
    # Stable sort: ties keep player id order
    rows = sorted(rows, key=lambda row: row[0].id)
    rows.sort(key=lambda row: sort_key(row[1]), reverse=True)
    
    return [
        PlayerRanking(
            rank=position,
            player_name=player.name,
            player_id=player.id,
            matches=stats.matches,
            innings=stats.innings,
            runs=stats.runs,
            balls_faced=stats.balls_faced,
            fours=stats.fours,
            sixes=stats.sixes,
            wickets=stats.wickets,
            balls_bowled=stats.balls_bowled,
            overs_bowled=stats.overs_bowled,
            runs_conceded=stats.runs_conceded,
            batting_average=stats.batting_average,
            strike_rate=stats.strike_rate,
            bowling_average=stats.bowling_average,
            economy=stats.economy,
        )
        for position, (player, stats) in enumerate(rows[:limit], start=1)
    ]

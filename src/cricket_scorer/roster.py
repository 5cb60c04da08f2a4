"""Player registry: players and their zeroed statistics records."""

from typing import List, Optional

from loguru import logger
from sqlalchemy import select, or_
from sqlalchemy.orm import sessionmaker

from .database import session_scope
from .exceptions import NotFoundError, ValidationError, translate_store_errors
from .models import BallEvent, BattingHand, BowlingHand, BowlingStyle, Player, PlayerStats, StatContribution, STAT_FIELDS
from .schemas import PlayerStatsResponse


class PlayerRegistry:
    """Creates and removes players, keeping one ``PlayerStats`` row per player."""
    
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
    
    def add_player(
        self,
        name: str,
        pool_id: Optional[str] = None,
        batting_hand: Optional[BattingHand] = None,
        bowling_hand: Optional[BowlingHand] = None,
        bowling_style: Optional[BowlingStyle] = None,
        linked_user_id: Optional[str] = None,
    ) -> Player:
        name = name.strip()
        if not name:
            raise ValidationError("Player name must not be empty")
        with translate_store_errors(), session_scope(self.session_factory) as session:
            player = Player(
                name=name,
                pool_id=pool_id,
                batting_hand=batting_hand,
                bowling_hand=bowling_hand,
                bowling_style=bowling_style,
                linked_user_id=linked_user_id,
            )
            session.add(player)
            session.flush()
            session.add(PlayerStats(player_id=player.id, **dict.fromkeys(STAT_FIELDS, 0)))
        
        logger.info(f"Added player {player.id} '{player.name}' with zeroed stats")
        return player
    
    def remove_player(self, player_id: int) -> None:
        """Delete a player and their stats. Players with recorded balls stay."""
        with translate_store_errors(), session_scope(self.session_factory) as session:
            player = session.get(Player, player_id)
            if player is None:
                raise NotFoundError(f"Player {player_id} not found")
            in_ledger = session.execute(
                select(BallEvent.id)
                .where(
                    or_(
                        BallEvent.batter_id == player_id,
                        BallEvent.bowler_id == player_id,
                        BallEvent.run_out_batter_id == player_id,
                    )
                )
                .limit(1)
            ).first()
            credited = session.execute(
                select(StatContribution.id).where(StatContribution.player_id == player_id).limit(1)
            ).first()
            if in_ledger is not None or credited is not None:
                raise ValidationError(f"Player {player_id} appears in recorded matches and cannot be removed")
            session.delete(player)
        
        logger.info(f"Removed player {player_id} and their stats")
    
    def link_player_to_user(self, player_id: int, user_id: Optional[str]) -> Player:
        with translate_store_errors(), session_scope(self.session_factory) as session:
            player = session.get(Player, player_id)
            if player is None:
                raise NotFoundError(f"Player {player_id} not found")
            player.linked_user_id = user_id
        return player
    
    def list_players(self, pool_id: Optional[str] = None) -> List[Player]:
        with session_scope(self.session_factory) as session:
            query = select(Player).order_by(Player.name)
            if pool_id is not None:
                query = query.where(Player.pool_id == pool_id)
            return list(session.execute(query).scalars().all())
    
    def get_stats(self, player_id: int) -> PlayerStatsResponse:
        with session_scope(self.session_factory) as session:
            stats = session.execute(
                select(PlayerStats).where(PlayerStats.player_id == player_id)
            ).scalar_one_or_none()
            if stats is None:
                raise NotFoundError(f"No stats for player {player_id}")
            return PlayerStatsResponse.model_validate(stats)

import uuid
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, DateTime, JSON,
    ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

def _new_id() -> str:
    return str(uuid.uuid4())

class GameStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class WinCondition(str, Enum):
    HIGHEST_SCORE = "highestScore"
    LOWEST_SCORE = "lowestScore"

class Game(Base):
    __tablename__ = 'games'
    
    id = Column(String(64), primary_key=True, default=_new_id)
    game_name = Column(String(200), nullable=True)
    host_user_id = Column(String(128), nullable=False, index=True)
    
    # Plain user ids or "userId:displayName" tokens for anonymous participants
    player_ids = Column(JSON, nullable=False, default=list)
    rounds = Column(Integer, nullable=False, default=1)
    
    game_status = Column(String(20), nullable=False, default=GameStatus.ACTIVE.value)
    win_condition = Column(String(20), nullable=True)  # None = not eligible for wins
    
    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    
    # Relationships
    scores = relationship("Score", back_populates="game")
    
    __table_args__ = (
        CheckConstraint("rounds >= 1", name="ck_games_rounds_positive"),
    )
    
    def __repr__(self):
        return f"<Game(id='{self.id}', name='{self.game_name}', status='{self.game_status}')>"

class Score(Base):
    __tablename__ = 'scores'
    
    id = Column(String(64), primary_key=True, default=_new_id)
    game_id = Column(String(64), ForeignKey('games.id'), nullable=False, index=True)
    player_id = Column(String(256), nullable=False, index=True)
    round_number = Column(Integer, nullable=False)  # 1-based
    score = Column(Integer, nullable=False, default=0)
    
    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    
    # Relationships
    game = relationship("Game", back_populates="scores")
    
    # One score per player per round of a game
    __table_args__ = (
        UniqueConstraint('game_id', 'player_id', 'round_number', name='uq_scores_game_player_round'),
        CheckConstraint("round_number >= 1", name="ck_scores_round_positive"),
    )
    
    def __repr__(self):
        return f"<Score(game='{self.game_id}', player='{self.player_id}', round={self.round_number}, score={self.score})>"

class User(Base):
    __tablename__ = 'users'
    
    id = Column(String(128), primary_key=True, default=_new_id)
    username = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    
    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    
    def __repr__(self):
        return f"<User(id='{self.id}', username='{self.username}')>"

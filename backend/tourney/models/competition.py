from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.competition_team import CompetitionTeam
    from tourney.models.feedback import Feedback
    from tourney.models.match import Match


class Competition(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    sport: str
    venue: str
    description: str
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    max_teams: int
    status: str = Field(default="upcoming")  # "upcoming" | "ongoing" | "completed" | "cancelled"
    organizer_id: str = Field(index=True)  # principal id from the identity gateway
    rules: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    prizes: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))

    # Bracket snapshot (see services/bracket.py for the shape); null until planned
    bracket_json: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    winner_team_id: Optional[int] = Field(default=None, foreign_key="team.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    registrations: List["CompetitionTeam"] = Relationship(back_populates="competition")
    matches: List["Match"] = Relationship(back_populates="competition")
    feedback: List["Feedback"] = Relationship(back_populates="competition")

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.competition import Competition


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competition.id", index=True)
    round_number: int
    match_number: int

    team1_id: int = Field(foreign_key="team.id")
    team1_score: int = Field(default=0)
    team2_id: int = Field(foreign_key="team.id")
    team2_score: int = Field(default=0)
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")

    status: str = Field(default="scheduled")  # "scheduled" | "in_progress" | "completed" | "cancelled"
    start_time: datetime
    end_time: Optional[datetime] = Field(default=None)
    started_at: Optional[datetime] = Field(default=None)
    venue: str
    notes: Optional[str] = Field(default=None)
    highlights: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    referee_id: Optional[str] = Field(default=None)

    # True when the row mirrors a bracket slot (created by planning/advancement);
    # manually created matches do not advance anyone
    in_bracket: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    competition: "Competition" = Relationship(back_populates="matches")

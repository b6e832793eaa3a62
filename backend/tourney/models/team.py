from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.competition_team import CompetitionTeam
    from tourney.models.team_player import TeamPlayer


class Team(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    description: Optional[str] = None
    captain_id: str = Field(index=True)  # principal id of the creating user
    logo: str = Field(default="default-team-logo.png")
    status: str = Field(default="active")  # "active" | "inactive"
    wins: int = Field(default=0)
    losses: int = Field(default=0)
    draws: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    registrations: List["CompetitionTeam"] = Relationship(back_populates="team")
    players: List["TeamPlayer"] = Relationship(
        back_populates="team", sa_relationship_kwargs={"order_by": "TeamPlayer.id"}
    )

    @property
    def total_matches(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def win_percentage(self) -> float:
        total = self.total_matches
        return (self.wins / total) * 100 if total > 0 else 0.0

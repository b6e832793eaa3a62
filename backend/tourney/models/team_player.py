from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.team import Team


class TeamPlayer(SQLModel, table=True):
    """Roster entry: a user playing for a team. A user appears at most once per team."""

    __table_args__ = (SAUniqueConstraint("team_id", "user_id", name="uq_team_player"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="team.id", index=True)
    user_id: str = Field(index=True)  # principal id from the identity gateway
    position: str = Field(default="")
    jersey_number: int = Field(default=0)
    joined_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    team: "Team" = Relationship(back_populates="players")

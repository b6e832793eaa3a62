from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.competition import Competition
    from tourney.models.team import Team


class CompetitionTeam(SQLModel, table=True):
    """Registration of a team in a competition. Roster order is id ascending."""

    __table_args__ = (SAUniqueConstraint("competition_id", "team_id", name="uq_competition_team"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competition.id", index=True)
    team_id: int = Field(foreign_key="team.id", index=True)
    registered_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    competition: "Competition" = Relationship(back_populates="registrations")
    team: "Team" = Relationship(back_populates="registrations")

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.competition import Competition


class FeedbackCategory(str, Enum):
    organization = "organization"
    venue = "venue"
    scheduling = "scheduling"
    refereeing = "refereeing"
    other = "other"


class FeedbackStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    resolved = "resolved"


class Feedback(SQLModel, table=True):
    # One feedback per user per competition
    __table_args__ = (SAUniqueConstraint("user_id", "competition_id", name="uq_feedback_user_competition"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    competition_id: int = Field(foreign_key="competition.id", index=True)
    rating: int
    comment: str
    category: FeedbackCategory = Field(sa_column=Column(String, nullable=False))
    status: FeedbackStatus = Field(default=FeedbackStatus.pending, sa_column=Column(String, nullable=False))
    admin_response: str = Field(default="")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    competition: "Competition" = Relationship(back_populates="feedback")

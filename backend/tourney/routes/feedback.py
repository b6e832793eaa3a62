"""
Feedback API Routes
Participants rate a competition once; admins triage and respond.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from tourney.auth import ROLE_ADMIN, Principal, get_principal, require_roles
from tourney.database import get_session
from tourney.errors import AuthorizationError, ConflictError
from tourney.models.feedback import Feedback, FeedbackCategory, FeedbackStatus
from tourney.utils.guards import require_competition, require_feedback

logger = logging.getLogger(__name__)

router = APIRouter()


class FeedbackCreate(BaseModel):
    competition_id: int
    rating: int = Field(ge=1, le=5)
    comment: str = Field(max_length=500)
    category: FeedbackCategory

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("comment is required")
        return v.strip()


class FeedbackUpdate(BaseModel):
    status: Optional[FeedbackStatus] = None
    admin_response: Optional[str] = Field(default=None, max_length=1000)


class FeedbackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    competition_id: int
    rating: int
    comment: str
    category: FeedbackCategory
    status: FeedbackStatus
    admin_response: str
    created_at: datetime
    updated_at: datetime


@router.post("/feedback", response_model=FeedbackResponse, status_code=201)
def create_feedback(
    payload: FeedbackCreate,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
):
    """Submit feedback for a competition (one per user per competition)"""
    require_competition(session, payload.competition_id)

    existing = session.exec(
        select(Feedback).where(
            Feedback.user_id == principal.id,
            Feedback.competition_id == payload.competition_id,
        )
    ).first()
    if existing:
        raise ConflictError("You have already submitted feedback for this competition")

    feedback = Feedback(
        user_id=principal.id,
        competition_id=payload.competition_id,
        rating=payload.rating,
        comment=payload.comment,
        category=payload.category.value,
        status=FeedbackStatus.pending.value,
    )
    try:
        session.add(feedback)
        session.commit()
        session.refresh(feedback)
    except IntegrityError:
        session.rollback()
        raise ConflictError("You have already submitted feedback for this competition")

    logger.info("Feedback %d submitted for competition %d", feedback.id, feedback.competition_id)
    return FeedbackResponse.model_validate(feedback)


@router.get("/feedback", response_model=List[FeedbackResponse])
def list_feedback(
    competition_id: Optional[int] = Query(default=None),
    status: Optional[FeedbackStatus] = Query(default=None),
    category: Optional[FeedbackCategory] = Query(default=None),
    principal: Principal = Depends(require_roles(ROLE_ADMIN)),
    session: Session = Depends(get_session),
):
    """All feedback, newest first (admin only)"""
    query = select(Feedback)
    if competition_id is not None:
        query = query.where(Feedback.competition_id == competition_id)
    if status is not None:
        query = query.where(Feedback.status == status.value)
    if category is not None:
        query = query.where(Feedback.category == category.value)
    rows = session.exec(query.order_by(Feedback.created_at.desc(), Feedback.id.desc())).all()
    return [FeedbackResponse.model_validate(f) for f in rows]


@router.get("/feedback/{feedback_id}", response_model=FeedbackResponse)
def get_feedback(
    feedback_id: int,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
):
    feedback = require_feedback(session, feedback_id)
    if feedback.user_id != principal.id and not principal.is_admin:
        raise AuthorizationError("Not authorized to view this feedback")
    return FeedbackResponse.model_validate(feedback)


@router.put("/feedback/{feedback_id}", response_model=FeedbackResponse)
def update_feedback(
    feedback_id: int,
    payload: FeedbackUpdate,
    principal: Principal = Depends(require_roles(ROLE_ADMIN)),
    session: Session = Depends(get_session),
):
    """Set review status and/or the admin response"""
    feedback = require_feedback(session, feedback_id)
    if payload.status is not None:
        feedback.status = payload.status.value
    if payload.admin_response is not None:
        feedback.admin_response = payload.admin_response
    feedback.updated_at = datetime.utcnow()

    session.add(feedback)
    session.commit()
    session.refresh(feedback)
    return FeedbackResponse.model_validate(feedback)


@router.delete("/feedback/{feedback_id}")
def delete_feedback(
    feedback_id: int,
    principal: Principal = Depends(require_roles(ROLE_ADMIN)),
    session: Session = Depends(get_session),
):
    feedback = require_feedback(session, feedback_id)
    session.delete(feedback)
    session.commit()
    return {"message": "Feedback removed"}

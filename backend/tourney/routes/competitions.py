"""
Competition API Routes
CRUD for competitions plus team registration.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from tourney.auth import ROLE_ADMIN, ROLE_ORGANIZER, Principal, get_principal, require_roles
from tourney.database import get_session
from tourney.dependencies import get_coordinator
from tourney.errors import ConflictError, ValidationError
from tourney.models.competition import Competition
from tourney.models.competition_team import CompetitionTeam
from tourney.services.notifications import ENTITY_COMPETITION, EVENT_CREATE, EVENT_UPDATE
from tourney.services.tournament_coordinator import TournamentCoordinator, competition_payload
from tourney.utils.dates import to_naive_utc
from tourney.utils.guards import require_competition, require_organizer

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class CompetitionStatus(str, Enum):
    upcoming = "upcoming"
    ongoing = "ongoing"
    completed = "completed"
    cancelled = "cancelled"


class Prize(BaseModel):
    position: str
    prize: str


class CompetitionCreate(BaseModel):
    name: str
    sport: str
    venue: str
    description: str
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    max_teams: int = Field(ge=2)
    rules: Optional[List[str]] = None
    prizes: Optional[List[Prize]] = None
    status: CompetitionStatus = CompetitionStatus.upcoming

    @field_validator("name", "sport", "venue", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        return self


class CompetitionUpdate(BaseModel):
    name: Optional[str] = None
    sport: Optional[str] = None
    venue: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    registration_deadline: Optional[datetime] = None
    max_teams: Optional[int] = Field(default=None, ge=2)
    rules: Optional[List[str]] = None
    prizes: Optional[List[Prize]] = None
    status: Optional[CompetitionStatus] = None

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class CompetitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sport: str
    venue: str
    description: str
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    max_teams: int
    status: str
    organizer_id: str
    rules: Optional[List[str]] = None
    prizes: Optional[List[Prize]] = None
    winner_team_id: Optional[int] = None
    has_bracket: bool = False
    team_ids: List[int] = []
    created_at: datetime
    updated_at: datetime


class RegisterTeamRequest(BaseModel):
    team_id: int


def _to_response(session: Session, competition: Competition) -> CompetitionResponse:
    team_ids = session.exec(
        select(CompetitionTeam.team_id)
        .where(CompetitionTeam.competition_id == competition.id)
        .order_by(CompetitionTeam.id)
    ).all()
    response = CompetitionResponse.model_validate(competition)
    response.team_ids = list(team_ids)
    response.has_bracket = competition.bracket_json is not None
    return response


def _ensure_unique_name(session: Session, name: str, exclude_id: Optional[int] = None) -> None:
    existing = session.exec(select(Competition).where(Competition.name == name)).first()
    if existing and existing.id != exclude_id:
        raise ConflictError(f"Competition with name '{name}' already exists")


# ============================================================================
# Competition CRUD Endpoints
# ============================================================================


@router.get("/competitions", response_model=List[CompetitionResponse])
def list_competitions(
    status: Optional[CompetitionStatus] = Query(default=None),
    sport: Optional[str] = Query(default=None),
    team_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
):
    """List competitions, newest first. Optional filters: status, sport, registered team."""
    query = select(Competition)
    if status is not None:
        query = query.where(Competition.status == status.value)
    if sport:
        query = query.where(Competition.sport == sport)
    if team_id is not None:
        query = query.where(
            Competition.id.in_(select(CompetitionTeam.competition_id).where(CompetitionTeam.team_id == team_id))
        )
    competitions = session.exec(query.order_by(Competition.created_at.desc(), Competition.id.desc())).all()
    return [_to_response(session, c) for c in competitions]


@router.post("/competitions", response_model=CompetitionResponse, status_code=201)
def create_competition(
    payload: CompetitionCreate,
    principal: Principal = Depends(require_roles(ROLE_ORGANIZER, ROLE_ADMIN)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Create a competition organized by the calling principal"""
    _ensure_unique_name(session, payload.name)

    data = payload.model_dump()
    data["status"] = payload.status.value
    competition = Competition(**data, organizer_id=principal.id)
    try:
        session.add(competition)
        session.commit()
        session.refresh(competition)
    except IntegrityError:
        session.rollback()
        raise ConflictError(f"Competition with name '{payload.name}' already exists")

    coordinator.notify(EVENT_CREATE, ENTITY_COMPETITION, competition, competition_payload(competition))
    return _to_response(session, competition)


@router.get("/competitions/{competition_id}", response_model=CompetitionResponse)
def get_competition(competition_id: int, session: Session = Depends(get_session)):
    """Get a competition by ID"""
    return _to_response(session, require_competition(session, competition_id))


@router.put("/competitions/{competition_id}", response_model=CompetitionResponse)
def update_competition(
    competition_id: int,
    payload: CompetitionUpdate,
    principal: Principal = Depends(require_roles(ROLE_ORGANIZER, ROLE_ADMIN)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Partial update; only the organizer (or an admin) may edit"""
    competition = require_competition(session, competition_id)
    require_organizer(competition, principal, "update this competition")

    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] != competition.name:
        _ensure_unique_name(session, changes["name"], exclude_id=competition.id)
    if "status" in changes and changes["status"] is not None:
        changes["status"] = changes["status"].value

    start = changes.get("start_date") or competition.start_date
    end = changes.get("end_date") or competition.end_date
    if end < start:
        raise ValidationError("end_date must be >= start_date")

    for key, value in changes.items():
        setattr(competition, key, value)
    competition.updated_at = datetime.utcnow()

    session.add(competition)
    session.commit()
    session.refresh(competition)

    coordinator.notify(EVENT_UPDATE, ENTITY_COMPETITION, competition, competition_payload(competition))
    return _to_response(session, competition)


@router.delete("/competitions/{competition_id}")
def delete_competition(
    competition_id: int,
    principal: Principal = Depends(require_roles(ROLE_ORGANIZER, ROLE_ADMIN)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Delete a competition with its matches, registrations and feedback"""
    coordinator.delete_competition(session, competition_id, principal)
    return {"message": "Competition removed"}


# ============================================================================
# Registration
# ============================================================================


@router.post("/competitions/{competition_id}/register", response_model=CompetitionResponse)
def register_team(
    competition_id: int,
    payload: RegisterTeamRequest,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Register a team for a competition (any authenticated principal)"""
    coordinator.register_team(session, competition_id, payload.team_id)
    return _to_response(session, require_competition(session, competition_id))

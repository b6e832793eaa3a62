"""
Team Management API Routes
CRUD for teams, optional registration into a competition on create, and
player rosters.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from tourney.auth import ROLE_ORGANIZER, Principal, get_principal
from tourney.database import get_session
from tourney.dependencies import get_coordinator
from tourney.errors import AuthorizationError, ConflictError, NotFoundError, TourneyError, ValidationError
from tourney.models.competition import Competition
from tourney.models.competition_team import CompetitionTeam
from tourney.models.match import Match
from tourney.models.team import Team
from tourney.models.team_player import TeamPlayer
from tourney.services.notifications import ENTITY_TEAM, EVENT_CREATE, EVENT_DELETE, EVENT_UPDATE
from tourney.services.tournament_coordinator import TournamentCoordinator
from tourney.utils.guards import require_captain, require_team

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamCreateRequest(BaseModel):
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    competition_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class TeamUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ("active", "inactive"):
            raise ValueError("status must be 'active' or 'inactive'")
        return v


class PlayerCreateRequest(BaseModel):
    user_id: str
    position: str = ""
    jersey_number: int = Field(default=0, ge=0)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("user_id is required")
        return v.strip()


class TeamPlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    position: str
    jersey_number: int
    joined_at: datetime


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    captain_id: str
    logo: str
    status: str
    wins: int
    losses: int
    draws: int
    total_matches: int
    win_percentage: float
    created_at: datetime
    players: List[TeamPlayerResponse] = []


def _team_payload(team: Team) -> dict:
    return TeamResponse.model_validate(team).model_dump(mode="json")


def _ensure_unique_name(session: Session, name: str, exclude_id: Optional[int] = None) -> None:
    existing = session.exec(select(Team).where(Team.name == name)).first()
    if existing and existing.id != exclude_id:
        raise ConflictError("Team name already exists")


# ============================================================================
# Team CRUD Endpoints
# ============================================================================


@router.get("/teams", response_model=List[TeamResponse])
def get_teams(session: Session = Depends(get_session)):
    """Get all teams ordered by name"""
    teams = session.exec(select(Team).order_by(Team.name)).all()
    return [TeamResponse.model_validate(t) for t in teams]


@router.post("/teams", response_model=TeamResponse, status_code=201)
def create_team(
    request: TeamCreateRequest,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """
    Create a team captained by the calling principal.

    With competition_id the team is registered right away; if registration
    is refused the team is not kept.
    """
    _ensure_unique_name(session, request.name)

    team = Team(name=request.name, description=request.description, captain_id=principal.id)
    if request.logo:
        team.logo = request.logo
    try:
        session.add(team)
        session.commit()
        session.refresh(team)
    except IntegrityError:
        session.rollback()
        raise ConflictError("Team name already exists")

    if request.competition_id is not None:
        try:
            coordinator.register_team(session, request.competition_id, team.id)
        except TourneyError:
            session.rollback()
            session.delete(team)
            session.commit()
            raise

    coordinator.notify(EVENT_CREATE, ENTITY_TEAM, None, _team_payload(team), organizer_id=principal.id)
    return TeamResponse.model_validate(team)


@router.get("/teams/{team_id}", response_model=TeamResponse)
def get_team(team_id: int, session: Session = Depends(get_session)):
    """Get a team by ID"""
    return TeamResponse.model_validate(require_team(session, team_id))


@router.put("/teams/{team_id}", response_model=TeamResponse)
def update_team(
    team_id: int,
    request: TeamUpdateRequest,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Update a team's name, description, logo or status (captain or admin)"""
    team = require_team(session, team_id)
    require_captain(team, principal, "update this team")

    changes = request.model_dump(exclude_unset=True)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("name must not be empty")
        _ensure_unique_name(session, name, exclude_id=team.id)
        changes["name"] = name

    for key, value in changes.items():
        setattr(team, key, value)

    session.add(team)
    session.commit()
    session.refresh(team)

    coordinator.notify(EVENT_UPDATE, ENTITY_TEAM, None, _team_payload(team), organizer_id=principal.id)
    return TeamResponse.model_validate(team)


@router.delete("/teams/{team_id}")
def delete_team(
    team_id: int,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """
    Delete a team (captain or admin).

    Teams that already played matches, or that sit in a planned bracket
    (including a bye into a later round), are kept.
    """
    team = require_team(session, team_id)
    require_captain(team, principal, "delete this team")

    played = session.exec(
        select(Match).where((Match.team1_id == team_id) | (Match.team2_id == team_id))
    ).first()
    if played is not None:
        raise ConflictError("Team has matches and cannot be deleted")

    registrations = session.exec(select(CompetitionTeam).where(CompetitionTeam.team_id == team_id)).all()
    for registration in registrations:
        competition = session.get(Competition, registration.competition_id)
        if competition is not None and competition.bracket_json is not None:
            raise ConflictError("Team is part of a bracket and cannot be deleted")

    for registration in registrations:
        session.delete(registration)
    for player in session.exec(select(TeamPlayer).where(TeamPlayer.team_id == team_id)).all():
        session.delete(player)
    session.delete(team)
    session.commit()

    coordinator.notify(EVENT_DELETE, ENTITY_TEAM, None, {"team_id": team_id}, organizer_id=principal.id)
    return {"message": "Team removed"}


# ============================================================================
# Roster
# ============================================================================


def _require_roster_manager(team: Team, principal: Principal) -> None:
    """Captain, organizers and admins manage a roster."""
    if team.captain_id != principal.id and principal.role != ROLE_ORGANIZER and not principal.is_admin:
        raise AuthorizationError("Not authorized to manage players of this team")


@router.post("/teams/{team_id}/players", response_model=TeamResponse, status_code=201)
def add_player(
    team_id: int,
    request: PlayerCreateRequest,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Add a user to the team roster; a user can be listed once per team"""
    team = require_team(session, team_id)
    _require_roster_manager(team, principal)

    existing = session.exec(
        select(TeamPlayer).where(TeamPlayer.team_id == team_id, TeamPlayer.user_id == request.user_id)
    ).first()
    if existing is not None:
        raise ConflictError("User is already a member of this team")

    player = TeamPlayer(
        team_id=team_id,
        user_id=request.user_id,
        position=request.position.strip(),
        jersey_number=request.jersey_number,
    )
    try:
        session.add(player)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("User is already a member of this team")
    session.refresh(team)

    coordinator.notify(EVENT_UPDATE, ENTITY_TEAM, None, _team_payload(team), organizer_id=principal.id)
    return TeamResponse.model_validate(team)


@router.delete("/teams/{team_id}/players/{user_id}", response_model=TeamResponse)
def remove_player(
    team_id: int,
    user_id: str,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    team = require_team(session, team_id)
    _require_roster_manager(team, principal)

    player = session.exec(
        select(TeamPlayer).where(TeamPlayer.team_id == team_id, TeamPlayer.user_id == user_id)
    ).first()
    if player is None:
        raise NotFoundError("Player not found in team")

    session.delete(player)
    session.commit()
    session.refresh(team)

    coordinator.notify(EVENT_UPDATE, ENTITY_TEAM, None, _team_payload(team), organizer_id=principal.id)
    return TeamResponse.model_validate(team)

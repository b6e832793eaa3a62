"""
Match API Routes
Bracket generation, result submission, status changes and match queries.
All bracket mutation goes through the TournamentCoordinator.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session, select

from tourney.auth import ROLE_ADMIN, ROLE_ORGANIZER, Principal, require_roles
from tourney.database import get_session
from tourney.dependencies import get_coordinator
from tourney.errors import NotFoundError, ValidationError
from tourney.models.match import Match
from tourney.services.match_lifecycle import MatchStatus
from tourney.services.tournament_coordinator import TournamentCoordinator
from tourney.utils.dates import to_naive_utc
from tourney.utils.guards import require_competition, require_match

router = APIRouter()

ORGANIZER_ROLES = (ROLE_ORGANIZER, ROLE_ADMIN)


# ============================================================================
# Request/Response Models
# ============================================================================


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    competition_id: int
    round_number: int
    match_number: int
    team1_id: int
    team1_score: int
    team2_id: int
    team2_score: int
    winner_id: Optional[int] = None
    status: str
    start_time: datetime
    end_time: Optional[datetime] = None
    started_at: Optional[datetime] = None
    venue: str
    notes: Optional[str] = None
    in_bracket: bool


class BracketCreateRequest(BaseModel):
    start_time: Optional[datetime] = None
    venue: Optional[str] = None
    seed: Optional[int] = None

    @field_validator("start_time")
    @classmethod
    def naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class SlotSideResponse(BaseModel):
    kind: str
    team_id: Optional[int] = None
    team_name: Optional[str] = None


class BracketSlotResponse(BaseModel):
    round_number: int
    match_number: int
    team1: SlotSideResponse
    team2: SlotSideResponse
    next_round: Optional[int] = None
    next_match_number: Optional[int] = None


class BracketResponse(BaseModel):
    competition_id: int
    team_count: int
    rounds: int
    byes: int
    total_slots: int
    champion_team_id: Optional[int] = None
    slots: List[BracketSlotResponse]


class BracketCreateResponse(BaseModel):
    bracket: BracketResponse
    matches: List[MatchResponse]


class MatchCreateRequest(BaseModel):
    competition_id: int
    team1_id: int
    team2_id: int
    round_number: int = Field(ge=1)
    match_number: int = Field(ge=1)
    start_time: datetime
    venue: str

    @field_validator("start_time")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @field_validator("venue")
    @classmethod
    def validate_venue(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("venue is required")
        return v.strip()


class MatchResultRequest(BaseModel):
    team1_score: int = Field(ge=0)
    team2_score: int = Field(ge=0)
    winner_id: int


class MatchResultResponse(BaseModel):
    match: MatchResponse
    scheduled: List[MatchResponse] = []
    champion_team_id: Optional[int] = None


class MatchStatusRequest(BaseModel):
    status: MatchStatus


def _bracket_response(competition_id: int, bracket) -> BracketResponse:
    data = bracket.to_dict()
    return BracketResponse(
        competition_id=competition_id,
        team_count=bracket.team_count,
        rounds=bracket.rounds,
        byes=bracket.byes,
        total_slots=bracket.total_slots,
        champion_team_id=bracket.champion.id if bracket.champion else None,
        slots=data["slots"],
    )


# ============================================================================
# Bracket
# ============================================================================


@router.post(
    "/competitions/{competition_id}/bracket",
    response_model=BracketCreateResponse,
    status_code=201,
)
def create_bracket(
    competition_id: int,
    payload: BracketCreateRequest,
    principal: Principal = Depends(require_roles(*ORGANIZER_ROLES)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
) -> BracketCreateResponse:
    """
    Plan the single-elimination bracket from the registered roster.

    Creates a scheduled match for every playable slot. Byes are resolved
    before returning. Only one bracket per competition.
    """
    bracket, matches = coordinator.create_bracket(
        session,
        competition_id,
        principal,
        start_time=payload.start_time,
        venue=payload.venue,
        seed=payload.seed,
    )
    return BracketCreateResponse(
        bracket=_bracket_response(competition_id, bracket),
        matches=[MatchResponse.model_validate(m) for m in matches],
    )


@router.get("/competitions/{competition_id}/bracket", response_model=BracketResponse)
def get_bracket(
    competition_id: int,
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
) -> BracketResponse:
    """Current bracket snapshot with every slot and side kind"""
    competition = require_competition(session, competition_id)
    bracket = coordinator.load_bracket(competition)
    if bracket is None:
        raise NotFoundError("Bracket not generated yet")
    return _bracket_response(competition_id, bracket)


@router.get("/competitions/{competition_id}/matches", response_model=List[MatchResponse])
def get_competition_matches(
    competition_id: int,
    status: Optional[MatchStatus] = Query(default=None),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
) -> List[MatchResponse]:
    """Matches for a competition sorted by (round, start_time); optional status filter"""
    require_competition(session, competition_id)
    matches = coordinator.list_matches(session, competition_id, status=status.value if status else None)
    return [MatchResponse.model_validate(m) for m in matches]


# ============================================================================
# Match CRUD + runtime
# ============================================================================


@router.get("/matches", response_model=List[MatchResponse])
def list_matches(
    competition_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
) -> List[MatchResponse]:
    """All matches, optionally for one competition. Stable order: competition, round, match number."""
    query = select(Match)
    if competition_id is not None:
        query = query.where(Match.competition_id == competition_id)
    matches = session.exec(query.order_by(Match.competition_id, Match.round_number, Match.match_number)).all()
    return [MatchResponse.model_validate(m) for m in matches]


@router.post("/matches", response_model=MatchResponse, status_code=201)
def create_match(
    payload: MatchCreateRequest,
    principal: Principal = Depends(require_roles(*ORGANIZER_ROLES)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
) -> MatchResponse:
    """Manually schedule a match between two teams (outside the bracket)"""
    match = coordinator.create_match(
        session,
        payload.competition_id,
        principal,
        team1_id=payload.team1_id,
        team2_id=payload.team2_id,
        round_number=payload.round_number,
        match_number=payload.match_number,
        start_time=payload.start_time,
        venue=payload.venue,
    )
    return MatchResponse.model_validate(match)


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, session: Session = Depends(get_session)) -> MatchResponse:
    """Get a match by ID"""
    return MatchResponse.model_validate(require_match(session, match_id))


@router.put("/matches/{match_id}/result", response_model=MatchResultResponse)
def submit_match_result(
    match_id: int,
    payload: MatchResultRequest,
    principal: Principal = Depends(require_roles(*ORGANIZER_ROLES)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
) -> MatchResultResponse:
    """
    Record the final score and winner.

    The winner advances into the next round; successor matches that now
    have both teams come back in `scheduled`. Completing the final sets
    `champion_team_id`.
    """
    summary = coordinator.submit_result(
        session,
        match_id,
        principal,
        team1_score=payload.team1_score,
        team2_score=payload.team2_score,
        winner_id=payload.winner_id,
    )
    return MatchResultResponse(
        match=MatchResponse.model_validate(summary.match),
        scheduled=[MatchResponse.model_validate(m) for m in summary.scheduled],
        champion_team_id=summary.champion_id,
    )


@router.patch("/matches/{match_id}/status", response_model=MatchResponse)
def update_match_status(
    match_id: int,
    payload: MatchStatusRequest,
    principal: Principal = Depends(require_roles(*ORGANIZER_ROLES)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
) -> MatchResponse:
    """Start or cancel a match. Completing requires the result endpoint."""
    if payload.status == MatchStatus.completed:
        raise ValidationError("Use PUT /matches/{id}/result to complete a match")
    match = coordinator.change_status(session, match_id, principal, payload.status)
    return MatchResponse.model_validate(match)


@router.delete("/matches/{match_id}")
def delete_match(
    match_id: int,
    principal: Principal = Depends(require_roles(*ORGANIZER_ROLES)),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Remove a match. Winners already advanced from it stay in place."""
    coordinator.delete_match(session, match_id, principal)
    return {"message": "Match removed"}

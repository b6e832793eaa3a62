"""
Notification polling for clients without a push connection.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session

from tourney.database import get_session
from tourney.dependencies import get_coordinator
from tourney.services.tournament_coordinator import TournamentCoordinator
from tourney.utils.dates import to_naive_utc
from tourney.utils.guards import require_competition

router = APIRouter()


class ChangeEventResponse(BaseModel):
    type: str
    entity: str
    competition_id: Optional[int] = None
    organizer_id: Optional[str] = None
    payload: Dict[str, Any]
    emitted_at: datetime


@router.get("/competitions/{competition_id}/notifications", response_model=List[ChangeEventResponse])
def recent_notifications(
    competition_id: int,
    since: Optional[datetime] = Query(default=None),
    session: Session = Depends(get_session),
    coordinator: TournamentCoordinator = Depends(get_coordinator),
):
    """Buffered change events for a competition, oldest first. `since` is exclusive."""
    require_competition(session, competition_id)
    events = coordinator.hub.recent(competition_id, since=to_naive_utc(since))
    return [ChangeEventResponse(**e.to_dict()) for e in events]

"""
Lookup and ownership guards shared by routes and services.

Each guard returns the loaded row or raises a domain error that main.py
maps to the matching HTTP status.
"""

from sqlmodel import Session

from tourney.auth import Principal
from tourney.errors import AuthorizationError, NotFoundError
from tourney.models.competition import Competition
from tourney.models.feedback import Feedback
from tourney.models.match import Match
from tourney.models.team import Team


def require_competition(session: Session, competition_id: int) -> Competition:
    competition = session.get(Competition, competition_id)
    if not competition:
        raise NotFoundError("Competition not found")
    return competition


def require_team(session: Session, team_id: int) -> Team:
    team = session.get(Team, team_id)
    if not team:
        raise NotFoundError("Team not found")
    return team


def require_match(session: Session, match_id: int) -> Match:
    match = session.get(Match, match_id)
    if not match:
        raise NotFoundError("Match not found")
    return match


def require_feedback(session: Session, feedback_id: int) -> Feedback:
    feedback = session.get(Feedback, feedback_id)
    if not feedback:
        raise NotFoundError("Feedback not found")
    return feedback


def require_organizer(competition: Competition, principal: Principal, action: str) -> None:
    """Only the competition's organizer or an admin may *action*."""
    if competition.organizer_id != principal.id and not principal.is_admin:
        raise AuthorizationError(f"Not authorized to {action}")


def require_captain(team: Team, principal: Principal, action: str) -> None:
    if team.captain_id != principal.id and not principal.is_admin:
        raise AuthorizationError(f"Not authorized to {action}")

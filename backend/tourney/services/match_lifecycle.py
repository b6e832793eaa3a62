"""
Match Lifecycle: status transitions and result reporting for one match.

    scheduled -> in_progress -> completed
    scheduled -> completed            (result reported without a start)
    scheduled | in_progress -> cancelled

completed and cancelled are terminal. Reporting a result on a bracket
match advances the winner through the Bracket Advancer; newly playable
successor slots are returned for the coordinator to persist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set

from tourney.errors import InvalidStateTransition, InvalidWinner, StructuralInconsistency
from tourney.models.match import Match
from tourney.services.bracket import Bracket, BracketSlot, TeamRef
from tourney.services.bracket_advancer import advance

logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


ALLOWED_TRANSITIONS: Dict[MatchStatus, Set[MatchStatus]] = {
    MatchStatus.scheduled: {MatchStatus.in_progress, MatchStatus.completed, MatchStatus.cancelled},
    MatchStatus.in_progress: {MatchStatus.completed, MatchStatus.cancelled},
    MatchStatus.completed: set(),
    MatchStatus.cancelled: set(),
}


@dataclass
class ResultOutcome:
    match: Match
    ready: List[BracketSlot] = field(default_factory=list)
    champion: Optional[TeamRef] = None


def ensure_transition(current: str, new: MatchStatus) -> None:
    current_status = MatchStatus(current)
    if new not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidStateTransition(f"Cannot move match from '{current_status.value}' to '{new.value}'")


def transition(match: Match, new: MatchStatus, now: Optional[datetime] = None) -> Match:
    """Apply a non-result status change (in_progress or cancelled)."""
    if new == MatchStatus.completed:
        raise InvalidStateTransition("Use report_result to complete a match")
    ensure_transition(match.status, new)
    now = now or datetime.utcnow()
    if new == MatchStatus.in_progress and match.started_at is None:
        match.started_at = now
    if new == MatchStatus.cancelled:
        match.end_time = now
    match.status = new.value
    return match


def new_match_for_slot(slot: BracketSlot, competition_id: int, start_time: datetime, venue: str) -> Match:
    """Scheduled Match row for a playable bracket slot."""
    if not slot.is_playable:
        raise StructuralInconsistency(f"Slot R{slot.round_number} M{slot.match_number} is not playable")
    return Match(
        competition_id=competition_id,
        round_number=slot.round_number,
        match_number=slot.match_number,
        team1_id=slot.team1.team.id,
        team2_id=slot.team2.team.id,
        status=MatchStatus.scheduled.value,
        start_time=start_time,
        venue=venue,
        in_bracket=True,
    )


def report_result(
    match: Match,
    score1: int,
    score2: int,
    winner_id: int,
    bracket: Optional[Bracket] = None,
    now: Optional[datetime] = None,
) -> ResultOutcome:
    """
    Record the final score and winner, then advance the winner.

    Raises:
        InvalidStateTransition: match already completed or cancelled
        InvalidWinner: winner_id is neither team1 nor team2
        StructuralInconsistency: bracket match whose slot is missing or disagrees with the row
    """
    ensure_transition(match.status, MatchStatus.completed)
    if winner_id not in (match.team1_id, match.team2_id):
        raise InvalidWinner(f"Team {winner_id} is not a participant of match {match.id}")

    match.team1_score = score1
    match.team2_score = score2
    match.winner_id = winner_id
    match.status = MatchStatus.completed.value
    match.end_time = now or datetime.utcnow()

    outcome = ResultOutcome(match=match)
    if not match.in_bracket or bracket is None:
        return outcome

    slot = bracket.slot(match.round_number, match.match_number)
    winner = next((t for t in slot.teams() if t.id == winner_id), None) if slot else None
    if winner is None:
        logger.error(
            "Match %s (R%d M%d) does not agree with its bracket slot",
            match.id,
            match.round_number,
            match.match_number,
        )
        raise StructuralInconsistency(
            f"Bracket slot R{match.round_number} M{match.match_number} does not hold team {winner_id}"
        )

    advanced = advance(bracket, match.round_number, match.match_number, winner)
    outcome.ready = advanced.ready
    outcome.champion = advanced.champion
    return outcome

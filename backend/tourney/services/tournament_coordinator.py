"""
Tournament Coordinator: owns a competition's roster, bracket snapshot and
match rows.

Every bracket read-modify-write runs inside the competition's lock:
load snapshot -> run planner/lifecycle/advancer -> persist -> commit.
Change notifications are emitted after the commit.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlmodel import Session, select

from tourney.auth import Principal
from tourney.errors import ConflictError, ValidationError
from tourney.models.competition import Competition
from tourney.models.competition_team import CompetitionTeam
from tourney.models.feedback import Feedback
from tourney.models.match import Match
from tourney.models.team import Team
from tourney.services.bracket import Bracket, BracketSlot, TeamRef
from tourney.services.bracket_planner import plan
from tourney.services.competition_locks import CompetitionLocks
from tourney.services.match_lifecycle import MatchStatus, new_match_for_slot, report_result, transition
from tourney.services.notifications import (
    ENTITY_BRACKET,
    ENTITY_COMPETITION,
    ENTITY_MATCH,
    EVENT_CREATE,
    EVENT_DELETE,
    EVENT_UPDATE,
    ChangeEvent,
    NotificationHub,
)
from tourney.utils.guards import require_competition, require_match, require_organizer, require_team

logger = logging.getLogger(__name__)

COMPETITION_ONGOING = "ongoing"
COMPETITION_COMPLETED = "completed"


@dataclass
class ResultSummary:
    match: Match
    scheduled: List[Match] = field(default_factory=list)
    champion_id: Optional[int] = None


def match_payload(match: Match) -> Dict[str, Any]:
    return match.model_dump(mode="json")


def competition_payload(competition: Competition) -> Dict[str, Any]:
    return competition.model_dump(mode="json", exclude={"bracket_json"})


class TournamentCoordinator:
    def __init__(
        self,
        hub: NotificationHub,
        locks: Optional[CompetitionLocks] = None,
        rng_factory: Callable[[Optional[int]], random.Random] = random.Random,
    ):
        self.hub = hub
        self.locks = locks or CompetitionLocks()
        self.rng_factory = rng_factory

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notify(
        self,
        event_type: str,
        entity: str,
        competition: Optional[Competition],
        payload: Dict[str, Any],
        competition_id: Optional[int] = None,
        organizer_id: Optional[str] = None,
    ) -> None:
        self.hub.publish(
            ChangeEvent(
                type=event_type,
                entity=entity,
                competition_id=competition.id if competition is not None else competition_id,
                organizer_id=competition.organizer_id if competition is not None else organizer_id,
                payload=payload,
            )
        )

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def roster(self, session: Session, competition_id: int) -> List[Team]:
        """Registered teams in registration order."""
        rows = session.exec(
            select(Team, CompetitionTeam)
            .where(CompetitionTeam.team_id == Team.id, CompetitionTeam.competition_id == competition_id)
            .order_by(CompetitionTeam.id)
        ).all()
        return [team for team, _ in rows]

    def register_team(self, session: Session, competition_id: int, team_id: int) -> CompetitionTeam:
        """
        Register a team. Refused once the deadline passed, the roster is
        full, the team is already in, or a bracket has been planned.
        """
        with self.locks.hold(competition_id):
            competition = require_competition(session, competition_id)
            session.refresh(competition)
            require_team(session, team_id)

            if competition.bracket_json is not None:
                raise ValidationError("Bracket already generated; registration is closed")
            if competition.registration_deadline < datetime.utcnow():
                raise ValidationError("Registration deadline has passed")

            registered = self.roster(session, competition_id)
            if any(t.id == team_id for t in registered):
                raise ConflictError("Team is already registered")
            if len(registered) >= competition.max_teams:
                raise ValidationError("Maximum number of teams reached")

            registration = CompetitionTeam(competition_id=competition_id, team_id=team_id)
            session.add(registration)
            session.commit()
            session.refresh(registration)
            session.refresh(competition)

        self.notify(EVENT_UPDATE, ENTITY_COMPETITION, competition, competition_payload(competition))
        return registration

    # ------------------------------------------------------------------
    # Bracket
    # ------------------------------------------------------------------

    @staticmethod
    def load_bracket(competition: Competition) -> Optional[Bracket]:
        if competition.bracket_json is None:
            return None
        return Bracket.from_dict(competition.bracket_json)

    def create_bracket(
        self,
        session: Session,
        competition_id: int,
        principal: Principal,
        start_time: Optional[datetime] = None,
        venue: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> Tuple[Bracket, List[Match]]:
        """
        Plan the bracket from the registered roster and create a scheduled
        match for every playable slot. A lone team is recorded as winner
        with no matches.
        """
        with self.locks.hold(competition_id):
            competition = require_competition(session, competition_id)
            session.refresh(competition)
            require_organizer(competition, principal, "create matches for this competition")
            if competition.bracket_json is not None:
                raise ConflictError("Bracket already exists for this competition")

            teams = self.roster(session, competition_id)
            if not teams:
                raise ValidationError("Competition has no registered teams")

            bracket = plan([TeamRef(id=t.id, name=t.name) for t in teams], rng=self.rng_factory(seed))

            start = start_time or competition.start_date
            match_venue = venue or competition.venue
            matches = [
                new_match_for_slot(slot, competition_id, start, match_venue) for slot in bracket.playable_slots()
            ]
            for match in matches:
                session.add(match)

            competition.bracket_json = bracket.to_dict()
            if bracket.champion is not None:
                competition.winner_team_id = bracket.champion.id
                competition.status = COMPETITION_COMPLETED
            else:
                competition.status = COMPETITION_ONGOING
            session.add(competition)
            session.commit()
            for match in matches:
                session.refresh(match)
            session.refresh(competition)

        logger.info(
            "Created bracket for competition %d: teams=%d rounds=%d byes=%d matches=%d",
            competition_id,
            bracket.team_count,
            bracket.rounds,
            bracket.byes,
            len(matches),
        )
        self.notify(EVENT_CREATE, ENTITY_BRACKET, competition, bracket.to_dict())
        for match in matches:
            self.notify(EVENT_CREATE, ENTITY_MATCH, competition, match_payload(match))
        return bracket, matches

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def list_matches(self, session: Session, competition_id: int, status: Optional[str] = None) -> List[Match]:
        """Matches of a competition sorted by (round, start_time)."""
        query = select(Match).where(Match.competition_id == competition_id)
        if status:
            query = query.where(Match.status == status)
        query = query.order_by(Match.round_number, Match.start_time, Match.match_number)
        return list(session.exec(query).all())

    def create_match(
        self,
        session: Session,
        competition_id: int,
        principal: Principal,
        team1_id: int,
        team2_id: int,
        round_number: int,
        match_number: int,
        start_time: datetime,
        venue: str,
    ) -> Match:
        """Manually scheduled match outside the bracket; it never advances anyone."""
        with self.locks.hold(competition_id):
            competition = require_competition(session, competition_id)
            require_organizer(competition, principal, "create matches")
            if team1_id == team2_id:
                raise ValidationError("A match needs two different teams")
            require_team(session, team1_id)
            require_team(session, team2_id)

            match = Match(
                competition_id=competition_id,
                round_number=round_number,
                match_number=match_number,
                team1_id=team1_id,
                team2_id=team2_id,
                start_time=start_time,
                venue=venue,
                in_bracket=False,
            )
            session.add(match)
            session.commit()
            session.refresh(match)

        self.notify(EVENT_CREATE, ENTITY_MATCH, competition, match_payload(match))
        return match

    def submit_result(
        self,
        session: Session,
        match_id: int,
        principal: Principal,
        team1_score: int,
        team2_score: int,
        winner_id: int,
    ) -> ResultSummary:
        """
        Complete a match, advance its winner and schedule every successor
        slot that became playable. Completing the final records the
        competition winner.
        """
        match = require_match(session, match_id)
        competition_id = match.competition_id

        with self.locks.hold(competition_id):
            session.refresh(match)
            competition = require_competition(session, competition_id)
            session.refresh(competition)
            require_organizer(competition, principal, "update match result")

            bracket = self.load_bracket(competition)
            outcome = report_result(match, team1_score, team2_score, winner_id, bracket=bracket)

            scheduled: List[Match] = []
            for slot in outcome.ready:
                if self._slot_match(session, competition_id, slot) is not None:
                    continue
                start = max(match.end_time, match.start_time)
                successor = new_match_for_slot(slot, competition_id, start, match.venue)
                session.add(successor)
                scheduled.append(successor)

            if outcome.champion is not None:
                bracket.champion = outcome.champion
                competition.winner_team_id = outcome.champion.id
                competition.status = COMPETITION_COMPLETED
            if bracket is not None and match.in_bracket:
                competition.bracket_json = bracket.to_dict()

            self._record_team_stats(session, match)
            session.add(match)
            session.add(competition)
            session.commit()
            session.refresh(match)
            for successor in scheduled:
                session.refresh(successor)
            session.refresh(competition)

        logger.info(
            "Result for match %d (competition %d): winner=%d scheduled=%d",
            match.id,
            competition_id,
            winner_id,
            len(scheduled),
        )
        payload = match_payload(match)
        payload["scheduled"] = [match_payload(m) for m in scheduled]
        self.notify(EVENT_UPDATE, ENTITY_MATCH, competition, payload)
        for successor in scheduled:
            self.notify(EVENT_CREATE, ENTITY_MATCH, competition, match_payload(successor))
        if outcome.champion is not None:
            self.notify(EVENT_UPDATE, ENTITY_COMPETITION, competition, competition_payload(competition))

        return ResultSummary(
            match=match,
            scheduled=scheduled,
            champion_id=outcome.champion.id if outcome.champion else None,
        )

    def change_status(self, session: Session, match_id: int, principal: Principal, status: MatchStatus) -> Match:
        match = require_match(session, match_id)
        competition_id = match.competition_id

        with self.locks.hold(competition_id):
            session.refresh(match)
            competition = require_competition(session, competition_id)
            require_organizer(competition, principal, "update match status")
            transition(match, status)
            session.add(match)
            session.commit()
            session.refresh(match)

        self.notify(EVENT_UPDATE, ENTITY_MATCH, competition, match_payload(match))
        return match

    def delete_match(self, session: Session, match_id: int, principal: Principal) -> None:
        """Remove a match. Slots downstream of an already advanced winner are not retracted."""
        match = require_match(session, match_id)
        competition_id = match.competition_id

        with self.locks.hold(competition_id):
            competition = require_competition(session, competition_id)
            require_organizer(competition, principal, "delete match")
            if match.in_bracket and match.status == MatchStatus.completed.value:
                logger.warning(
                    "Deleting completed bracket match %d (R%d M%d); downstream slots are kept",
                    match.id,
                    match.round_number,
                    match.match_number,
                )
            session.delete(match)
            session.commit()

        logger.info("Deleted match %d from competition %d", match_id, competition_id)
        self.notify(EVENT_DELETE, ENTITY_MATCH, competition, {"match_id": match_id})

    # ------------------------------------------------------------------
    # Competition teardown
    # ------------------------------------------------------------------

    def delete_competition(self, session: Session, competition_id: int, principal: Principal) -> None:
        with self.locks.hold(competition_id):
            competition = require_competition(session, competition_id)
            require_organizer(competition, principal, "delete this competition")
            organizer_id = competition.organizer_id

            for match in session.exec(select(Match).where(Match.competition_id == competition_id)).all():
                session.delete(match)
            for registration in session.exec(
                select(CompetitionTeam).where(CompetitionTeam.competition_id == competition_id)
            ).all():
                session.delete(registration)
            for feedback in session.exec(select(Feedback).where(Feedback.competition_id == competition_id)).all():
                session.delete(feedback)
            session.delete(competition)
            session.commit()

        logger.info("Deleted competition %d", competition_id)
        self.notify(
            EVENT_DELETE,
            ENTITY_COMPETITION,
            None,
            {"competition_id": competition_id},
            competition_id=competition_id,
            organizer_id=organizer_id,
        )
        # subscribers got the delete; nothing is left to poll for
        self.hub.forget(competition_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _slot_match(session: Session, competition_id: int, slot: BracketSlot) -> Optional[Match]:
        return session.exec(
            select(Match).where(
                Match.competition_id == competition_id,
                Match.round_number == slot.round_number,
                Match.match_number == slot.match_number,
                Match.in_bracket == True,  # noqa: E712
            )
        ).first()

    @staticmethod
    def _record_team_stats(session: Session, match: Match) -> None:
        loser_id = match.team2_id if match.winner_id == match.team1_id else match.team1_id
        winner = session.get(Team, match.winner_id)
        loser = session.get(Team, loser_id)
        if winner is not None:
            winner.wins += 1
            session.add(winner)
        if loser is not None:
            loser.losses += 1
            session.add(loser)

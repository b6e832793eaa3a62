"""
Bracket advancement: place a slot's winner into its successor slot.

Stateless. Operates on a Bracket snapshot owned by the caller and mutates
only that snapshot. Persisting newly playable slots as Match rows is the
coordinator's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from tourney.errors import StructuralInconsistency
from tourney.services.bracket import Bracket, BracketSlot, SlotSide, TeamRef

logger = logging.getLogger(__name__)


@dataclass
class AdvanceOutcome:
    """
    successor: slot that received the winner (None when the final completed)
    ready:     slots that became fully populated with two real teams
    champion:  tournament winner, set only when the final completed
    """
    successor: Optional[BracketSlot] = None
    ready: List[BracketSlot] = field(default_factory=list)
    champion: Optional[TeamRef] = None


def place_in_successor(bracket: Bracket, slot: BracketSlot, side: SlotSide) -> Optional[BracketSlot]:
    """
    Write *side* into the successor of *slot*: odd match_number -> team1,
    even -> team2. Returns the successor, or None for the final.

    Re-placing the same side is a no-op, so replays are idempotent.
    """
    if slot.is_final:
        return None

    successor = bracket.slot(slot.next_round, slot.next_match_number)
    if successor is None:
        logger.error(
            "Successor R%s M%s of slot R%d M%d not found in bracket",
            slot.next_round,
            slot.next_match_number,
            slot.round_number,
            slot.match_number,
        )
        raise StructuralInconsistency(
            f"Successor slot R{slot.next_round} M{slot.next_match_number} "
            f"of R{slot.round_number} M{slot.match_number} not found"
        )

    attr = "team1" if slot.feeds_team1 else "team2"
    current: SlotSide = getattr(successor, attr)
    if not current.is_empty and current != side:
        logger.error(
            "Slot R%d M%d %s already holds %s; refusing to overwrite with %s",
            successor.round_number,
            successor.match_number,
            attr,
            current,
            side,
        )
        raise StructuralInconsistency(
            f"Slot R{successor.round_number} M{successor.match_number} {attr} is already filled"
        )

    setattr(successor, attr, side)
    return successor


def _bye_outcome(slot: BracketSlot) -> Optional[SlotSide]:
    """Side that moves on without a match, or None if the slot must be played or is still waiting."""
    if slot.team1.is_empty or slot.team2.is_empty:
        return None
    if slot.team1.is_bye:
        return slot.team2
    if slot.team2.is_bye:
        return slot.team1
    return None


def resolve_byes(bracket: Bracket, slot: Optional[BracketSlot]) -> List[BracketSlot]:
    """
    Walk forward from *slot*, forwarding every side that faces a BYE.

    A TEAM facing a BYE moves on as that TEAM; two BYEs move on as a BYE.
    Stops at the first slot that is playable (returned) or still waiting
    on an EMPTY side.
    """
    ready: List[BracketSlot] = []
    current = slot
    while current is not None:
        if current.is_playable:
            ready.append(current)
            break
        forwarded = _bye_outcome(current)
        if forwarded is None:
            break
        logger.debug(
            "Bye at R%d M%d forwards %s",
            current.round_number,
            current.match_number,
            forwarded.team.name if forwarded.team else forwarded.kind.value,
        )
        current = place_in_successor(bracket, current, forwarded)
    return ready


def advance(bracket: Bracket, round_number: int, match_number: int, winner: TeamRef) -> AdvanceOutcome:
    """
    Advance *winner* of slot (round_number, match_number).

    The caller has already checked that *winner* is one of the slot's two
    teams. Completing the final mutates nothing and reports the champion.

    Raises:
        StructuralInconsistency: slot or successor missing from the snapshot
    """
    slot = bracket.slot(round_number, match_number)
    if slot is None:
        logger.error("Completed slot R%d M%d not found in bracket", round_number, match_number)
        raise StructuralInconsistency(f"Slot R{round_number} M{match_number} not found")

    if slot.is_final:
        return AdvanceOutcome(champion=winner)

    successor = place_in_successor(bracket, slot, SlotSide.of(winner))
    return AdvanceOutcome(successor=successor, ready=resolve_byes(bracket, successor))

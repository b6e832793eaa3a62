"""
Bracket Planner: team list -> single-elimination bracket skeleton.

Seeding is a uniform random permutation of the teams padded with BYE
markers up to the next power of two. The random source is injected so
tests can pass a seeded random.Random.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from tourney.errors import ValidationError
from tourney.services.bracket import (
    BYE,
    EMPTY,
    Bracket,
    BracketSlot,
    SlotSide,
    TeamRef,
    bracket_rounds,
    successor_of,
)
from tourney.services.bracket_advancer import resolve_byes

logger = logging.getLogger(__name__)


def plan(teams: Sequence[TeamRef], rng: Optional[random.Random] = None) -> Bracket:
    """
    Build a bracket for *teams*.

    rounds = ceil(log2(n)), perfect size = 2**rounds, byes = perfect - n.
    Round 1 pairs consecutive entries of the shuffled sequence; later
    rounds start EMPTY. Every round-1 side facing a BYE is forwarded
    before returning, so no playable slot holds a BYE.

    A single team yields a bracket with zero rounds, zero slots and that
    team as champion.

    Duplicate teams are a caller error and are not checked here.
    """
    if not teams:
        raise ValidationError("At least one team is required to plan a bracket")

    rng = rng or random.Random()
    team_count = len(teams)
    rounds = bracket_rounds(team_count)

    if rounds == 0:
        return Bracket(team_count=team_count, rounds=0, champion=teams[0])

    perfect_size = 2 ** rounds
    entrants: List[SlotSide] = [SlotSide.of(t) for t in teams]
    entrants.extend([BYE] * (perfect_size - team_count))
    rng.shuffle(entrants)

    bracket = Bracket(team_count=team_count, rounds=rounds)

    for index in range(perfect_size // 2):
        match_number = index + 1
        next_round, next_match = successor_of(1, match_number, rounds)
        bracket.slots.append(
            BracketSlot(
                round_number=1,
                match_number=match_number,
                team1=entrants[2 * index],
                team2=entrants[2 * index + 1],
                next_round=next_round,
                next_match_number=next_match,
            )
        )

    for round_number in range(2, rounds + 1):
        for match_number in range(1, 2 ** (rounds - round_number) + 1):
            next_round, next_match = successor_of(round_number, match_number, rounds)
            bracket.slots.append(
                BracketSlot(
                    round_number=round_number,
                    match_number=match_number,
                    team1=EMPTY,
                    team2=EMPTY,
                    next_round=next_round,
                    next_match_number=next_match,
                )
            )

    for slot in bracket.round_slots(1):
        resolve_byes(bracket, slot)

    logger.debug(
        "Planned bracket: teams=%d rounds=%d byes=%d slots=%d playable=%d",
        team_count,
        rounds,
        bracket.byes,
        bracket.total_slots,
        len(bracket.playable_slots()),
    )
    return bracket

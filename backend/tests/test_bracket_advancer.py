"""Bracket Advancer: successor placement, bye forwarding and the final."""
import pytest

from tourney.errors import StructuralInconsistency
from tourney.services.bracket import BYE, EMPTY, Bracket, BracketSlot, SlotSide, TeamRef, successor_of
from tourney.services.bracket_advancer import advance, place_in_successor, resolve_byes

A = TeamRef(id=1, name="A")
B = TeamRef(id=2, name="B")
C = TeamRef(id=3, name="C")
D = TeamRef(id=4, name="D")


def empty_bracket(rounds: int) -> Bracket:
    bracket = Bracket(team_count=2 ** rounds, rounds=rounds)
    for r in range(1, rounds + 1):
        for m in range(1, 2 ** (rounds - r) + 1):
            next_round, next_match = successor_of(r, m, rounds)
            bracket.slots.append(
                BracketSlot(round_number=r, match_number=m, next_round=next_round, next_match_number=next_match)
            )
    return bracket


def test_odd_match_fills_team1_of_successor():
    bracket = empty_bracket(3)
    outcome = advance(bracket, 1, 3, A)

    assert outcome.successor.key == (2, 2)
    assert bracket.slot(2, 2).team1 == SlotSide.of(A)
    assert bracket.slot(2, 2).team2 == EMPTY
    assert outcome.ready == []
    assert outcome.champion is None


def test_even_match_fills_team2_of_successor():
    bracket = empty_bracket(3)
    advance(bracket, 1, 4, B)

    assert bracket.slot(2, 2).team2 == SlotSide.of(B)
    assert bracket.slot(2, 2).team1 == EMPTY


def test_successor_becomes_ready_once_both_sides_arrive():
    bracket = empty_bracket(2)
    advance(bracket, 1, 1, A)
    outcome = advance(bracket, 1, 2, D)

    assert [s.key for s in outcome.ready] == [(2, 1)]
    final = bracket.slot(2, 1)
    assert final.team1.team == A and final.team2.team == D


def test_final_reports_champion_without_mutation():
    bracket = empty_bracket(2)
    bracket.slot(2, 1).team1 = SlotSide.of(A)
    bracket.slot(2, 1).team2 = SlotSide.of(C)
    before = bracket.to_dict()

    outcome = advance(bracket, 2, 1, C)

    assert outcome.champion == C
    assert outcome.successor is None
    assert bracket.to_dict() == before


def test_missing_slot_is_structural_inconsistency():
    bracket = empty_bracket(2)
    with pytest.raises(StructuralInconsistency):
        advance(bracket, 3, 1, A)


def test_missing_successor_is_structural_inconsistency():
    bracket = empty_bracket(2)
    bracket.slots = [s for s in bracket.slots if s.key != (2, 1)]
    with pytest.raises(StructuralInconsistency):
        advance(bracket, 1, 1, A)


def test_occupied_successor_side_is_not_overwritten():
    bracket = empty_bracket(2)
    advance(bracket, 1, 1, A)
    with pytest.raises(StructuralInconsistency):
        advance(bracket, 1, 1, B)


def test_replacing_same_side_is_idempotent():
    bracket = empty_bracket(2)
    slot = bracket.slot(1, 1)
    place_in_successor(bracket, slot, SlotSide.of(A))
    place_in_successor(bracket, slot, SlotSide.of(A))
    assert bracket.slot(2, 1).team1.team == A


def test_winner_meeting_forwarded_bye_moves_on():
    # R2M2 already received a BYE from a double-bye R1M4; winner of R1M3 skips round 2
    bracket = empty_bracket(3)
    bracket.slot(2, 2).team2 = BYE
    bracket.slot(3, 1).team1 = SlotSide.of(A)

    outcome = advance(bracket, 1, 3, C)

    assert bracket.slot(2, 2).team1.team == C
    assert bracket.slot(3, 1).team2.team == C
    assert [s.key for s in outcome.ready] == [(3, 1)]


def test_double_bye_forwards_a_bye():
    bracket = empty_bracket(2)
    slot = bracket.slot(1, 2)
    slot.team1 = BYE
    slot.team2 = BYE

    ready = resolve_byes(bracket, slot)

    assert ready == []
    assert bracket.slot(2, 1).team2 == BYE


def test_resolve_byes_stops_at_waiting_slot():
    bracket = empty_bracket(2)
    slot = bracket.slot(1, 1)
    slot.team1 = SlotSide.of(B)
    slot.team2 = BYE

    ready = resolve_byes(bracket, slot)

    assert ready == []
    assert bracket.slot(2, 1).team1.team == B
    assert bracket.slot(2, 1).team2 == EMPTY

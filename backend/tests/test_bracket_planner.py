"""Bracket Planner: shape, seeding and bye handling for any team count."""
import random
from collections import Counter

import pytest

from tourney.errors import ValidationError
from tourney.services.bracket import Bracket, SideKind, TeamRef, bracket_rounds
from tourney.services.bracket_planner import plan


def make_refs(count: int):
    return [TeamRef(id=i, name=f"Team {i}") for i in range(1, count + 1)]


def round1_team_ids(bracket: Bracket):
    ids = []
    for slot in bracket.round_slots(1):
        for side in (slot.team1, slot.team2):
            if side.is_team:
                ids.append(side.team.id)
    return ids


@pytest.mark.parametrize(
    "count,rounds",
    [(1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4), (16, 4), (17, 5), (64, 6)],
)
def test_bracket_rounds_is_ceil_log2(count, rounds):
    assert bracket_rounds(count) == rounds


def test_empty_team_list_is_rejected():
    with pytest.raises(ValidationError):
        plan([], rng=random.Random(1))


def test_single_team_is_champion_without_slots():
    team = TeamRef(id=7, name="Solo")
    bracket = plan([team], rng=random.Random(1))

    assert bracket.rounds == 0
    assert bracket.slots == []
    assert bracket.champion == team
    assert bracket.byes == 0


def test_two_teams_play_the_final_directly():
    bracket = plan(make_refs(2), rng=random.Random(3))

    assert bracket.rounds == 1
    assert bracket.total_slots == 1
    final = bracket.slot(1, 1)
    assert final.is_final
    assert final.is_playable
    assert {t.id for t in final.teams()} == {1, 2}


def test_five_teams_shape():
    bracket = plan(make_refs(5), rng=random.Random(42))

    assert bracket.rounds == 3
    assert bracket.perfect_size == 8
    assert bracket.byes == 3
    assert bracket.total_slots == 7
    assert len(bracket.round_slots(1)) == 4
    assert len(bracket.round_slots(2)) == 2
    assert len(bracket.round_slots(3)) == 1
    assert sorted(round1_team_ids(bracket)) == [1, 2, 3, 4, 5]


@pytest.mark.parametrize("count", range(1, 65))
def test_structure_holds_for_every_team_count(count):
    for seed in range(10):
        bracket = plan(make_refs(count), rng=random.Random(seed))
        rounds = bracket_rounds(count)

        assert bracket.rounds == rounds
        if rounds == 0:
            continue

        assert bracket.total_slots == 2 ** rounds - 1
        for r in range(1, rounds + 1):
            assert [s.match_number for s in bracket.round_slots(r)] == list(range(1, 2 ** (rounds - r) + 1))

        # every team appears in exactly one round-1 slot
        counts = Counter(round1_team_ids(bracket))
        assert sorted(counts) == list(range(1, count + 1))
        assert set(counts.values()) == {1}

        byes = sum(
            1 for s in bracket.round_slots(1) for side in (s.team1, s.team2) if side.kind == SideKind.BYE
        )
        assert byes == 2 ** rounds - count

        # no playable slot carries a bye, and the final never does
        for slot in bracket.slots:
            if slot.is_playable:
                assert not slot.team1.is_bye and not slot.team2.is_bye
        final = bracket.slot(rounds, 1)
        assert final.is_final
        assert not final.team1.is_bye and not final.team2.is_bye


@pytest.mark.parametrize("count", [3, 5, 6, 7, 11, 13, 24, 33])
def test_bye_paired_teams_advance_to_round_two(count):
    for seed in range(20):
        bracket = plan(make_refs(count), rng=random.Random(seed))
        for slot in bracket.round_slots(1):
            if slot.team1.is_team and slot.team2.is_bye:
                lucky = slot.team1.team
            elif slot.team2.is_team and slot.team1.is_bye:
                lucky = slot.team2.team
            else:
                continue
            successor = bracket.slot(slot.next_round, slot.next_match_number)
            side = successor.team1 if slot.feeds_team1 else successor.team2
            assert side.is_team and side.team == lucky


def test_successor_links_follow_pairing_rule():
    bracket = plan(make_refs(16), rng=random.Random(0))
    for slot in bracket.slots:
        if slot.is_final:
            assert slot.next_round is None and slot.next_match_number is None
        else:
            assert slot.next_round == slot.round_number + 1
            assert slot.next_match_number == (slot.match_number - 1) // 2 + 1


def test_same_seed_same_bracket():
    first = plan(make_refs(13), rng=random.Random(2024)).to_dict()
    second = plan(make_refs(13), rng=random.Random(2024)).to_dict()
    assert first == second


def test_seeding_is_not_fixed_across_seeds():
    layouts = {tuple(round1_team_ids(plan(make_refs(8), rng=random.Random(seed)))) for seed in range(30)}
    assert len(layouts) > 1


def test_first_position_is_roughly_uniform():
    hits = Counter()
    trials = 4000
    for seed in range(trials):
        bracket = plan(make_refs(4), rng=random.Random(seed))
        hits[bracket.slot(1, 1).team1.team.id] += 1
    for team_id in range(1, 5):
        assert abs(hits[team_id] / trials - 0.25) < 0.05


def test_snapshot_round_trips_through_dict():
    bracket = plan(make_refs(6), rng=random.Random(9))
    restored = Bracket.from_dict(bracket.to_dict())
    assert restored.to_dict() == bracket.to_dict()
    assert restored.byes == 2

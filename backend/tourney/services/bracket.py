"""
Single-elimination bracket shapes shared by the planner and the advancer.

A bracket is a flat list of slots keyed by (round_number, match_number).
Each slot side is a tagged value:
  EMPTY: waiting for the winner of a feeder slot
  BYE:   no opponent; the other side advances automatically
  TEAM:  a real team reference

Slot pairs (2k-1, 2k) of round r feed slot k of round r+1: the odd
source fills team1, the even source fills team2.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SideKind(str, Enum):
    EMPTY = "EMPTY"
    BYE = "BYE"
    TEAM = "TEAM"


@dataclass(frozen=True)
class TeamRef:
    """Opaque team identifier plus display name."""
    id: int
    name: str


@dataclass(frozen=True)
class SlotSide:
    kind: SideKind
    team: Optional[TeamRef] = None

    @classmethod
    def of(cls, team: TeamRef) -> "SlotSide":
        return cls(SideKind.TEAM, team)

    @property
    def is_empty(self) -> bool:
        return self.kind == SideKind.EMPTY

    @property
    def is_bye(self) -> bool:
        return self.kind == SideKind.BYE

    @property
    def is_team(self) -> bool:
        return self.kind == SideKind.TEAM

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value}
        if self.team is not None:
            data["team_id"] = self.team.id
            data["team_name"] = self.team.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlotSide":
        kind = SideKind(data["kind"])
        if kind == SideKind.TEAM:
            return cls.of(TeamRef(id=int(data["team_id"]), name=data.get("team_name") or ""))
        return cls(kind)


EMPTY = SlotSide(SideKind.EMPTY)
BYE = SlotSide(SideKind.BYE)


def bracket_rounds(team_count: int) -> int:
    """ceil(log2(team_count)) on integers; 1 team -> 0 rounds."""
    return (team_count - 1).bit_length()


def successor_of(round_number: int, match_number: int, rounds: int) -> Tuple[Optional[int], Optional[int]]:
    """(next_round, next_match_number) for a slot, (None, None) for the final."""
    if round_number >= rounds:
        return None, None
    return round_number + 1, (match_number - 1) // 2 + 1


@dataclass
class BracketSlot:
    round_number: int
    match_number: int
    team1: SlotSide = EMPTY
    team2: SlotSide = EMPTY
    next_round: Optional[int] = None
    next_match_number: Optional[int] = None

    @property
    def key(self) -> Tuple[int, int]:
        return (self.round_number, self.match_number)

    @property
    def is_final(self) -> bool:
        return self.next_round is None

    @property
    def is_playable(self) -> bool:
        return self.team1.is_team and self.team2.is_team

    @property
    def feeds_team1(self) -> bool:
        return self.match_number % 2 == 1

    def teams(self) -> List[TeamRef]:
        return [side.team for side in (self.team1, self.team2) if side.team is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "match_number": self.match_number,
            "team1": self.team1.to_dict(),
            "team2": self.team2.to_dict(),
            "next_round": self.next_round,
            "next_match_number": self.next_match_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BracketSlot":
        return cls(
            round_number=data["round_number"],
            match_number=data["match_number"],
            team1=SlotSide.from_dict(data["team1"]),
            team2=SlotSide.from_dict(data["team2"]),
            next_round=data.get("next_round"),
            next_match_number=data.get("next_match_number"),
        )


@dataclass
class Bracket:
    team_count: int
    rounds: int
    slots: List[BracketSlot] = field(default_factory=list)
    champion: Optional[TeamRef] = None

    @property
    def perfect_size(self) -> int:
        return 2 ** self.rounds

    @property
    def byes(self) -> int:
        return self.perfect_size - self.team_count

    @property
    def total_slots(self) -> int:
        return len(self.slots)

    def slot(self, round_number: int, match_number: int) -> Optional[BracketSlot]:
        for s in self.slots:
            if s.round_number == round_number and s.match_number == match_number:
                return s
        return None

    def round_slots(self, round_number: int) -> List[BracketSlot]:
        return sorted(
            (s for s in self.slots if s.round_number == round_number),
            key=lambda s: s.match_number,
        )

    def playable_slots(self) -> List[BracketSlot]:
        return sorted((s for s in self.slots if s.is_playable), key=lambda s: s.key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_count": self.team_count,
            "rounds": self.rounds,
            "champion": {"id": self.champion.id, "name": self.champion.name} if self.champion else None,
            "slots": [s.to_dict() for s in sorted(self.slots, key=lambda s: s.key)],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bracket":
        champion = data.get("champion")
        return cls(
            team_count=data["team_count"],
            rounds=data["rounds"],
            slots=[BracketSlot.from_dict(s) for s in data.get("slots", [])],
            champion=TeamRef(id=champion["id"], name=champion["name"]) if champion else None,
        )

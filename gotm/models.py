"""Core data models for candidates, ballots and runoff results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

CandidateId = int | str
BallotId = int | str


@dataclass(frozen=True)
class Candidate:
    """A game on the ballot.

    Attributes:
        id: Identifier, unique within one election category
        name: Display name (the game's title)
    """
    id: CandidateId
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Ranking:
    """A single (candidate, rank) entry within a ballot. Rank 1 = most preferred."""
    candidate_id: CandidateId
    rank: int


@dataclass
class Ballot:
    """One voter's ranked list of preferences.

    Attributes:
        id: Ballot identifier, unique within one election category
        rankings: Ranking entries; sortable by rank, one per candidate

    Example:
        >>> ballot = Ballot.from_choices(7, ["celeste", "hades"])
        >>> [r.rank for r in ballot.rankings]
        [1, 2]
    """
    id: BallotId
    rankings: list[Ranking] = field(default_factory=list)

    @classmethod
    def from_choices(cls, ballot_id: BallotId, choices: list[CandidateId]) -> Self:
        """Build a ballot from candidate ids ordered most-preferred first."""
        return cls(
            id=ballot_id,
            rankings=[Ranking(candidate_id=c, rank=i) for i, c in enumerate(choices, start=1)],
        )

    def ordered_candidate_ids(self) -> list[CandidateId]:
        """Candidate ids in preference order."""
        return [r.candidate_id for r in sorted(self.rankings, key=lambda r: r.rank)]


@dataclass(frozen=True)
class RoundVertex:
    """A candidate's standing in one round of the runoff."""
    candidate_id: CandidateId
    name: str
    round: int
    votes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "name": self.name,
            "round": self.round,
            "votes": self.votes,
        }


class EdgeKind(str, Enum):
    SURVIVAL = "survival"
    TRANSFER = "transfer"
    FINAL = "final"


@dataclass(frozen=True)
class TransferEdge:
    """Ballots moving from one round vertex to a vertex of the next round.

    Survival edges link a candidate to itself, transfer edges link an
    eliminated candidate to a survivor, and the single final edge links the
    last survivor to the winner marker.
    """
    source: RoundVertex
    target: RoundVertex
    weight: int
    kind: EdgeKind

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
            "weight": self.weight,
            "kind": self.kind.value,
        }


@dataclass
class RoundSummary:
    """What happened in one elimination round.

    Attributes:
        round: Round number, starting at 1
        counts: Candidate name -> first-choice ballots at the start of the round
        scores: Candidate name -> weighted (tie-break) score
        eliminated: Name of the candidate eliminated this round
        transfers: Candidate name -> ballots received from the eliminated candidate
        exhausted: Ballots with no remaining preference after this round
        tiebreak: How a tie on first-choice count was broken ("weighted_score"
                  or "input_order"), or None when there was no tie
    """
    round: int
    counts: dict[str, int]
    scores: dict[str, int]
    eliminated: str
    transfers: dict[str, int]
    exhausted: int
    tiebreak: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.round,
            "counts": dict(self.counts),
            "scores": dict(self.scores),
            "eliminated": self.eliminated,
            "transfers": dict(self.transfers),
            "exhausted": self.exhausted,
            "tiebreak": self.tiebreak,
        }


@dataclass
class TabulationResult:
    """Result from a voting system.

    Attributes:
        system_name: Human-readable name of the voting system
        edges: Round graph, ordered round by round
        rounds: Per-round elimination details
        winner: Winning candidate, or None when nothing was tabulated
        details: System-specific extras (e.g. errors, tie-break notes)
    """
    system_name: str
    edges: list[TransferEdge] = field(default_factory=list)
    rounds: list[RoundSummary] = field(default_factory=list)
    winner: Candidate | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "system_name": self.system_name,
            "winner": self.winner.to_dict() if self.winner else None,
            "edges": [e.to_dict() for e in self.edges],
            "rounds": [r.to_dict() for r in self.rounds],
            "details": self.details,
        }


@dataclass
class Election:
    """Candidates and ballots for one election category, as loaded from a file.

    Attributes:
        name: Election name (e.g. the month being voted on)
        category: Category within the election (e.g. "long" or "short")
        candidates: Candidates in tie-break order
        ballots: Ranked ballots
    """
    name: str
    category: str
    candidates: list[Candidate]
    ballots: list[Ballot]

    @property
    def num_candidates(self) -> int:
        return len(self.candidates)

    @property
    def num_ballots(self) -> int:
        return len(self.ballots)

    def get_candidate(self, candidate_id: CandidateId) -> Candidate | None:
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return candidate
        return None

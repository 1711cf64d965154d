"""Vote counting helpers shared by the runoff tabulator.

All helpers work on a "live rankings" map: ballot id -> the ballot's entries
for candidates still in the race, ordered by preference. Each entry keeps the
rank the voter gave it (used for weighted scores) and its position among the
entries still on the ballot, renumbered 1..k. The map is created by
build_live_rankings() and owned by a single tabulation; eliminate() is the
only helper that mutates it.

Per round, the helpers must be called in this order:
    current_first_choice_counts -> transfer -> eliminate -> (recount)
because transfer() reads the rankings as they were before the elimination.
"""

from dataclasses import dataclass

from gotm.models import Ballot, BallotId, Candidate, CandidateId


@dataclass(frozen=True)
class LiveRanking:
    """A ranking entry still on a ballot.

    Attributes:
        candidate_id: The ranked candidate
        position: 1-based place among the ballot's remaining entries
        rank: The rank from the ballot as cast; never renumbered
    """
    candidate_id: CandidateId
    position: int
    rank: int


LiveRankings = dict[BallotId, list[LiveRanking]]


class BallotError(ValueError):
    """Raised when candidates or ballots are malformed.

    Tabulating inconsistent data would silently produce a wrong result, so
    malformed input is rejected instead.
    """
    pass


def _renumber(rankings: list[LiveRanking]) -> list[LiveRanking]:
    return [
        LiveRanking(candidate_id=r.candidate_id, position=i, rank=r.rank)
        for i, r in enumerate(rankings, start=1)
    ]


def validate_ballots(candidates: list[Candidate], ballots: list[Ballot]) -> None:
    """Check candidates and ballots before anything sorts or counts them.

    Raises:
        BallotError: On duplicate candidate or ballot ids, a ranking naming an
            unknown candidate, a non-positive or non-integer rank, or a
            duplicate rank or candidate within one ballot.
    """
    known: set[CandidateId] = set()
    for candidate in candidates:
        if candidate.id in known:
            raise BallotError(f"Duplicate candidate id {candidate.id!r}")
        known.add(candidate.id)

    ballot_ids: set[BallotId] = set()
    for ballot in ballots:
        if ballot.id in ballot_ids:
            raise BallotError(f"Duplicate ballot id {ballot.id!r}")
        ballot_ids.add(ballot.id)

        ranks: set[int] = set()
        seen: set[CandidateId] = set()
        for ranking in ballot.rankings:
            rank = ranking.rank
            if isinstance(rank, bool) or not isinstance(rank, int) or rank < 1:
                raise BallotError(f"Ballot {ballot.id!r} has invalid rank {rank!r}")
            if rank in ranks:
                raise BallotError(f"Ballot {ballot.id!r} uses rank {rank} twice")
            if ranking.candidate_id not in known:
                raise BallotError(
                    f"Ballot {ballot.id!r} ranks unknown candidate {ranking.candidate_id!r}"
                )
            if ranking.candidate_id in seen:
                raise BallotError(
                    f"Ballot {ballot.id!r} ranks candidate {ranking.candidate_id!r} twice"
                )
            ranks.add(rank)
            seen.add(ranking.candidate_id)


def build_live_rankings(candidates: list[Candidate], ballots: list[Ballot]) -> LiveRankings:
    """Validate the input and build the initial live rankings map.

    Entries are sorted by rank. Positions are contiguous while ranks are kept
    as cast, so a ballot ranked [A:1, B:3] gives A position 1 rank 1 and B
    position 2 rank 3.

    Raises:
        BallotError: See validate_ballots()
    """
    validate_ballots(candidates, ballots)
    return {
        ballot.id: _renumber([
            LiveRanking(candidate_id=r.candidate_id, position=0, rank=r.rank)
            for r in sorted(ballot.rankings, key=lambda r: r.rank)
        ])
        for ballot in ballots
    }


def current_first_choice_counts(
    candidates: list[Candidate], live_rankings: LiveRankings
) -> dict[CandidateId, int]:
    """Count ballots whose top remaining choice is each candidate."""
    counts = {c.id: 0 for c in candidates}
    for rankings in live_rankings.values():
        if rankings and rankings[0].candidate_id in counts:
            counts[rankings[0].candidate_id] += 1
    return counts


def weighted_scores(
    candidates: list[Candidate],
    ballots: list[Ballot],
    live_rankings: LiveRankings,
    max_rank: int | None = None,
) -> dict[CandidateId, int]:
    """Borda-like tie-break score for each candidate.

    Every live ranking entry awards (max_rank - rank + 1) points to its
    candidate, where rank is the rank as cast rather than the entry's current
    position. The runoff anchors max_rank on the number of candidates it
    started with, so a first choice is always worth the same. Ranks beyond the
    anchor score nothing.

    Args:
        candidates: Candidates to score; entries for anyone else are ignored
        ballots: Ballots whose live rankings are read
        live_rankings: The tabulation's live rankings map
        max_rank: Weight of rank 1; defaults to len(candidates)
    """
    if max_rank is None:
        max_rank = len(candidates)
    scores = {c.id: 0 for c in candidates}
    for ballot in ballots:
        for ranking in live_rankings.get(ballot.id, []):
            if ranking.candidate_id in scores:
                scores[ranking.candidate_id] += max(0, max_rank - ranking.rank + 1)
    return scores


def transfer(
    candidate_id: CandidateId,
    remaining_candidates: list[Candidate],
    ballots: list[Ballot],
    live_rankings: LiveRankings,
) -> dict[CandidateId, int]:
    """Tally where the ballots topped by candidate_id go once it is eliminated.

    Each such ballot moves to its next entry that is among
    remaining_candidates. Ballots with no such entry exhaust and are not
    tallied.
    """
    remaining_ids = {c.id for c in remaining_candidates}
    transferred: dict[CandidateId, int] = {}
    for ballot in ballots:
        rankings = live_rankings.get(ballot.id, [])
        if not rankings or rankings[0].candidate_id != candidate_id:
            continue

        next_choice = next(
            (r.candidate_id for r in rankings[1:] if r.candidate_id in remaining_ids),
            None,
        )
        if next_choice is not None:
            transferred[next_choice] = transferred.get(next_choice, 0) + 1

    return transferred


def eliminate(candidate_id: CandidateId, live_rankings: LiveRankings) -> None:
    """Remove candidate_id from every ballot, renumbering the remaining positions."""
    for ballot_id, rankings in live_rankings.items():
        live_rankings[ballot_id] = _renumber(
            [r for r in rankings if r.candidate_id != candidate_id]
        )


def count_exhausted(live_rankings: LiveRankings) -> int:
    """Number of ballots with no remaining preference."""
    return sum(1 for rankings in live_rankings.values() if not rankings)

"""Instant Runoff Voting (IRV) with weighted tie-breaking."""

import logging

from gotm.models import (
    Ballot,
    Candidate,
    CandidateId,
    EdgeKind,
    RoundSummary,
    RoundVertex,
    TabulationResult,
    TransferEdge,
)
from gotm.voting import register_voting_system
from gotm.voting.base import VotingSystem
from gotm.voting.counting import (
    build_live_rankings,
    count_exhausted,
    current_first_choice_counts,
    eliminate,
    transfer,
    weighted_scores,
)

logger = logging.getLogger(__name__)


def _tiebreak_method(
    loser: Candidate,
    remaining: list[Candidate],
    counts: dict[CandidateId, int],
    scores: dict[CandidateId, int],
) -> str | None:
    tied = [c for c in remaining if counts[c.id] == counts[loser.id]]
    if len(tied) == 1:
        return None
    if sum(1 for c in tied if scores[c.id] == scores[loser.id]) == 1:
        return "weighted_score"
    return "input_order"


def run_rounds(
    candidates: list[Candidate], ballots: list[Ballot]
) -> tuple[list[TransferEdge], list[RoundSummary], Candidate | None]:
    """Run the runoff and return (edges, round summaries, winner).

    Zero candidates or zero ballots give ([], [], None).

    Raises:
        BallotError: If the candidates or ballots are malformed
    """
    if not candidates or not ballots:
        return [], [], None

    live = build_live_rankings(candidates, ballots)
    order = {c.id: i for i, c in enumerate(candidates)}
    max_rank = len(candidates)

    edges: list[TransferEdge] = []
    rounds: list[RoundSummary] = []
    remaining = list(candidates)
    round_num = 1
    counts = current_first_choice_counts(remaining, live)
    vertices = {c.id: RoundVertex(c.id, c.name, round_num, counts[c.id]) for c in remaining}

    logger.debug("Tabulating %d candidates over %d ballots", len(candidates), len(ballots))

    while len(remaining) > 1:
        scores = weighted_scores(remaining, ballots, live, max_rank)
        loser = min(remaining, key=lambda c: (counts[c.id], scores[c.id], order[c.id]))
        survivors = [c for c in remaining if c.id != loser.id]

        transferred = transfer(loser.id, survivors, ballots, live)
        eliminate(loser.id, live)
        next_counts = current_first_choice_counts(survivors, live)

        next_vertices = {
            c.id: RoundVertex(c.id, c.name, round_num + 1, next_counts[c.id]) for c in survivors
        }
        for c in survivors:
            assert next_counts[c.id] == counts[c.id] + transferred.get(c.id, 0), (
                f"Vote count for {c.name!r} is inconsistent after eliminating {loser.name!r}"
            )
            edges.append(TransferEdge(
                source=vertices[c.id],
                target=next_vertices[c.id],
                weight=counts[c.id],
                kind=EdgeKind.SURVIVAL,
            ))
        for c in survivors:
            if transferred.get(c.id, 0) > 0:
                edges.append(TransferEdge(
                    source=vertices[loser.id],
                    target=next_vertices[c.id],
                    weight=transferred[c.id],
                    kind=EdgeKind.TRANSFER,
                ))

        rounds.append(RoundSummary(
            round=round_num,
            counts={c.name: counts[c.id] for c in remaining},
            scores={c.name: scores[c.id] for c in remaining},
            eliminated=loser.name,
            transfers={c.name: transferred[c.id] for c in survivors if c.id in transferred},
            exhausted=count_exhausted(live),
            tiebreak=_tiebreak_method(loser, remaining, counts, scores),
        ))
        logger.debug(
            "Round %d: eliminated %s with %d votes (score %d), transfers %s",
            round_num, loser.name, counts[loser.id], scores[loser.id], transferred,
        )

        remaining = survivors
        counts = next_counts
        vertices = next_vertices
        round_num += 1

    winner = remaining[0]
    # A lone candidate still gets this edge instead of an empty graph, so the
    # winner is always a findable sink.
    final_vertex = RoundVertex(winner.id, winner.name, round_num + 1, counts[winner.id])
    edges.append(TransferEdge(
        source=vertices[winner.id],
        target=final_vertex,
        weight=counts[winner.id],
        kind=EdgeKind.FINAL,
    ))
    logger.info("Runoff winner: %s with %d votes after %d rounds", winner.name, counts[winner.id], round_num)

    return edges, rounds, winner


def tabulate(candidates: list[Candidate], ballots: list[Ballot]) -> list[TransferEdge]:
    """Tabulate ranked ballots into a round-by-round transfer graph.

    Each round the candidate with the fewest first-choice ballots is
    eliminated and its ballots move to their next remaining preference. Ties
    on first-choice count go to the lower weighted score (see
    counting.weighted_scores), then to the earlier position in candidates.

    The last survivor gets one extra vertex a round beyond its last counted
    round; that vertex is the only sink in the highest round and marks the
    winner.

    Args:
        candidates: Candidates in tie-break order
        ballots: Ranked ballots referencing those candidates

    Returns:
        Transfer edges ordered round by round; empty when there are no
        candidates or no ballots.

    Raises:
        BallotError: If the candidates or ballots are malformed
    """
    edges, _, _ = run_rounds(candidates, ballots)
    return edges


@register_voting_system
class InstantRunoffSystem(VotingSystem):
    """Instant Runoff Voting system used for the monthly game vote.

    For each round:
    1. Count first-choice votes among remaining candidates
    2. Eliminate the candidate with the fewest votes
    3. Move that candidate's ballots to their next remaining preference
    4. Repeat until one candidate remains

    Unlike a majority-stopping IRV, rounds continue until a single candidate
    is left, so the round graph always shows every elimination.

    Tiebreakers:
    - Weighted score: with n candidates in the race at the start, a ballot
      rank r is worth n - r + 1 points, using the rank as cast; lowest total
      is eliminated.
    - If still tied, the candidate listed first in the input is eliminated.
    """

    @property
    def name(self) -> str:
        return "Instant Runoff"

    @property
    def description(self) -> str:
        return "Eliminate the weakest game each round and transfer its ballots until one remains"

    def calculate(self, candidates: list[Candidate], ballots: list[Ballot]) -> TabulationResult:
        edges, rounds, winner = run_rounds(candidates, ballots)
        return TabulationResult(
            system_name=self.name,
            edges=edges,
            rounds=rounds,
            winner=winner,
            details={
                "num_candidates": len(candidates),
                "num_ballots": len(ballots),
                "final_votes": edges[-1].weight if edges else 0,
            },
        )

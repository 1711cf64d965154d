"""Shared test helpers."""

from gotm.models import Ballot, Candidate, Election, TransferEdge


def make_election(
    candidate_names: list[str], ballot_choices: list[list[str]], name: str = "Test", category: str = "long"
) -> Election:
    """Build an Election from candidate names and ballots given as name lists.

    Args:
        candidate_names: Display names; ids are assigned 1, 2, 3, ... in order
        ballot_choices: One list of candidate names per ballot, most preferred first

    Returns:
        Election with candidates and ballots populated (ballot ids start at 1).
    """
    candidates = [Candidate(id=i, name=n) for i, n in enumerate(candidate_names, start=1)]
    ids = {c.name: c.id for c in candidates}
    ballots = [
        Ballot.from_choices(i, [ids[n] for n in choices])
        for i, choices in enumerate(ballot_choices, start=1)
    ]
    return Election(name=name, category=category, candidates=candidates, ballots=ballots)


def edge_tuples(edges: list[TransferEdge]) -> list[tuple]:
    """Compact (source name, round, votes) -> (target name, round, votes), weight, kind view."""
    return [
        (
            (e.source.name, e.source.round, e.source.votes),
            (e.target.name, e.target.round, e.target.votes),
            e.weight,
            e.kind.value,
        )
        for e in edges
    ]

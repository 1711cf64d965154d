"""Orchestrator: load ballots, pre-filter candidates and run the runoff."""

import logging
from dataclasses import dataclass
from typing import Any

# Import parsers and voting systems to register them
from gotm.parsers import csv_export  # noqa: F401
from gotm.parsers import json_export  # noqa: F401
from gotm.voting import instant_runoff  # noqa: F401

from gotm.models import Ballot, Candidate, Election, TabulationResult
from gotm.parsers import detect_parser, detect_parser_by_content, get_supported_formats
from gotm.parsers.base import ExportFormatError
from gotm.voting import get_all_voting_systems
from gotm.voting.base import VotingSystem
from gotm.voting.counting import BallotError, validate_ballots
from gotm.voting.instant_runoff import InstantRunoffSystem
from gotm.winner import get_winner_name, to_legacy_edges

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Error during ballot analysis."""
    pass


@dataclass
class AnalysisResult:
    """Complete analysis result with the election and all voting outcomes."""
    election: Election
    results: list[TabulationResult]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "election_name": self.election.name,
            "category": self.election.category,
            "candidates": [c.to_dict() for c in self.election.candidates],
            "num_candidates": self.election.num_candidates,
            "num_ballots": self.election.num_ballots,
            "results": [result_to_dict(r) for r in self.results],
        }


def result_to_dict(result: TabulationResult) -> dict[str, Any]:
    """Serialise a result with both edge formats and the winner's name."""
    legacy_edges = to_legacy_edges(result.edges)
    data = result.to_dict()
    data["legacy_edges"] = legacy_edges
    data["winner_name"] = get_winner_name(legacy_edges)
    return data


def viable_candidates(
    candidates: list[Candidate], ballots: list[Ballot]
) -> tuple[list[Candidate], list[Ballot]]:
    """Drop candidates nobody ranked first, and their rankings.

    A candidate with no first preferences would only be eliminated without
    moving a single ballot, so it is excluded before tabulation starts. Its
    ranking entries are stripped from every ballot and ballots left empty are
    dropped. Candidate order is preserved.
    """
    first_choices: set[Any] = set()
    for ballot in ballots:
        ordered = ballot.ordered_candidate_ids()
        if ordered:
            first_choices.add(ordered[0])

    viable = [c for c in candidates if c.id in first_choices]
    dropped = {c.id for c in candidates} - first_choices
    if not dropped:
        return viable, [b for b in ballots if b.rankings]

    filtered = []
    for ballot in ballots:
        rankings = [r for r in ballot.rankings if r.candidate_id not in dropped]
        if rankings:
            filtered.append(Ballot(id=ballot.id, rankings=rankings))
    return viable, filtered


def calculate_voting_results(
    candidates: list[Candidate],
    ballots: list[Ballot],
    system: VotingSystem | None = None,
) -> TabulationResult:
    """Pre-filter the candidates and tabulate, never raising on bad ballots.

    Malformed ballots or a failed internal consistency check are logged and
    turned into an empty result with details["error"] set, so the results page
    shows "no results" rather than failing.
    """
    system = system or InstantRunoffSystem()
    logger.info("Found %d votes for %d candidates", len(ballots), len(candidates))

    try:
        validate_ballots(candidates, ballots)
        viable, usable = viable_candidates(candidates, ballots)
        if not viable or not usable:
            return TabulationResult(system_name=system.name)
        return system.calculate(viable, usable)
    except (BallotError, AssertionError) as e:
        logger.exception("Error calculating %s results", system.name)
        return TabulationResult(system_name=system.name, details={"error": str(e)})


def analyze_election_file(source: str, content: bytes) -> AnalysisResult:
    """Parse a ballot export and run all voting systems on it.

    Args:
        source: URL or filename (used to detect the appropriate parser)
        content: Raw bytes of the export

    Returns:
        AnalysisResult with the parsed election and all voting results

    Raises:
        AnalysisError: If no parser is found or parsing fails
    """
    # Find appropriate parser: try name matching first, then content detection
    parser = detect_parser(source)
    if parser is None:
        parser = detect_parser_by_content(content, source)
    if parser is None:
        raise AnalysisError(
            f"We couldn't determine the ballot export format.\n\n{get_supported_formats()}"
        )

    try:
        election = parser.parse(source, content)
    except ExportFormatError as e:
        raise AnalysisError(f"Failed to parse ballot export: {e}") from e

    results = [
        calculate_voting_results(election.candidates, election.ballots, system)
        for system in get_all_voting_systems()
    ]
    return AnalysisResult(election=election, results=results)

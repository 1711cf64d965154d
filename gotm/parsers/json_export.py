"""Parser for JSON ballot exports."""

import json
from typing import Any

from gotm.models import Ballot, Candidate, Election, Ranking
from gotm.parsers import register_parser
from gotm.parsers.base import BallotParser, ExportFormatError

CANDIDATE_KEYS = ("candidateId", "candidate_id", "nominationId", "nomination_id")


@register_parser
class JsonBallotParser(BallotParser):
    """Parser for the JSON export of one election category.

    Expected document:
        {
          "name": "2026-09",
          "category": "long",
          "candidates": [{"id": 1, "name": "Celeste"}, ...],
          "ballots": [
            {"id": 10, "rankings": [{"candidateId": 1, "rank": 1}, ...]},
            {"id": 11, "choices": [3, 1]},
            ...
          ]
        }

    Ballots give either "rankings" (explicit ranks) or "choices" (candidate ids,
    most preferred first). Ballots may carry extra keys such as "voter"; they
    are ignored. Candidates keep the order of the document, which is also the
    final tie-break order.
    """

    FORMAT_DESCRIPTION = "JSON export (.json) with \"candidates\" and \"ballots\""

    def can_parse(self, source: str) -> bool:
        return source.lower().split("?")[0].endswith(".json")

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: a JSON object with "candidates" and "ballots" keys."""
        try:
            data = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return isinstance(data, dict) and "candidates" in data and "ballots" in data

    def parse(self, source: str, content: bytes) -> Election:
        try:
            data = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ExportFormatError(f"Not valid JSON: {e}") from e

        return election_from_dict(data, default_name=source)


def _candidate_id(entry: dict[str, Any]) -> Any:
    for key in CANDIDATE_KEYS:
        if key in entry:
            return entry[key]
    raise ExportFormatError(f"Ranking has no candidate id: {entry!r}")


def _parse_ballot(entry: Any) -> Ballot:
    if not isinstance(entry, dict) or "id" not in entry:
        raise ExportFormatError(f"Ballot must be an object with an id: {entry!r}")

    if "choices" in entry:
        return Ballot.from_choices(entry["id"], list(entry["choices"]))

    rankings = []
    for ranking in entry.get("rankings", []):
        if not isinstance(ranking, dict) or "rank" not in ranking:
            raise ExportFormatError(f"Ballot {entry['id']!r} has a malformed ranking: {ranking!r}")
        rank = ranking["rank"]
        if isinstance(rank, bool) or not isinstance(rank, int):
            raise ExportFormatError(f"Ballot {entry['id']!r} has a non-integer rank: {rank!r}")
        rankings.append(Ranking(candidate_id=_candidate_id(ranking), rank=rank))
    return Ballot(id=entry["id"], rankings=rankings)


def election_from_dict(data: Any, default_name: str = "") -> Election:
    """Build an Election from the decoded JSON export document.

    Also used by the serverless handler for inline request bodies.
    """
    if not isinstance(data, dict):
        raise ExportFormatError("Export must be a JSON object")
    if "candidates" not in data or "ballots" not in data:
        raise ExportFormatError("Export must contain \"candidates\" and \"ballots\"")

    candidates = []
    for entry in data["candidates"]:
        if not isinstance(entry, dict) or "id" not in entry or "name" not in entry:
            raise ExportFormatError(f"Candidate must have an id and a name: {entry!r}")
        candidates.append(Candidate(id=entry["id"], name=str(entry["name"])))

    return Election(
        name=str(data.get("name") or default_name),
        category=str(data.get("category", "")),
        candidates=candidates,
        ballots=[_parse_ballot(entry) for entry in data["ballots"]],
    )

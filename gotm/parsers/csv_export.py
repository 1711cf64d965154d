"""Parser for CSV rankings exports."""

import csv
import io
from pathlib import PurePosixPath

from gotm.models import Ballot, Candidate, Election, Ranking
from gotm.parsers import register_parser
from gotm.parsers.base import BallotParser, ExportFormatError

REQUIRED_COLUMNS = ("vote_id", "nomination_id", "rank", "game_name")


def _to_id(value: str) -> int | str:
    value = value.strip()
    return int(value) if value.isdigit() else value


@register_parser
class CsvBallotParser(BallotParser):
    """Parser for the long-format rankings export.

    One row per ranking, as produced by the rankings query joined with the
    nomination names:

        vote_id,nomination_id,rank,game_name
        10,1,1,Celeste
        10,3,2,Hades
        11,3,1,Hades

    Numeric ids become ints. Candidates are ordered by game name (then id),
    matching the order nominations are loaded in for tabulation. An optional
    "category" column names the election category; each category is a
    separate runoff, so an export may only hold one.
    """

    FORMAT_DESCRIPTION = "CSV rankings export (.csv) with columns " + ",".join(REQUIRED_COLUMNS)

    def can_parse(self, source: str) -> bool:
        return source.lower().split("?")[0].endswith(".csv")

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: the header row names all required columns."""
        try:
            header = content.decode("utf-8-sig").splitlines()[0]
        except (UnicodeDecodeError, IndexError):
            return False
        columns = {c.strip() for c in header.split(",")}
        return all(c in columns for c in REQUIRED_COLUMNS)

    def parse(self, source: str, content: bytes) -> Election:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ExportFormatError(f"CSV export is not UTF-8: {e}") from e

        reader = csv.DictReader(io.StringIO(text))
        fieldnames = [f.strip() for f in (reader.fieldnames or [])]
        missing = [c for c in REQUIRED_COLUMNS if c not in fieldnames]
        if missing:
            raise ExportFormatError(f"CSV export is missing columns: {', '.join(missing)}")
        reader.fieldnames = fieldnames

        names: dict[int | str, str] = {}
        ballots: dict[int | str, Ballot] = {}
        categories: set[str] = set()

        for line_num, row in enumerate(reader, start=2):
            if any(row.get(c) is None for c in REQUIRED_COLUMNS):
                raise ExportFormatError(f"Line {line_num}: expected {len(fieldnames)} columns")
            try:
                rank = int(row["rank"])
            except (TypeError, ValueError) as e:
                raise ExportFormatError(f"Line {line_num}: invalid rank {row['rank']!r}") from e

            vote_id = _to_id(row["vote_id"])
            nomination_id = _to_id(row["nomination_id"])
            game_name = row["game_name"].strip()

            if names.setdefault(nomination_id, game_name) != game_name:
                raise ExportFormatError(
                    f"Line {line_num}: nomination {nomination_id!r} is named both "
                    f"{names[nomination_id]!r} and {game_name!r}"
                )
            if row.get("category"):
                categories.add(row["category"].strip())

            ballot = ballots.setdefault(vote_id, Ballot(id=vote_id))
            ballot.rankings.append(Ranking(candidate_id=nomination_id, rank=rank))

        if len(categories) > 1:
            raise ExportFormatError(
                f"CSV export mixes categories {', '.join(sorted(categories))}; "
                "export each category separately"
            )

        candidates = sorted(
            (Candidate(id=i, name=n) for i, n in names.items()),
            key=lambda c: (c.name.lower(), str(c.id)),
        )

        return Election(
            name=PurePosixPath(source.split("?")[0]).stem,
            category=categories.pop() if categories else "",
            candidates=candidates,
            ballots=list(ballots.values()),
        )

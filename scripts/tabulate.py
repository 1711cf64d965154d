"""Tabulate a ballot export from the command line.

Usage:
    python scripts/tabulate.py exports/2026-09-long.json
    python scripts/tabulate.py exports/2026-09-short.csv --json
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from gotm import config
from gotm.analyze import AnalysisError, analyze_election_file
from gotm.models import TabulationResult


def format_result(result: TabulationResult) -> str:
    """Render round summaries and the winner as plain text."""
    lines = [f"== {result.system_name} =="]
    if "error" in result.details:
        lines.append(f"Error: {result.details['error']}")
        return "\n".join(lines)
    if result.winner is None:
        lines.append("No ballots to tabulate.")
        return "\n".join(lines)

    for summary in result.rounds:
        counts = ", ".join(f"{name}={votes}" for name, votes in summary.counts.items())
        lines.append(f"Round {summary.round}: {counts}")
        line = f"  eliminated {summary.eliminated}"
        if summary.tiebreak:
            line += f" (tie broken by {summary.tiebreak.replace('_', ' ')})"
        lines.append(line)
        for name, votes in summary.transfers.items():
            lines.append(f"  -> {votes} to {name}")
        if summary.exhausted:
            lines.append(f"  {summary.exhausted} ballots exhausted")

    lines.append(f"Winner: {result.winner.name} ({result.details.get('final_votes', 0)} votes)")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Tabulate a ballot export with instant runoff")
    parser.add_argument("input", help="Path to a .json or .csv ballot export")
    parser.add_argument("--json", action="store_true",
                        help="Print the full result as JSON instead of a round summary")
    parser.add_argument("--log-level", default=None,
                        help=f"Logging level (default: {config.LOG_LEVEL})")
    args = parser.parse_args(argv)

    config.configure_logging(args.log_level)

    path = Path(args.input)
    try:
        analysis = analyze_election_file(path.name, path.read_bytes())
    except AnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2))
        return 0

    print(f"{analysis.election.name} {analysis.election.category}".strip())
    print(f"{analysis.election.num_candidates} candidates, {analysis.election.num_ballots} ballots")
    for result in analysis.results:
        print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())

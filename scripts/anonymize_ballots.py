"""Anonymize the voters in a JSON ballot export.

Replaces every voter name (the "voter" key on each ballot) with a fake
username generated by faker with a fixed seed, so the same voter always gets
the same replacement. Game names are public and kept as they are.

Usage:
    python scripts/anonymize_ballots.py exports/2026-09-long.json
    python scripts/anonymize_ballots.py exports/2026-09-long.json -o output.json
"""

import argparse
import json
from pathlib import Path

from faker import Faker

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "test_parsers" / "fixtures"
DEFAULT_OUTPUT = FIXTURES_DIR / "ballots.json"

SEED = 20260201


def discover_voters(data: dict) -> set[str]:
    """Collect all voter names from the export's ballots."""
    return {
        str(ballot["voter"])
        for ballot in data.get("ballots", [])
        if isinstance(ballot, dict) and ballot.get("voter")
    }


def generate_fake_voters(voters: set[str], seed: int) -> dict[str, str]:
    """Generate a mapping of real voter names to unique fake usernames."""
    fake = Faker(["en_US", "en_GB", "de_DE", "fr_FR"])
    Faker.seed(seed)

    mapping: dict[str, str] = {}
    used: set[str] = set()
    lowered = {v.lower() for v in voters}

    for voter in sorted(voters):
        fake_name = fake.user_name()
        while fake_name.lower() in lowered or fake_name in used:
            fake_name = fake.user_name()
        used.add(fake_name)
        mapping[voter] = fake_name

    return mapping


def apply_replacements(data: dict, mapping: dict[str, str]) -> dict:
    """Return a copy of the export with voter names replaced."""
    ballots = []
    for ballot in data.get("ballots", []):
        ballot = dict(ballot)
        if ballot.get("voter"):
            ballot["voter"] = mapping.get(str(ballot["voter"]), ballot["voter"])
        ballots.append(ballot)
    return {**data, "ballots": ballots}


def main():
    parser = argparse.ArgumentParser(
        description="Anonymize voters in a JSON ballot export")
    parser.add_argument("input", help="Path to the input JSON export")
    parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT),
                        help=f"Output path (default: {DEFAULT_OUTPUT})")
    args = parser.parse_args()

    data = json.loads(Path(args.input).read_text(encoding="utf-8"))

    voters = discover_voters(data)
    print(f"Found {len(voters)} unique voters")

    mapping = generate_fake_voters(voters, SEED)
    result = apply_replacements(data, mapping)

    remaining = voters & discover_voters(result)
    if remaining:
        print(f"WARNING: {len(remaining)} voters still found: {sorted(remaining)}")
    else:
        print("All voters successfully replaced.")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(result, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    print(f"Written to {output_path}")


if __name__ == "__main__":
    main()

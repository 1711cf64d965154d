"""Shared fixtures for parser tests."""

import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Import parsers to register them
from gotm.parsers import csv_export  # noqa: F401,E402
from gotm.parsers import json_export  # noqa: F401,E402


@pytest.fixture
def ballots_json():
    """Anonymized JSON export of the long-games vote for 2026-09.

    Disco Elysium wins with 7 of 9 ballots after three eliminations.
    """
    path = FIXTURES_DIR / "ballots.json"
    return path.read_bytes()


@pytest.fixture
def ballots_data(ballots_json):
    return json.loads(ballots_json)


@pytest.fixture
def rankings_csv():
    """The same vote as ballots.json in the long CSV rankings format."""
    path = FIXTURES_DIR / "rankings.csv"
    return path.read_bytes()

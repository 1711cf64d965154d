"""Shared fixtures for voting system tests."""

import pytest
from tests.conftest import make_election


@pytest.fixture
def clear_winner():
    """Single-choice ballots, A has a majority from round 1.

    Ballots: 3x[A], [B], [C]

    B and C tie on count and weighted score; B goes first (input order).
    A wins with 3.
    """
    return make_election(["A", "B", "C"], 3 * [["A"]] + [["B"], ["C"]])


@pytest.fixture
def single_transfer():
    """C's only ballot transfers to B.

    Ballots: 2x[A], 2x[B], [C, B]

    Round 1: A=2, B=2, C=1 -> C eliminated, 1 ballot to B.
    Round 2: A=2, B=3 -> A eliminated, its ballots exhaust.
    B wins with 3.
    """
    return make_election(["A", "B", "C"], 2 * [["A"]] + 2 * [["B"]] + [["C", "B"]])


@pytest.fixture
def three_way_tie():
    """Everybody starts with one vote.

    Ballots: [A], [B], [C, B]

    Round 1 scores (anchor 3): A=3, B=3+2=5, C=3. A and C tie on score,
    A is listed first -> A eliminated, its ballot exhausts.
    Round 2 scores (still anchored on 3): B=3+2=5, C=3 -> C eliminated, 1 to B.
    B wins with 2.
    """
    return make_election(["A", "B", "C"], [["A"], ["B"], ["C", "B"]])


@pytest.fixture
def game_month():
    """A realistic month with four games and nine ballots.

    Round 1: Celeste=1, Disco=3, Hades=2, Outer Wilds=3 -> Celeste out, 1 to Disco.
    Round 2: Disco=4, Hades=2, Outer Wilds=3 -> Hades out, 2 to Disco.
    Round 3: Disco=6, Outer Wilds=3 -> Outer Wilds out, 1 to Disco, 2 exhaust.
    Disco Elysium wins with 7.
    """
    return make_election(
        ["Celeste", "Disco Elysium", "Hades", "Outer Wilds"],
        [
            ["Outer Wilds", "Disco Elysium", "Celeste"],
            ["Outer Wilds", "Celeste"],
            ["Disco Elysium", "Outer Wilds"],
            ["Disco Elysium", "Hades"],
            ["Hades", "Disco Elysium", "Outer Wilds"],
            ["Celeste", "Disco Elysium"],
            ["Outer Wilds"],
            ["Hades", "Celeste", "Disco Elysium"],
            ["Disco Elysium"],
        ],
    )

"""Tests for the vote counting helpers."""

import pytest

from gotm.models import Ballot, Candidate, Ranking
from gotm.voting.counting import (
    BallotError,
    LiveRanking,
    build_live_rankings,
    count_exhausted,
    current_first_choice_counts,
    eliminate,
    transfer,
    validate_ballots,
    weighted_scores,
)
from tests.conftest import make_election

A, B, C = Candidate(1, "A"), Candidate(2, "B"), Candidate(3, "C")


def ranks(live, ballot_id):
    return [(r.candidate_id, r.rank) for r in live[ballot_id]]


def positions(live, ballot_id):
    return [(r.candidate_id, r.position) for r in live[ballot_id]]


class TestBuildLiveRankings:
    def test_sorts_by_rank(self):
        ballot = Ballot(id=1, rankings=[Ranking(3, 2), Ranking(1, 1)])
        live = build_live_rankings([A, B, C], [ballot])
        assert ranks(live, 1) == [(1, 1), (3, 2)]

    def test_gaps_close_in_positions_only(self):
        ballot = Ballot(id=1, rankings=[Ranking(1, 1), Ranking(2, 4)])
        live = build_live_rankings([A, B, C], [ballot])
        assert positions(live, 1) == [(1, 1), (2, 2)]
        assert ranks(live, 1) == [(1, 1), (2, 4)]

    def test_does_not_modify_ballots(self):
        ballot = Ballot(id=1, rankings=[Ranking(2, 3), Ranking(1, 1)])
        build_live_rankings([A, B, C], [ballot])
        assert ballot.rankings == [Ranking(2, 3), Ranking(1, 1)]

    def test_empty_ballot_is_kept(self):
        live = build_live_rankings([A], [Ballot(id=1)])
        assert live == {1: []}

    def test_unknown_candidate(self):
        with pytest.raises(BallotError, match="unknown candidate 9"):
            build_live_rankings([A, B], [Ballot.from_choices(1, [1, 9])])

    def test_duplicate_rank(self):
        ballot = Ballot(id=1, rankings=[Ranking(1, 1), Ranking(2, 1)])
        with pytest.raises(BallotError, match="rank 1 twice"):
            build_live_rankings([A, B], [ballot])

    @pytest.mark.parametrize("rank", [0, -1, 1.5, "1", True])
    def test_invalid_rank(self, rank):
        ballot = Ballot(id=1, rankings=[Ranking(1, rank)])
        with pytest.raises(BallotError, match="invalid rank"):
            build_live_rankings([A], [ballot])

    def test_duplicate_candidate_in_ballot(self):
        ballot = Ballot(id=1, rankings=[Ranking(1, 1), Ranking(1, 2)])
        with pytest.raises(BallotError, match="candidate 1 twice"):
            build_live_rankings([A], [ballot])

    def test_duplicate_ballot_id(self):
        ballots = [Ballot.from_choices(1, [1]), Ballot.from_choices(1, [2])]
        with pytest.raises(BallotError, match="Duplicate ballot id"):
            build_live_rankings([A, B], ballots)

    def test_duplicate_candidate_id(self):
        with pytest.raises(BallotError, match="Duplicate candidate id"):
            build_live_rankings([A, Candidate(1, "A again")], [])

    def test_string_ids(self):
        candidates = [Candidate("celeste", "Celeste"), Candidate("hades", "Hades")]
        live = build_live_rankings(candidates, [Ballot.from_choices("v1", ["hades", "celeste"])])
        assert ranks(live, "v1") == [("hades", 1), ("celeste", 2)]


class TestValidateBallots:
    def test_mixed_rank_types(self):
        ballot = Ballot(id=1, rankings=[Ranking(1, "1"), Ranking(2, 2)])
        with pytest.raises(BallotError, match="invalid rank '1'"):
            validate_ballots([A, B], [ballot])

    def test_valid_input(self):
        assert validate_ballots([A, B], [Ballot.from_choices(1, [2, 1])]) is None


class TestFirstChoiceCounts:
    def test_counts_top_choice_only(self):
        election = make_election(["A", "B", "C"], [["A", "B"], ["A"], ["C", "A"]])
        live = build_live_rankings(election.candidates, election.ballots)
        assert current_first_choice_counts(election.candidates, live) == {1: 2, 2: 0, 3: 1}

    def test_exhausted_ballots_count_for_nobody(self):
        live = {1: [], 2: [LiveRanking(2, 1, 1)]}
        assert current_first_choice_counts([A, B], live) == {1: 0, 2: 1}

    def test_ignores_candidates_not_asked_for(self):
        live = {1: [LiveRanking(1, 1, 1)], 2: [LiveRanking(2, 1, 1)]}
        assert current_first_choice_counts([B], live) == {2: 1}


class TestWeightedScores:
    def test_three_way_tie_scores(self):
        """[A], [B], [C, B] with 3 candidates: A=3, B=3+2, C=3."""
        election = make_election(["A", "B", "C"], [["A"], ["B"], ["C", "B"]])
        live = build_live_rankings(election.candidates, election.ballots)
        scores = weighted_scores(election.candidates, election.ballots, live)
        assert scores == {1: 3, 2: 5, 3: 3}

    def test_eliminated_choices_do_not_promote_later_ranks(self):
        """After A goes, B keeps the points of its rank-2 entry on [C, B]."""
        election = make_election(["A", "B", "C"], [["A"], ["B"], ["C", "B"]])
        live = build_live_rankings(election.candidates, election.ballots)
        eliminate(1, live)
        remaining = election.candidates[1:]
        assert weighted_scores(remaining, election.ballots, live, max_rank=3) == {2: 5, 3: 3}

    def test_default_anchor_is_number_of_candidates_scored(self):
        election = make_election(["A", "B", "C"], [["A"], ["B"], ["C", "B"]])
        live = build_live_rankings(election.candidates, election.ballots)
        eliminate(1, live)
        remaining = election.candidates[1:]
        assert weighted_scores(remaining, election.ballots, live) == {2: 3, 3: 2}

    def test_gaps_score_by_rank_as_cast(self):
        ballots = [Ballot(id=1, rankings=[Ranking(1, 1), Ranking(2, 3)])]
        live = build_live_rankings([A, B, C], ballots)
        assert weighted_scores([A, B, C], ballots, live) == {1: 3, 2: 1, 3: 0}

    def test_ranks_beyond_anchor_score_zero(self):
        ballots = [Ballot(id=1, rankings=[Ranking(1, 1), Ranking(2, 4)])]
        live = build_live_rankings([A, B], ballots)
        assert weighted_scores([A, B], ballots, live) == {1: 2, 2: 0}

    def test_unranked_candidate_scores_zero(self):
        election = make_election(["A", "B"], [["A"], ["A"]])
        live = build_live_rankings(election.candidates, election.ballots)
        assert weighted_scores(election.candidates, election.ballots, live) == {1: 4, 2: 0}


class TestTransfer:
    def test_moves_to_next_choice(self):
        election = make_election(["A", "B", "C"], [["C", "B"], ["C", "A"], ["C"], ["A", "C"]])
        live = build_live_rankings(election.candidates, election.ballots)
        transferred = transfer(3, election.candidates[:2], election.ballots, live)
        assert transferred == {2: 1, 1: 1}

    def test_skips_candidates_not_remaining(self):
        election = make_election(["A", "B", "C"], [["C", "A", "B"]])
        live = build_live_rankings(election.candidates, election.ballots)
        transferred = transfer(3, [B], election.ballots, live)
        assert transferred == {2: 1}

    def test_reads_rankings_before_elimination(self):
        election = make_election(["A", "B"], [["A", "B"]])
        live = build_live_rankings(election.candidates, election.ballots)
        assert transfer(1, [B], election.ballots, live) == {2: 1}
        eliminate(1, live)
        # Once eliminated, nothing is topped by A any more
        assert transfer(1, [B], election.ballots, live) == {}


class TestEliminate:
    def test_removes_and_renumbers_positions(self):
        election = make_election(["A", "B", "C"], [["A", "B", "C"], ["B", "C"]])
        live = build_live_rankings(election.candidates, election.ballots)
        eliminate(2, live)
        assert positions(live, 1) == [(1, 1), (3, 2)]
        assert positions(live, 2) == [(3, 1)]
        assert ranks(live, 1) == [(1, 1), (3, 3)]
        assert ranks(live, 2) == [(3, 2)]

    def test_exhausts_ballots(self):
        election = make_election(["A", "B"], [["A"], ["B", "A"]])
        live = build_live_rankings(election.candidates, election.ballots)
        eliminate(1, live)
        assert live[1] == []
        assert count_exhausted(live) == 1

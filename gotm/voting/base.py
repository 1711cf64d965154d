"""Abstract base class for voting systems."""

from abc import ABC, abstractmethod

from gotm.models import Ballot, Candidate, TabulationResult


class VotingSystem(ABC):
    """Abstract base class for voting systems.

    Each voting system implementation tabulates ranked ballots into a round
    graph using its own algorithm. Systems are registered via the
    @register_voting_system decorator in gotm/voting/__init__.py.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this voting system."""
        pass

    @property
    def description(self) -> str:
        """Optional description of how this voting system works."""
        return ""

    @abstractmethod
    def calculate(self, candidates: list[Candidate], ballots: list[Ballot]) -> TabulationResult:
        """Tabulate the ballots using this voting system.

        Args:
            candidates: Candidates in tie-break order
            ballots: Ranked ballots referencing those candidates

        Returns:
            TabulationResult with the round graph, round details and winner

        Raises:
            BallotError: If the ballots are malformed
        """
        pass

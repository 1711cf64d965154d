"""Abstract base class for ballot export parsers."""

from abc import ABC, abstractmethod

from gotm.models import Election


class ExportFormatError(ValueError):
    """Raised when an export is recognised but its contents are malformed."""
    pass


class BallotParser(ABC):
    """Abstract base class for parsing ballot exports.

    Each parser implementation handles one export format. Parsers are
    registered via the @register_parser decorator in gotm/parsers/__init__.py.
    """

    @abstractmethod
    def can_parse(self, source: str) -> bool:
        """Check if this parser can handle the given source.

        Args:
            source: URL or filename to check

        Returns:
            True if this parser can handle the source, False otherwise
        """
        pass

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Check if this parser can handle the given file content.

        Used for uploads and URLs whose name gives no hint of the format.

        Args:
            content: Raw bytes of the uploaded file
            filename: Original filename (may help with basic filtering)

        Returns:
            True if this parser can likely handle the content, False otherwise
        """
        return False

    @abstractmethod
    def parse(self, source: str, content: bytes) -> Election:
        """Parse the content into an Election.

        Args:
            source: Original URL or filename (for context)
            content: Raw bytes of the export

        Returns:
            Parsed Election, candidates ordered for tie-breaking

        Raises:
            ExportFormatError: If the content cannot be parsed
        """
        pass

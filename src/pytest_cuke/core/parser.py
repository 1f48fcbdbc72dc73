"""Gherkin document parser integration.

This module defines a thin adapter over the `gherkin-official` parser.
The parser tokenizes feature text into a tree of dictionaries which is
then validated into immutable document models. Parser failures are
converted into `DocumentError` carrying the location of the first
reported problem.
"""

from io import TextIOBase
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gherkin.errors import CompositeParserException, ParserError
from gherkin.parser import Parser
from gherkin.token_matcher import TokenMatcher
from gherkin.token_scanner import TokenScanner
from pydantic import ValidationError

from pytest_cuke.errors import DocumentError
from pytest_cuke.schema.documents import Document, Location

if TYPE_CHECKING:
    from os import PathLike

if TYPE_CHECKING:
    from pytest_cuke.schema.documents import Feature


class DocumentParser:
    """Gherkin parser producing validated document models.

    The parser keeps no state between documents and may be shared.

    Attributes:
        language: Default Gherkin dialect, overridden per document by a
            `# language:` header.
    """

    def __init__(self, language: str = 'en') -> None:
        """Initialize the document parser.

        Args:
            language: Default Gherkin dialect.
        """
        self.language = language

    @staticmethod
    def _error_location(error: ParserError) -> Location | None:
        """Extract the location of a parser error, if reported."""
        if isinstance(error, CompositeParserException) and error.errors:
            error = error.errors[0]

        location: dict[str, Any] | None = getattr(error, 'location', None)
        if not location:
            return None

        return Location.model_validate(location)

    def parse_document(self, content: str | TextIOBase, *,
                       filename: str | None = None) -> Document:
        """Parse feature text into a document.

        Args:
            content: Feature text or a text stream.
            filename: Name of the feature file, used in errors.

        Returns:
            The parsed document. Empty documents hold no feature.

        Raises:
            DocumentError: If the text is not a valid Gherkin document.
        """
        if isinstance(content, TextIOBase):
            content = content.read()

        # A scanner treats single-line input without a newline as a path.
        if content and not content.endswith('\n'):
            content += '\n'

        try:
            tree = Parser().parse(TokenScanner(content), TokenMatcher(self.language))

        except ParserError as base:
            raise DocumentError.from_location(
                f'{base}'.strip(),
                self._error_location(base),
                filename=filename,
                error=base,
            ) from base

        try:
            return Document.model_validate({**tree, 'uri': filename})

        except ValidationError as base:
            raise DocumentError.from_location(
                f'Invalid document structure: {base.errors()[0]['msg']}',
                None,
                filename=filename,
                error=base,
            ) from base

    def parse(self, content: str | TextIOBase, *,
              filename: str | None = None) -> 'Feature | None':
        """Parse feature text into a feature.

        Args:
            content: Feature text or a text stream.
            filename: Name of the feature file, used in errors.

        Returns:
            The parsed feature, or `None` for documents without one.

        Raises:
            DocumentError: If the text is not a valid Gherkin document.
        """
        return self.parse_document(content, filename=filename).feature

    def parse_file(self, path: 'str | PathLike[str]') -> 'Feature | None':
        """Parse a feature file.

        Args:
            path: Path of the feature file.

        Returns:
            The parsed feature, or `None` for files without one.

        Raises:
            DocumentError: If the file can not be read or parsed.
        """
        filename = f'{path}'

        try:
            content = Path(path).read_text(encoding='utf-8')
        except OSError as base:
            raise DocumentError.from_location(
                f'Can not read feature file: {base.strerror or base}',
                None,
                filename=filename,
                error=base,
            ) from base
        except UnicodeDecodeError as base:
            raise DocumentError.from_location(
                f'Feature file is not valid UTF-8: {base.reason}',
                None,
                filename=filename,
                error=base,
            ) from base

        return self.parse(content, filename=filename)

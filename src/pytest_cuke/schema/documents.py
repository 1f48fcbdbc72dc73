"""Immutable models of a parsed Gherkin document.

The Gherkin parser produces a tree of dictionaries (features, rules,
backgrounds, scenarios, steps, and example tables). The models defined
here validate that tree into immutable objects consumed by the engine.
Only the fields the engine relies upon are declared; the rest of the
parser output is ignored.
"""

from typing import Self

from pydantic import Field

from pytest_cuke.models import DocumentModel
from pytest_cuke.names import Tag  # noqa: TC001


class Location(DocumentModel):
    """Position of an element in a feature file (1-based)."""

    line: int = 0
    column: int | None = None


class TagNode(DocumentModel):
    """A tag attached to a feature, rule, scenario, or example table."""

    name: Tag
    location: Location = Field(default_factory=Location)


class TaggedMixin(DocumentModel):
    """Mixin providing tags and their plain names."""

    tags: tuple[TagNode, ...] = ()

    @property
    def tag_names(self) -> frozenset[str]:
        """Return the set of tag names attached to the element."""
        return frozenset(tag.name for tag in self.tags)


class Cell(DocumentModel):
    """A single table cell."""

    value: str = ''
    location: Location = Field(default_factory=Location)


class TableRow(DocumentModel):
    """A row of a data table or an example table."""

    cells: tuple[Cell, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def values(self) -> tuple[str, ...]:
        """Return the plain cell values of the row."""
        return tuple(cell.value for cell in self.cells)


class DataTable(DocumentModel):
    """A data table argument attached to a step."""

    rows: tuple[TableRow, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def values(self) -> list[list[str]]:
        """Return the table as a list of rows of plain values."""
        return [list(row.values) for row in self.rows]


class DocString(DocumentModel):
    """A doc string argument attached to a step."""

    content: str = ''
    delimiter: str = '"""'
    media_type: str | None = None
    location: Location = Field(default_factory=Location)


class Step(DocumentModel):
    """A single executable line of a scenario or background.

    The keyword (`Given`, `When`, `Then`, `And`, ...) does not take part
    in matching; only the text is matched against step definitions.
    """

    keyword: str = ''
    keyword_type: str | None = None
    text: str
    doc_string: DocString | None = None
    data_table: DataTable | None = None
    location: Location = Field(default_factory=Location)


class Examples(TaggedMixin, DocumentModel):
    """An example table of a scenario outline.

    The header row holds placeholder names; every body row holds the
    substitution values of one generated scenario run.
    """

    keyword: str = 'Examples'
    name: str = ''
    description: str | None = None
    table_header: TableRow | None = None
    table_body: tuple[TableRow, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def placeholders(self) -> tuple[str, ...]:
        """Return header names wrapped as placeholders (`<name>`)."""
        if self.table_header is None:
            return ()

        return tuple(f'<{name}>' for name in self.table_header.values)


class Background(DocumentModel):
    """Steps executed before every scenario of a feature or rule."""

    keyword: str = 'Background'
    name: str = ''
    description: str | None = None
    steps: tuple[Step, ...] = ()
    location: Location = Field(default_factory=Location)


class Scenario(TaggedMixin, DocumentModel):
    """A scenario or a scenario outline.

    A scenario with at least one example table is an outline: its steps
    contain placeholders expanded from the example rows.
    """

    keyword: str = 'Scenario'
    name: str = ''
    description: str | None = None
    steps: tuple[Step, ...] = ()
    examples: tuple[Examples, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def is_outline(self) -> bool:
        """Check whether the scenario is expanded from example tables."""
        return bool(self.examples)


class RuleChild(DocumentModel):
    """A child of a rule: either a background or a scenario."""

    background: Background | None = None
    scenario: Scenario | None = None


class Rule(TaggedMixin, DocumentModel):
    """A group of scenarios sharing a business rule and a background."""

    keyword: str = 'Rule'
    name: str = ''
    description: str | None = None
    children: tuple[RuleChild, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def background(self) -> Background | None:
        """Return the rule background, if any."""
        for child in self.children:
            if child.background is not None:
                return child.background

        return None

    @property
    def scenarios(self) -> tuple[Scenario, ...]:
        """Return the rule scenarios in document order."""
        return tuple(
            child.scenario
            for child in self.children
            if child.scenario is not None
        )


class FeatureChild(DocumentModel):
    """A child of a feature: a background, a scenario, or a rule."""

    background: Background | None = None
    scenario: Scenario | None = None
    rule: Rule | None = None


class Feature(TaggedMixin, DocumentModel):
    """A feature: the root of a single Gherkin document."""

    language: str = 'en'
    keyword: str = 'Feature'
    name: str = ''
    description: str | None = None
    children: tuple[FeatureChild, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def background(self) -> Background | None:
        """Return the feature background, if any."""
        for child in self.children:
            if child.background is not None:
                return child.background

        return None

    @classmethod
    def from_scenarios(cls, *scenarios: Scenario, name: str = '',
                       background: Background | None = None) -> Self:
        """Build a feature holding the given scenarios.

        Args:
            *scenarios: Scenarios in execution order.
            name: Optional feature name.
            background: Optional feature background.

        Returns:
            A feature model.
        """
        children = [FeatureChild(scenario=scenario) for scenario in scenarios]
        if background is not None:
            children.insert(0, FeatureChild(background=background))

        return cls(name=name, children=tuple(children))


class Document(DocumentModel):
    """A parsed Gherkin document. Empty documents hold no feature."""

    feature: Feature | None = None
    uri: str | None = None

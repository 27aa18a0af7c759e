from typing import Optional, Tuple, Union
from dataclasses import dataclass, field


TableRow = Tuple[str, ...]


@dataclass(frozen=True)
class DataTable:
    rows: Tuple[TableRow, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DocString:
    content: str
    content_type: Optional[str] = field(default=None)


StepArgument = Union[DataTable, DocString]


@dataclass(frozen=True)
class Step:
    keyword: str
    text: str
    argument: Optional[StepArgument] = field(default=None)
    line: Optional[int] = field(default=None)


@dataclass(frozen=True)
class Scenario:
    name: str
    steps: Tuple[Step, ...] = field(default_factory=tuple)
    line: Optional[int] = field(default=None)


@dataclass(frozen=True)
class Examples:
    header: TableRow
    rows: Tuple[TableRow, ...] = field(default_factory=tuple)
    name: str = field(default='')


@dataclass(frozen=True)
class ScenarioOutline:
    name: str
    steps: Tuple[Step, ...] = field(default_factory=tuple)
    examples: Tuple[Examples, ...] = field(default_factory=tuple)
    line: Optional[int] = field(default=None)


ScenarioDefinition = Union[Scenario, ScenarioOutline]


@dataclass(frozen=True)
class Feature:
    name: str
    definitions: Tuple[ScenarioDefinition, ...] = field(default_factory=tuple)
    background: Tuple[Step, ...] = field(default_factory=tuple)
    filename: Optional[str] = field(default=None)

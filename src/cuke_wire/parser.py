"""Adapter between behave's gherkin parser and the immutable feature model.

behave owns the grammar; this module only walks the tree it produces and
freezes the parts the runner needs.
"""
from __future__ import annotations

import logging

from typing import List, Optional, Tuple

from behave.parser import parse_feature, ParserError
from behave import model as behave_model

from cuke_wire.model import (
    DataTable,
    DocString,
    Examples,
    Feature,
    Scenario,
    ScenarioDefinition,
    ScenarioOutline,
    Step,
    StepArgument,
    TableRow,
)


logger = logging.getLogger(__name__)


class FeatureParseError(Exception):
    filename: Optional[str]
    line: Optional[int]

    def __init__(self, message: str, *, filename: Optional[str] = None, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.filename = filename
        self.line = line


def _convert_table(table: behave_model.Table) -> DataTable:
    rows: List[TableRow] = [tuple(table.headings)]
    rows.extend(tuple(row.cells) for row in table.rows)

    return DataTable(rows=tuple(rows))


def _convert_step(step: behave_model.Step) -> Step:
    argument: Optional[StepArgument] = None

    if step.table is not None:
        argument = _convert_table(step.table)
    elif step.text is not None:
        argument = DocString(content=str(step.text), content_type=getattr(step.text, 'content_type', None))

    return Step(keyword=step.keyword, text=step.name, argument=argument, line=step.line)


def _convert_steps(steps: List[behave_model.Step]) -> Tuple[Step, ...]:
    return tuple(_convert_step(step) for step in steps)


def _convert_examples(examples: behave_model.Examples) -> Examples:
    if examples.table is None:
        return Examples(header=(), rows=(), name=examples.name)

    return Examples(
        header=tuple(examples.table.headings),
        rows=tuple(tuple(row.cells) for row in examples.table.rows),
        name=examples.name,
    )


def _convert_definition(scenario: behave_model.Scenario) -> ScenarioDefinition:
    if isinstance(scenario, behave_model.ScenarioOutline):
        return ScenarioOutline(
            name=scenario.name,
            steps=_convert_steps(scenario.steps),
            examples=tuple(_convert_examples(examples) for examples in scenario.examples),
            line=scenario.line,
        )

    return Scenario(name=scenario.name, steps=_convert_steps(scenario.steps), line=scenario.line)


def parse_feature_text(text: str, *, filename: Optional[str] = None, language: Optional[str] = None) -> Feature:
    try:
        parsed = parse_feature(text, language=language, filename=filename)
    except ParserError as e:
        raise FeatureParseError(str(e), filename=filename, line=e.line) from e

    if parsed is None:
        raise FeatureParseError(f'no feature found in {filename or "<string>"}', filename=filename)

    background: Tuple[Step, ...] = ()
    if parsed.background is not None:
        background = _convert_steps(parsed.background.steps)

    feature = Feature(
        name=parsed.name,
        definitions=tuple(_convert_definition(scenario) for scenario in parsed.scenarios),
        background=background,
        filename=filename,
    )

    logger.debug(f'parsed feature "{feature.name}" with {len(feature.definitions)} scenario definitions')

    return feature

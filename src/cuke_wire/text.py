from __future__ import annotations

import re

from typing import Dict, List, Optional, Sequence, Tuple, Union
from dataclasses import replace

from cuke_wire.model import DataTable, DocString, Step, StepArgument, TableRow


PLACEHOLDER_PATTERN = re.compile(r'<([^<>]+)>')

WireArgument = Union[str, List[List[str]]]


def _placeholder_values(header: Sequence[str], row: Sequence[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}

    # first column wins if a name is repeated in the header
    for name, value in zip(header, row):
        values.setdefault(name, value)

    return values


def substitute(template: str, header: Sequence[str], row: Sequence[str]) -> str:
    """Replace every `<name>` token in `template` with the value of column `name` in `row`.

    Tokens without a matching column are left as they are. Substituted values are not scanned
    again, so a value that looks like a placeholder ends up verbatim in the result.
    """
    if '<' not in template:
        return template

    values = _placeholder_values(header, row)

    def _replace(match: re.Match[str]) -> str:
        return values.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def substitute_table(table: DataTable, header: Sequence[str], row: Sequence[str]) -> DataTable:
    rows: Tuple[TableRow, ...] = tuple(tuple(substitute(cell, header, row) for cell in table_row) for table_row in table.rows)

    return DataTable(rows=rows)


def substitute_argument(argument: Optional[StepArgument], header: Sequence[str], row: Sequence[str]) -> Optional[StepArgument]:
    if isinstance(argument, DataTable):
        return substitute_table(argument, header, row)
    elif isinstance(argument, DocString):
        return replace(argument, content=substitute(argument.content, header, row))

    return argument


def materialize_step(template: Step, header: Sequence[str], row: Sequence[str]) -> Step:
    return replace(
        template,
        text=substitute(template.text, header, row),
        argument=substitute_argument(template.argument, header, row),
    )


def materialize_steps(templates: Sequence[Step], header: Sequence[str], row: Sequence[str]) -> Tuple[Step, ...]:
    return tuple(materialize_step(template, header, row) for template in templates)


def format_example(header: Sequence[str], row: Sequence[str]) -> str:
    return ' '.join(f'{name} = {value}' for name, value in zip(header, row))


def argument_to_wire(argument: Optional[StepArgument]) -> Optional[WireArgument]:
    """Trailing invoke argument for a step, a list of rows for tables and plain text for docstrings."""
    if isinstance(argument, DataTable):
        return [list(table_row) for table_row in argument.rows]
    elif isinstance(argument, DocString):
        return argument.content

    return None

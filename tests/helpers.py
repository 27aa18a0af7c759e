from typing import Any, List, Optional, Tuple

from cuke_wire.model import (
    DataTable,
    Examples,
    Feature,
    Scenario,
    ScenarioDefinition,
    ScenarioOutline,
    Step,
    StepArgument,
    TableRow,
)


Event = Tuple[Any, ...]


class RecordingObserver:
    events: List[Event]
    fail_init: Optional[Exception]

    def __init__(self, name: str = 'recorder', fail_init: Optional[Exception] = None) -> None:
        self.name = name
        self.events = []
        self.fail_init = fail_init

    def kinds(self) -> List[str]:
        return [event[0] for event in self.events]

    def of(self, kind: str) -> List[Event]:
        return [event for event in self.events if event[0] == kind]

    def init(self) -> None:
        if self.fail_init is not None:
            raise self.fail_init

        self.events.append(('init',))

    def shutdown(self) -> None:
        self.events.append(('shutdown',))

    def close(self) -> None:
        self.events.append(('close',))

    def begin_feature(self, feature: Feature) -> None:
        self.events.append(('begin_feature', feature.name))

    def begin_scenario(self, definition: ScenarioDefinition) -> None:
        self.events.append(('begin_scenario', definition.name))

    def example(self, header: TableRow, row: TableRow) -> None:
        self.events.append(('example', header, row))

    def before_step(self, step: Step) -> None:
        self.events.append(('before_step', step.text))

    def success(self, step: Step) -> None:
        self.events.append(('success', step.text))

    def failure(self, step: Step, error: Exception) -> None:
        self.events.append(('failure', step.text, str(error)))

    def end_scenario(self, definition: ScenarioDefinition) -> None:
        self.events.append(('end_scenario', definition.name))


def step(text: str, keyword: str = 'Given', argument: Optional[StepArgument] = None) -> Step:
    return Step(keyword=keyword, text=text, argument=argument)


def table(*rows: TableRow) -> DataTable:
    return DataTable(rows=tuple(rows))


def scenario(name: str, *texts: str) -> Scenario:
    return Scenario(name=name, steps=tuple(step(text) for text in texts))


def outline(name: str, texts: List[str], header: TableRow, *rows: TableRow) -> ScenarioOutline:
    return ScenarioOutline(
        name=name,
        steps=tuple(step(text) for text in texts),
        examples=(Examples(header=header, rows=tuple(rows)),),
    )


def feature(name: str, *definitions: ScenarioDefinition, background: Tuple[Step, ...] = ()) -> Feature:
    return Feature(name=name, definitions=definitions, background=background)

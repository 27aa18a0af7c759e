from __future__ import annotations

import logging

from typing import Optional, Sequence, Tuple

from cuke_wire.model import Feature, Scenario, ScenarioDefinition, ScenarioOutline, Step, TableRow
from cuke_wire.observers import ObserverFanout
from cuke_wire.parser import FeatureParseError, parse_feature_text
from cuke_wire.text import materialize_steps
from cuke_wire.wire import Endpoint, NoMatchError, WireError


logger = logging.getLogger(__name__)


class Runner:
    """Executes features against a wire endpoint, reporting to a fanout of observers.

    Within a scenario (or a materialized outline row) execution stops at the first failing
    step. Scenario definitions run in document order; a failing one stops the run only when
    `quit_on_error` is set, in which case `halted` is set and stays set.
    """

    endpoint: Endpoint
    observers: ObserverFanout
    quit_on_error: bool
    halted: bool

    scenarios: int
    failed_scenarios: int

    def __init__(self, endpoint: Endpoint, observers: ObserverFanout, *, quit_on_error: bool = False) -> None:
        self.endpoint = endpoint
        self.observers = observers
        self.quit_on_error = quit_on_error
        self.halted = False
        self.scenarios = 0
        self.failed_scenarios = 0

    def run_step(self, step: Step) -> Optional[WireError]:
        self.observers.before_step(step)

        matches = self.endpoint.step_matches(step.text)
        if matches.error is not None:
            return matches.error

        if not matches.value:
            return NoMatchError(step.text)

        invoked = self.endpoint.invoke(matches.value[0], step.argument)

        return invoked.error

    def _run_steps(self, steps: Sequence[Step]) -> bool:
        for step in steps:
            error = self.run_step(step)

            if error is not None:
                self.observers.failure(step, error)
                return False

            self.observers.success(step)

        return True

    def _execute(
        self,
        definition: ScenarioDefinition,
        steps: Sequence[Step],
        example: Optional[Tuple[TableRow, TableRow]] = None,
    ) -> bool:
        self.observers.begin_scenario(definition)

        if example is not None:
            header, row = example
            self.observers.example(header, row)

        # an error here is sticky on the endpoint and is reported by the first step
        began = self.endpoint.begin_scenario()
        if not began.ok:
            logger.debug(f'begin_scenario for "{definition.name}" failed: {began.error}')

        passed = self._run_steps(steps)

        # without steps there is nothing to report the error through
        if passed and not began.ok and len(steps) < 1:
            logger.error(f'begin_scenario for "{definition.name}" failed: {began.error}')
            passed = False

        ended = self.endpoint.end_scenario()
        if not ended.ok and passed:
            logger.warning(f'end_scenario for "{definition.name}" failed: {ended.error}')

        self.observers.end_scenario(definition)

        self.scenarios += 1
        if not passed:
            self.failed_scenarios += 1

        return passed

    def run_scenario(self, scenario: Scenario, background: Sequence[Step] = ()) -> bool:
        return self._execute(scenario, (*background, *scenario.steps))

    def run_scenario_outline(self, outline: ScenarioOutline, background: Sequence[Step] = ()) -> bool:
        passed = True

        for examples in outline.examples:
            for row in examples.rows:
                steps = (*background, *materialize_steps(outline.steps, examples.header, row))

                if not self._execute(outline, steps, (examples.header, row)):
                    passed = False

                    if self.quit_on_error:
                        return passed

        return passed

    def run_definition(self, definition: ScenarioDefinition, background: Sequence[Step] = ()) -> bool:
        if isinstance(definition, ScenarioOutline):
            return self.run_scenario_outline(definition, background)
        elif isinstance(definition, Scenario):
            return self.run_scenario(definition, background)

        raise TypeError(f'unknown scenario definition {definition!r}')

    def run_feature(self, feature: Feature) -> bool:
        if self.halted:
            logger.debug(f'run halted, skipping "{feature.name}"')
            return False

        passed = True

        self.observers.begin_feature(feature)

        for definition in feature.definitions:
            if self.halted:
                break

            if not self.run_definition(definition, feature.background):
                passed = False

                if self.quit_on_error:
                    logger.info(f'"{definition.name}" failed, quitting on error')
                    self.halted = True

        return passed

    def run_source(self, text: str, name: Optional[str] = None) -> bool:
        try:
            feature = parse_feature_text(text, filename=name)
        except FeatureParseError as e:
            logger.error(f'unable to parse {name or "feature"}: {e}')
            return False

        return self.run_feature(feature)

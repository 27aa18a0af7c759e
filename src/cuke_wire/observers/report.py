from __future__ import annotations

from typing import List, Optional, Tuple
from dataclasses import dataclass, field
from time import perf_counter

from cuke_wire.model import Feature, ScenarioDefinition, Step, TableRow


@dataclass
class ReportCase:
    name: str
    classname: str = field(default='')
    time: float = field(default=0.0)
    failure: Optional[str] = field(default=None)
    skipped: bool = field(default=False)

    @property
    def failed(self) -> bool:
        return self.failure is not None


@dataclass
class ReportSuite:
    name: str
    properties: List[Tuple[str, str]] = field(default_factory=list)
    cases: List[ReportCase] = field(default_factory=list)
    tests: int = field(default=0)
    failures: int = field(default=0)
    errors: int = field(default=0)
    skipped: int = field(default=0)
    time: float = field(default=0.0)

    def update_stats(self) -> None:
        self.tests = len(self.cases)
        self.skipped = len([case for case in self.cases if case.skipped])
        self.failures = len([case for case in self.cases if not case.skipped and case.failed])
        self.time = sum(case.time for case in self.cases)


@dataclass
class Report:
    name: str = field(default='')
    suites: List[ReportSuite] = field(default_factory=list)
    tests: int = field(default=0)
    failures: int = field(default=0)
    errors: int = field(default=0)
    skipped: int = field(default=0)
    time: float = field(default=0.0)

    def update_stats(self) -> None:
        self.tests = self.failures = self.errors = self.skipped = 0
        self.time = 0.0

        for suite in self.suites:
            suite.update_stats()
            self.tests += suite.tests
            self.failures += suite.failures
            self.errors += suite.errors
            self.skipped += suite.skipped
            self.time += suite.time


class SuiteRecorder:
    """Builds a `Report` with one suite per executed scenario (or outline row) and one case per step.

    Step time is measured from `before_step` to the matching `success`/`failure`. Counts are
    only calculated by `finish`.
    """

    report: Report
    numbered: bool

    _suite: Optional[ReportSuite]
    _started: Optional[float]
    _classname: str

    def __init__(self, *, numbered: bool = False) -> None:
        self.report = Report()
        self.numbered = numbered
        self._suite = None
        self._started = None
        self._classname = ''

    @property
    def current(self) -> Optional[ReportSuite]:
        return self._suite

    def begin_feature(self, feature: Feature) -> None:
        if not self.report.name:
            self.report.name = feature.name

        self._classname = feature.name

    def begin_scenario(self, definition: ScenarioDefinition) -> None:
        self._suite = ReportSuite(name=definition.name)
        self._started = None

    def example(self, header: TableRow, row: TableRow) -> None:
        if self._suite is None:
            return

        self._suite.properties.extend(zip(header, row))

    def before_step(self, step: Step) -> None:
        self._started = perf_counter()

    def _record(self, step: Step, failure: Optional[str]) -> None:
        if self._suite is None:
            return

        elapsed = perf_counter() - self._started if self._started is not None else 0.0
        self._started = None

        name = step.text
        if self.numbered:
            name = f'{len(self._suite.cases) + 1:04d}: {name}'

        self._suite.cases.append(ReportCase(name=name, classname=self._classname, time=elapsed, failure=failure))

    def success(self, step: Step) -> None:
        self._record(step, None)

    def failure(self, step: Step, error: Exception) -> None:
        self._record(step, str(error))

    def end_scenario(self, definition: ScenarioDefinition) -> None:
        if self._suite is None:
            return

        self.report.suites.append(self._suite)
        self._suite = None

    def finish(self) -> Report:
        self.report.update_stats()

        return self.report

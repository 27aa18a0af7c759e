from __future__ import annotations

import logging

from typing import BinaryIO, Optional
from pathlib import Path
from xml.etree import ElementTree as ET

from cuke_wire.constants import JUNIT_FILE
from cuke_wire.model import Feature, ScenarioDefinition, Step, TableRow
from cuke_wire.observers import ObserverError
from cuke_wire.observers.report import Report, ReportSuite, SuiteRecorder


logger = logging.getLogger(__name__)


def _format_time(value: float) -> str:
    return f'{value:.6f}'


def _suite_to_element(suite: ReportSuite) -> ET.Element:
    element = ET.Element(
        'testsuite',
        {
            'name': suite.name,
            'tests': str(suite.tests),
            'failures': str(suite.failures),
            'errors': str(suite.errors),
            'skipped': str(suite.skipped),
            'time': _format_time(suite.time),
        },
    )

    if len(suite.properties) > 0:
        properties = ET.SubElement(element, 'properties')
        for name, value in suite.properties:
            ET.SubElement(properties, 'property', {'name': name, 'value': value})

    for case in suite.cases:
        case_element = ET.SubElement(
            element,
            'testcase',
            {
                'name': case.name,
                'classname': case.classname,
                'time': _format_time(case.time),
            },
        )

        if case.skipped:
            ET.SubElement(case_element, 'skipped')
        elif case.failure is not None:
            message = case.failure.strip().splitlines()[0] if case.failure.strip() else case.failure
            failure = ET.SubElement(case_element, 'failure', {'message': message})
            failure.text = case.failure

    return element


def report_to_element(report: Report) -> ET.Element:
    root = ET.Element(
        'testsuites',
        {
            'name': report.name,
            'tests': str(report.tests),
            'failures': str(report.failures),
            'errors': str(report.errors),
            'skipped': str(report.skipped),
            'time': _format_time(report.time),
        },
    )

    for suite in report.suites:
        root.append(_suite_to_element(suite))

    return root


class JUnitObserver:
    path: Path
    recorder: SuiteRecorder

    _file: Optional[BinaryIO]

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path if path is not None else Path(JUNIT_FILE)
        self.recorder = SuiteRecorder()
        self._file = None

    def init(self) -> None:
        try:
            self._file = self.path.open('wb')
        except OSError as e:
            raise ObserverError(f'unable to create {self.path.as_posix()}: {e}') from e

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def shutdown(self) -> None:
        report = self.recorder.finish()

        if self._file is None:
            raise ObserverError(f'{self.__class__.__name__} was not initialized')

        tree = ET.ElementTree(report_to_element(report))
        ET.indent(tree, space='\t')

        try:
            tree.write(self._file, encoding='utf-8', xml_declaration=True)
        finally:
            self._file.close()
            self._file = None

        logger.info(f'wrote {report.tests} test cases in {len(report.suites)} suites to {self.path.as_posix()}')

    def begin_feature(self, feature: Feature) -> None:
        self.recorder.begin_feature(feature)

    def begin_scenario(self, definition: ScenarioDefinition) -> None:
        self.recorder.begin_scenario(definition)

    def example(self, header: TableRow, row: TableRow) -> None:
        self.recorder.example(header, row)

    def before_step(self, step: Step) -> None:
        self.recorder.before_step(step)

    def success(self, step: Step) -> None:
        self.recorder.success(step)

    def failure(self, step: Step, error: Exception) -> None:
        self.recorder.failure(step, error)

    def end_scenario(self, definition: ScenarioDefinition) -> None:
        self.recorder.end_scenario(definition)

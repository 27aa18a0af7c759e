from __future__ import annotations

import logging

from typing import Optional, TextIO
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, PackageLoader, Template, TemplateError, select_autoescape

from cuke_wire.constants import HTML_FILE, HTML_TEMPLATE
from cuke_wire.model import Feature, ScenarioDefinition, Step, TableRow
from cuke_wire.observers import ObserverError
from cuke_wire.observers.report import SuiteRecorder


logger = logging.getLogger(__name__)


def load_template(path: Optional[Path] = None) -> Template:
    """Load a report template from `path`, or the one bundled with the package."""
    if path is None:
        environment = Environment(
            loader=PackageLoader('cuke_wire', 'templates'),
            autoescape=select_autoescape(default=True),
        )
        name = HTML_TEMPLATE
    else:
        environment = Environment(
            loader=FileSystemLoader(path.parent.as_posix()),
            autoescape=select_autoescape(default=True),
        )
        name = path.name

    return environment.get_template(name)


class TemplateObserver:
    path: Path
    template_path: Optional[Path]
    recorder: SuiteRecorder

    _template: Optional[Template]
    _file: Optional[TextIO]

    def __init__(self, path: Optional[Path] = None, template_path: Optional[Path] = None) -> None:
        self.path = path if path is not None else Path(HTML_FILE)
        self.template_path = template_path
        self.recorder = SuiteRecorder(numbered=True)
        self._template = None
        self._file = None

    def init(self) -> None:
        try:
            self._template = load_template(self.template_path)
        except TemplateError as e:
            source = self.template_path.as_posix() if self.template_path is not None else HTML_TEMPLATE
            raise ObserverError(f'unable to load template {source}: {e}') from e

        try:
            self._file = self.path.open('w', encoding='utf-8')
        except OSError as e:
            raise ObserverError(f'unable to create {self.path.as_posix()}: {e}') from e

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def shutdown(self) -> None:
        report = self.recorder.finish()

        if self._template is None or self._file is None:
            raise ObserverError(f'{self.__class__.__name__} was not initialized')

        try:
            self._file.write(self._template.render(report=report))
        finally:
            self._file.close()
            self._file = None

        logger.info(f'wrote report with {len(report.suites)} suites to {self.path.as_posix()}')

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

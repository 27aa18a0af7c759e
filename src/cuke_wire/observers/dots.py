from __future__ import annotations

import sys

from typing import Optional, TextIO

from colorama import Fore

from cuke_wire.model import Feature, ScenarioDefinition, Step, TableRow
from cuke_wire.text import format_example


class DotsObserver:
    stream: Optional[TextIO]
    scenarios: int
    failed_scenarios: int

    _failed: bool
    _message: Optional[str]

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream
        self.scenarios = 0
        self.failed_scenarios = 0
        self._failed = False
        self._message = None

    def _write(self, text: str) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(text)
        stream.flush()

    def init(self) -> None:
        return

    def close(self) -> None:
        return

    def shutdown(self) -> None:
        passed = self.scenarios - self.failed_scenarios
        color = Fore.RED if self.failed_scenarios > 0 else Fore.GREEN
        self._write(f'{color}{self.scenarios} scenarios ({passed} passed, {self.failed_scenarios} failed){Fore.RESET}\n')

    def begin_feature(self, feature: Feature) -> None:
        self._write(f'Feature: {feature.name}\n')

    def begin_scenario(self, definition: ScenarioDefinition) -> None:
        self._failed = False
        self._message = None
        self._write(f'Scenario: {definition.name}\n')

    def example(self, header: TableRow, row: TableRow) -> None:
        self._write(f'Example: {format_example(header, row)}\n')

    def before_step(self, step: Step) -> None:
        return

    def success(self, step: Step) -> None:
        self._write(f'{Fore.GREEN}.{Fore.RESET}')

    def failure(self, step: Step, error: Exception) -> None:
        self._failed = True
        self._message = str(error)
        self._write(f'{Fore.RED}F{Fore.RESET}')

    def end_scenario(self, definition: ScenarioDefinition) -> None:
        self.scenarios += 1
        self._write('\n')

        if self._failed:
            self.failed_scenarios += 1
            self._write(f'{Fore.RED}Scenario failed: {self._message}{Fore.RESET}\n')

"""Result observers.

An observer is any object implementing the `Observer` protocol. The runner never talks to
observers directly, it talks to an `ObserverFanout` which forwards each event to every
registered observer in registration order.

Per scenario the events arrive as:

    begin_scenario -> example? -> (before_step -> success | failure)* -> end_scenario

`init` is called once before the first feature and `shutdown` once after the last one. If
any observer fails to initialize, `close` is called on the ones already initialized (and the
failing one) instead of `shutdown`, releasing whatever they hold without writing anything.
"""
from __future__ import annotations

import logging

from typing import Iterable, Iterator, List, Optional, Protocol

from cuke_wire.descriptor import ConfigurationError
from cuke_wire.model import Feature, ScenarioDefinition, Step, TableRow


logger = logging.getLogger(__name__)


class ObserverError(ConfigurationError):
    pass


class Observer(Protocol):
    def init(self) -> None:
        ...

    def shutdown(self) -> None:
        ...

    def close(self) -> None:
        ...

    def begin_feature(self, feature: Feature) -> None:
        ...

    def begin_scenario(self, definition: ScenarioDefinition) -> None:
        ...

    def example(self, header: TableRow, row: TableRow) -> None:
        ...

    def before_step(self, step: Step) -> None:
        ...

    def success(self, step: Step) -> None:
        ...

    def failure(self, step: Step, error: Exception) -> None:
        ...

    def end_scenario(self, definition: ScenarioDefinition) -> None:
        ...


class ObserverFanout:
    observers: List[Observer]

    def __init__(self, observers: Optional[Iterable[Observer]] = None) -> None:
        self.observers = list(observers) if observers is not None else []

    def __iter__(self) -> Iterator[Observer]:
        return iter(self.observers)

    def __len__(self) -> int:
        return len(self.observers)

    def add(self, observer: Observer) -> None:
        self.observers.append(observer)

    def _close(self, observers: List[Observer]) -> None:
        for observer in observers:
            try:
                observer.close()
            except Exception:
                logger.exception(f'failed to close {observer.__class__.__name__}')

    def init(self) -> None:
        initialized: List[Observer] = []

        for observer in self.observers:
            try:
                observer.init()
            except Exception as e:
                self._close([*initialized, observer])

                if isinstance(e, ObserverError):
                    raise

                raise ObserverError(f'failed to initialize {observer.__class__.__name__}: {e}') from e

            initialized.append(observer)

    def shutdown(self) -> None:
        failed: List[str] = []

        for observer in self.observers:
            try:
                observer.shutdown()
            except Exception:
                logger.exception(f'failed to shutdown {observer.__class__.__name__}')
                failed.append(observer.__class__.__name__)

        if len(failed) > 0:
            raise ObserverError(f'failed to shutdown {", ".join(failed)}')

    def begin_feature(self, feature: Feature) -> None:
        for observer in self.observers:
            observer.begin_feature(feature)

    def begin_scenario(self, definition: ScenarioDefinition) -> None:
        for observer in self.observers:
            observer.begin_scenario(definition)

    def example(self, header: TableRow, row: TableRow) -> None:
        for observer in self.observers:
            observer.example(header, row)

    def before_step(self, step: Step) -> None:
        for observer in self.observers:
            observer.before_step(step)

    def success(self, step: Step) -> None:
        for observer in self.observers:
            observer.success(step)

    def failure(self, step: Step, error: Exception) -> None:
        for observer in self.observers:
            observer.failure(step, error)

    def end_scenario(self, definition: ScenarioDefinition) -> None:
        for observer in self.observers:
            observer.end_scenario(definition)

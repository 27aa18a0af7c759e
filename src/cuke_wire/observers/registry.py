from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, TextIO
from pathlib import Path
from dataclasses import dataclass, field

from cuke_wire.constants import HTML_FILE, JUNIT_FILE
from cuke_wire.observers import Observer, ObserverError, ObserverFanout
from cuke_wire.observers.dots import DotsObserver
from cuke_wire.observers.junit import JUnitObserver
from cuke_wire.observers.template import TemplateObserver


@dataclass(frozen=True)
class ObserverOptions:
    junit_file: Path = field(default=Path(JUNIT_FILE))
    html_file: Path = field(default=Path(HTML_FILE))
    html_template: Optional[Path] = field(default=None)
    stream: Optional[TextIO] = field(default=None)


ObserverFactory = Callable[[ObserverOptions], Observer]


OBSERVERS: Dict[str, ObserverFactory] = {
    'dots': lambda options: DotsObserver(stream=options.stream),
    'junit': lambda options: JUnitObserver(options.junit_file),
    'template': lambda options: TemplateObserver(options.html_file, options.html_template),
}


def parse_observer_names(value: str) -> List[str]:
    return [name.strip() for name in value.split(',') if name.strip()]


def create_observer(name: str, options: ObserverOptions) -> Observer:
    factory = OBSERVERS.get(name)

    if factory is None:
        raise ObserverError(f'unknown output "{name}", valid outputs are: {", ".join(OBSERVERS.keys())}')

    return factory(options)


def create_observers(names: Iterable[str], options: Optional[ObserverOptions] = None) -> ObserverFanout:
    if options is None:
        options = ObserverOptions()

    return ObserverFanout(create_observer(name, options) for name in names)

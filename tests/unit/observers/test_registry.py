from pathlib import Path

import pytest

from cuke_wire.observers import ObserverError
from cuke_wire.observers.dots import DotsObserver
from cuke_wire.observers.junit import JUnitObserver
from cuke_wire.observers.template import TemplateObserver
from cuke_wire.observers.registry import (
    OBSERVERS,
    ObserverOptions,
    create_observer,
    create_observers,
    parse_observer_names,
)


def test_parse_observer_names() -> None:
    assert parse_observer_names('dots,junit,template') == ['dots', 'junit', 'template']
    assert parse_observer_names(' dots , junit,,') == ['dots', 'junit']
    assert parse_observer_names('') == []


def test_create_observer(tmp_path: Path) -> None:
    options = ObserverOptions(
        junit_file=tmp_path / 'junit.xml',
        html_file=tmp_path / 'report.html',
        html_template=tmp_path / 'report.j2',
    )

    dots = create_observer('dots', options)
    assert isinstance(dots, DotsObserver)

    junit = create_observer('junit', options)
    assert isinstance(junit, JUnitObserver)
    assert junit.path == tmp_path / 'junit.xml'

    template = create_observer('template', options)
    assert isinstance(template, TemplateObserver)
    assert template.path == tmp_path / 'report.html'
    assert template.template_path == tmp_path / 'report.j2'

    with pytest.raises(ObserverError) as oe:
        create_observer('xml', options)

    assert str(oe.value) == f'unknown output "xml", valid outputs are: {", ".join(OBSERVERS.keys())}'


def test_create_observers() -> None:
    fanout = create_observers(['template', 'dots', 'junit'])

    assert [observer.__class__ for observer in fanout] == [TemplateObserver, DotsObserver, JUnitObserver]

    with pytest.raises(ObserverError):
        create_observers(['dots', 'unknown'])

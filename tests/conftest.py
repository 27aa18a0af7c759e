from typing import Generator

import pytest

from .fixtures import WireServerFixture


def _wire_server() -> Generator[WireServerFixture, None, None]:
    with WireServerFixture() as fixture:
        yield fixture


wire_server = pytest.fixture(scope='function')(_wire_server)

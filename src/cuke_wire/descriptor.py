from __future__ import annotations

import logging

from typing import Optional
from pathlib import Path
from dataclasses import dataclass, field

from cuke_wire.constants import DEFAULT_HOST, DEFAULT_PORT, WIRE_GLOB


logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    pass


@dataclass(frozen=True)
class WireDescriptor:
    host: str = field(default=DEFAULT_HOST)
    port: int = field(default=DEFAULT_PORT)
    path: Optional[Path] = field(default=None)

    def __str__(self) -> str:
        return f'{self.host}:{self.port}'


def parse_wire_descriptor(content: str, *, default_host: str = DEFAULT_HOST, default_port: int = DEFAULT_PORT, path: Optional[Path] = None) -> WireDescriptor:
    """Read `host:` and `port:` tokens, each followed by its value, from whitespace separated text.

    Any other token is ignored, and a key without a value keeps its default.
    """
    host = default_host
    port = default_port

    tokens = iter(content.split())
    for token in tokens:
        if token not in ('host:', 'port:'):
            continue

        value = next(tokens, None)
        if value is None:
            break

        if token == 'host:':
            host = value
        else:
            try:
                port = int(value)
            except ValueError as e:
                source = path.as_posix() if path is not None else '<string>'
                raise ConfigurationError(f'invalid port "{value}" in {source}') from e

    return WireDescriptor(host=host, port=port, path=path)


def load_wire_file(path: Path, *, default_host: str = DEFAULT_HOST, default_port: int = DEFAULT_PORT) -> WireDescriptor:
    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigurationError(f'unable to read wire file {path.as_posix()}: {e}') from e

    return parse_wire_descriptor(content, default_host=default_host, default_port=default_port, path=path)


def find_wire_file(root: Path) -> Optional[Path]:
    if not root.is_dir():
        return None

    for path in sorted(root.glob(WIRE_GLOB)):
        if path.is_file():
            return path

    return None


def resolve_descriptor(root: Path, *, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> WireDescriptor:
    path = find_wire_file(root)

    if path is None:
        logger.debug(f'no wire file found in {root.as_posix()}, using {host}:{port}')
        return WireDescriptor(host=host, port=port)

    descriptor = load_wire_file(path, default_host=host, default_port=port)
    logger.info(f'using wire file {path.as_posix()} ({descriptor})')

    return descriptor

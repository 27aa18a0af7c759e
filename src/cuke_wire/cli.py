from __future__ import annotations

import logging
import sys

from typing import Iterator, List, Optional, Tuple
from argparse import Namespace as Arguments
from glob import glob
from os import environ
from pathlib import Path
from time import perf_counter

from colorama import init

from cuke_wire.constants import ENV_PERF, STDIN_NAME
from cuke_wire.descriptor import ConfigurationError, WireDescriptor, resolve_descriptor
from cuke_wire.observers import ObserverFanout
from cuke_wire.observers.registry import ObserverOptions, create_observers, parse_observer_names
from cuke_wire.process import StepServerProcess, build_command
from cuke_wire.runner import Runner
from cuke_wire.wire import Endpoint


logger = logging.getLogger(__name__)


def discover_features(patterns: List[str]) -> List[Path]:
    files: List[Path] = []

    for pattern in patterns:
        matches = sorted(glob(pattern, recursive=True))

        if len(matches) < 1:
            logger.warning(f'no feature files matched "{pattern}"')
            continue

        for match in matches:
            path = Path(match)

            if path.is_dir():
                files.extend(sorted(path.rglob('*.feature')))
            else:
                files.append(path)

    return files


def read_features(patterns: List[str]) -> Iterator[Tuple[str, Optional[str]]]:
    """Yield `(name, text)` for every feature to run, `text` is `None` if the file could not be read."""
    if len(patterns) < 1:
        yield STDIN_NAME, sys.stdin.read()
        return

    for path in discover_features(patterns):
        try:
            yield path.as_posix(), path.read_text(encoding='utf-8')
        except OSError as e:
            logger.error(f'unable to read {path.as_posix()}: {e}')
            yield path.as_posix(), None


def create_observer_options(args: Arguments) -> ObserverOptions:
    return ObserverOptions(
        junit_file=Path(args.junit_file),
        html_file=Path(args.html_file),
        html_template=Path(args.html_template) if args.html_template else None,
    )


def execute(args: Arguments, descriptor: WireDescriptor, observers: ObserverFanout) -> int:
    with Endpoint(descriptor.host, descriptor.port) as endpoint:
        connected = endpoint.connect()
        if not connected.ok:
            logger.error(str(connected.error))
            return 1

        observers.init()

        runner = Runner(endpoint, observers, quit_on_error=args.quit_on_error)
        passed = True
        started = perf_counter()

        for name, text in read_features(args.files):
            if runner.halted:
                break

            if text is None:
                passed = False
                continue

            logger.info(f'running test: {name}')
            if not runner.run_source(text, name):
                passed = False

        elapsed = perf_counter() - started

        if environ.get(ENV_PERF, ''):
            print(int(elapsed * 1000), file=sys.stderr)

        observers.shutdown()

    logger.debug(f'{runner.scenarios} scenarios executed, {runner.failed_scenarios} failed')

    return 0 if passed else 1


def run(args: Arguments) -> int:
    # init colorama for ansi colors
    init()

    try:
        observers = create_observers(parse_observer_names(args.output), create_observer_options(args))
        descriptor = resolve_descriptor(Path(args.wire_root), host=args.host, port=args.port)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    server: Optional[StepServerProcess] = None
    if args.path:
        server = StepServerProcess(build_command(args.path, args.args), cwd=args.dir)

    try:
        if server is not None:
            server.start()

        return execute(args, descriptor, observers)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    finally:
        if server is not None:
            server.stop()

import sys
import argparse
import logging

from typing import List, Optional

from cuke_wire.constants import (
    DEFAULT_HOST,
    DEFAULT_OUTPUT,
    DEFAULT_PORT,
    HTML_FILE,
    JUNIT_FILE,
    WIRE_ROOT,
)
from cuke_wire.cli import run


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='cuke-wire', description='run gherkin features against a wire protocol step definition server')

    parser.add_argument(
        '--host',
        type=str,
        default=DEFAULT_HOST,
        required=False,
        help='host running the step definition server, if no wire file is found',
    )

    parser.add_argument(
        '--port',
        type=int,
        default=DEFAULT_PORT,
        required=False,
        help='port the step definition server is listening on, if no wire file is found',
    )

    parser.add_argument(
        '--wire-root',
        type=str,
        default=WIRE_ROOT,
        required=False,
        help='directory to look for a *.wire file in',
    )

    parser.add_argument(
        '--output',
        type=str,
        default=DEFAULT_OUTPUT,
        required=False,
        help='comma separated list of outputs (dots, junit, template)',
    )

    parser.add_argument(
        '--junit-file',
        type=str,
        default=JUNIT_FILE,
        required=False,
        help='file the junit output writes to',
    )

    parser.add_argument(
        '--html-file',
        type=str,
        default=HTML_FILE,
        required=False,
        help='file the template output writes to',
    )

    parser.add_argument(
        '--html-template',
        type=str,
        default=None,
        required=False,
        help='jinja2 template used by the template output, instead of the bundled one',
    )

    parser.add_argument(
        '--quit-on-error',
        action='store_true',
        required=False,
        default=False,
        help='stop after the first failing scenario',
    )

    parser.add_argument(
        '--path',
        type=str,
        default=None,
        required=False,
        help='step definition server to launch before running',
    )

    parser.add_argument(
        '--args',
        type=str,
        default=None,
        required=False,
        help='comma separated arguments to the launched process',
    )

    parser.add_argument(
        '--dir',
        type=str,
        default=None,
        required=False,
        help='working directory of the launched process',
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        required=False,
        default=False,
        help='verbose output',
    )

    parser.add_argument(
        '--no-verbose',
        nargs='+',
        type=str,
        default=None,
        help='name of loggers to disable',
    )

    parser.add_argument(
        '--version',
        action='store_true',
        required=False,
        default=False,
        help='print version and exit',
    )

    parser.add_argument(
        'files',
        nargs='*',
        type=str,
        help='feature files or glob patterns, reads one feature from stdin if none are given',
    )

    args = parser.parse_args()

    if args.version:
        from cuke_wire import __version__

        print(__version__, file=sys.stderr)

        raise SystemExit(0)

    return args


def setup_logging(args: argparse.Namespace) -> None:
    level = logging.INFO if not args.verbose else logging.DEBUG
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    logging.basicConfig(
        level=level,
        format='[%(asctime)s] %(levelname)s: %(message)s',
        handlers=handlers,
    )

    no_verbose: Optional[List[str]] = args.no_verbose

    if no_verbose is None:
        no_verbose = []

    # always supress these loggers
    no_verbose.append('parse')

    for logger_name in no_verbose:
        if logger_name in logging.Logger.manager.loggerDict:
            logger = logging.getLogger(logger_name)
            logger.setLevel(logging.ERROR)
        else:
            print(f'!! logger "{logger_name}" does not exist', file=sys.stderr)


def main() -> int:
    args = parse_arguments()

    setup_logging(args)

    return run(args)


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())

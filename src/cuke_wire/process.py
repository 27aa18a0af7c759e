from __future__ import annotations

import logging
import subprocess

from typing import List, Literal, Optional, Type
from types import TracebackType
from threading import Timer
from time import sleep

from cuke_wire.constants import LAUNCH_GRACE_PERIOD, LAUNCH_TIMEOUT
from cuke_wire.descriptor import ConfigurationError


logger = logging.getLogger(__name__)


class LaunchError(ConfigurationError):
    pass


def build_command(path: str, args: Optional[str] = None) -> List[str]:
    command = [path]

    if args:
        command.extend(arg for arg in args.split(',') if arg)

    return command


class StepServerProcess:
    """A step definition server started for the duration of a run.

    The process gets `grace_period` seconds to start listening. If it is still running after
    `timeout` seconds it is killed, which closes the wire connection and fails whatever step is
    currently waiting on it.
    """

    command: List[str]
    cwd: Optional[str]
    timeout: float
    grace_period: float
    timed_out: bool

    process: Optional[subprocess.Popen[bytes]]
    _timer: Optional[Timer]

    def __init__(
        self,
        command: List[str],
        *,
        cwd: Optional[str] = None,
        timeout: float = LAUNCH_TIMEOUT,
        grace_period: float = LAUNCH_GRACE_PERIOD,
    ) -> None:
        self.command = command
        self.cwd = cwd or None
        self.timeout = timeout
        self.grace_period = grace_period
        self.timed_out = False
        self.process = None
        self._timer = None

    def __enter__(self) -> StepServerProcess:
        self.start()

        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> Literal[False]:
        self.stop()

        return False

    @property
    def running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def start(self) -> None:
        logger.info(f'launching: {" ".join(self.command)}')

        try:
            self.process = subprocess.Popen(self.command, cwd=self.cwd)
        except OSError as e:
            raise LaunchError(f'unable to launch {" ".join(self.command)}: {e}') from e

        if self.grace_period > 0:
            sleep(self.grace_period)

        self._timer = Timer(self.timeout, self._expired)
        self._timer.daemon = True
        self._timer.start()

    def _expired(self) -> None:
        self.timed_out = True
        logger.error(f'step definition server has been running for {self.timeout:.0f} seconds, killing it')
        self._kill()

    def _kill(self) -> None:
        if self.process is None:
            return

        if self.process.poll() is None:
            logger.info('killing launched process')
            self.process.kill()

        returncode = self.process.wait()
        logger.debug(f'launched process exited with {returncode}')

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        self._kill()
        self.process = None

"""Client side of the cucumber wire protocol.

Every request is a single line JSON array, `[command]` or `[command, params]`, terminated
by CRLF. Every response is a single line `[status, payload]`. One request is outstanding at
a time.

The first failure poisons the endpoint: it is kept in `Endpoint.error` and every later call
returns it again without writing anything to the connection.
"""
from __future__ import annotations

import json
import logging
import socket

from typing import Any, BinaryIO, Dict, Generic, List, Literal, Optional, Tuple, Type, TypeVar
from types import TracebackType
from dataclasses import dataclass, field

from cuke_wire.constants import (
    COMMAND_BEGIN_SCENARIO,
    COMMAND_END_SCENARIO,
    COMMAND_INVOKE,
    COMMAND_STEP_MATCHES,
    STATUS_SUCCESS,
)
from cuke_wire.model import StepArgument
from cuke_wire.text import argument_to_wire


logger = logging.getLogger(__name__)

T = TypeVar('T')


class WireError(Exception):
    pass


class EndpointConnectionError(WireError):
    pass


class ProtocolError(WireError):
    pass


class NoMatchError(WireError):
    text: str

    def __init__(self, text: str) -> None:
        super().__init__(f'no steps matched: {text}')
        self.text = text


class RemoteError(WireError):
    message: str
    exception: Optional[str]

    def __init__(self, message: str, exception: Optional[str] = None) -> None:
        if exception:
            description = f'Message: {message}\nException: {exception}'
        else:
            description = message

        super().__init__(description)
        self.message = message
        self.exception = exception


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = field(default=None)
    error: Optional[WireError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class MatchArgument:
    val: Optional[str]
    pos: Optional[int] = field(default=None)


@dataclass(frozen=True)
class StepMatch:
    id: str
    args: Tuple[MatchArgument, ...] = field(default_factory=tuple)
    source: Optional[str] = field(default=None)
    regexp: Optional[str] = field(default=None)

    @classmethod
    def from_payload(cls, payload: Any) -> StepMatch:
        if not isinstance(payload, dict) or 'id' not in payload:
            raise ProtocolError(f'invalid step match: {payload!r}')

        args: List[MatchArgument] = []
        for arg in payload.get('args') or []:
            if not isinstance(arg, dict):
                raise ProtocolError(f'invalid step match argument: {arg!r}')

            val = arg.get('val')
            args.append(MatchArgument(val=None if val is None else str(val), pos=arg.get('pos')))

        return cls(
            id=str(payload['id']),
            args=tuple(args),
            source=payload.get('source'),
            regexp=payload.get('regexp'),
        )


def encode_request(command: str, params: Optional[Any] = None) -> bytes:
    message: List[Any] = [command]
    if params is not None:
        message.append(params)

    return f'{json.dumps(message)}\r\n'.encode('utf-8')


def decode_response(line: bytes) -> Tuple[str, Any]:
    try:
        message = json.loads(line.decode('utf-8'))
    except ValueError as e:
        raise ProtocolError(f'malformed response {line!r}: {e}') from e

    if not isinstance(message, list) or len(message) < 1 or not isinstance(message[0], str):
        raise ProtocolError(f'malformed response {line!r}: expected [status, payload]')

    status = message[0]
    payload = message[1] if len(message) > 1 else None

    return status, payload


def get_failure_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict):
        message = payload.get('message')
        if message:
            return str(message)
    elif isinstance(payload, str) and payload:
        return payload

    return default


class Endpoint:
    host: str
    port: int
    timeout: Optional[float]
    error: Optional[WireError]

    _socket: Optional[socket.socket]
    _stream: Optional[BinaryIO]

    def __init__(self, host: str, port: int, *, timeout: Optional[float] = None) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.error = None
        self._socket = None
        self._stream = None

    def __enter__(self) -> Endpoint:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> Literal[False]:
        self.close()

        return False

    @property
    def poisoned(self) -> bool:
        return self.error is not None

    @property
    def connected(self) -> bool:
        return self._stream is not None

    def _fail(self, error: WireError) -> Result[Any]:
        if self.error is None:
            logger.debug(f'endpoint {self.host}:{self.port} poisoned: {error}')
            self.error = error

        return Result(error=self.error)

    def connect(self) -> Result[None]:
        if self.error is not None:
            return Result(error=self.error)

        try:
            self._socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError as e:
            return self._fail(EndpointConnectionError(f'unable to connect to {self.host}:{self.port}: {e}'))

        self._stream = self._socket.makefile('rwb')
        logger.info(f'connected to endpoint {self.host}:{self.port}')

        return Result()

    def close(self) -> None:
        if self._stream is not None:
            try:
                self._stream.close()
            except OSError:
                logger.debug('failed to close endpoint stream', exc_info=True)
            self._stream = None

        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def _request(self, command: str, params: Optional[Any] = None) -> Tuple[str, Any]:
        if self._stream is None:
            raise ProtocolError(f'not connected to {self.host}:{self.port}')

        request = encode_request(command, params)
        logger.debug(f'-> {request.decode("utf-8").rstrip()}')

        try:
            self._stream.write(request)
            self._stream.flush()
            line = self._stream.readline()
        except OSError as e:
            raise ProtocolError(f'{command} failed: {e}') from e

        if not line:
            raise ProtocolError(f'connection closed by {self.host}:{self.port} while waiting for {command}')

        line = line.rstrip(b'\r\n')
        logger.debug(f'<- {line.decode("utf-8", errors="replace")}')

        return decode_response(line)

    def step_matches(self, text: str) -> Result[List[StepMatch]]:
        if self.error is not None:
            return Result(error=self.error)

        try:
            status, payload = self._request(COMMAND_STEP_MATCHES, {'name_to_match': text})

            if status != STATUS_SUCCESS:
                return self._fail(RemoteError(get_failure_message(payload, f'step_matches failed for: {text}')))

            if not payload:
                return self._fail(NoMatchError(text))

            if not isinstance(payload, list):
                raise ProtocolError(f'step_matches returned {payload!r}, expected a list')

            matches = [StepMatch.from_payload(candidate) for candidate in payload]
        except ProtocolError as e:
            return self._fail(e)

        if len(matches) > 1:
            logger.debug(f'{len(matches)} step definitions matched "{text}", using {matches[0].id}')

        return Result(value=matches)

    def invoke(self, match: StepMatch, argument: Optional[StepArgument] = None) -> Result[None]:
        if self.error is not None:
            return Result(error=self.error)

        args: List[Any] = [arg.val for arg in match.args]

        trailing = argument_to_wire(argument)
        if trailing is not None:
            args.append(trailing)

        params: Dict[str, Any] = {'id': match.id, 'args': args}

        try:
            status, payload = self._request(COMMAND_INVOKE, params)
        except ProtocolError as e:
            return self._fail(e)

        if status != STATUS_SUCCESS:
            exception: Optional[str] = None
            if isinstance(payload, dict) and payload.get('exception') is not None:
                exception = str(payload['exception'])

            return self._fail(RemoteError(get_failure_message(payload, f'invoke of step definition {match.id} failed'), exception))

        return Result()

    def _lifecycle(self, command: str, description: str) -> Result[None]:
        if self.error is not None:
            return Result(error=self.error)

        try:
            status, payload = self._request(command)
        except ProtocolError as e:
            return self._fail(e)

        if status != STATUS_SUCCESS:
            return self._fail(RemoteError(f'error {description}: {get_failure_message(payload, status)}'))

        return Result()

    def begin_scenario(self) -> Result[None]:
        return self._lifecycle(COMMAND_BEGIN_SCENARIO, 'beginning scenario')

    def end_scenario(self) -> Result[None]:
        return self._lifecycle(COMMAND_END_SCENARIO, 'ending scenario')

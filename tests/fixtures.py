import json
import re
import socket

from types import TracebackType
from typing import Any, Dict, List, Literal, Optional, Pattern, Type
from threading import Thread, Event
from dataclasses import dataclass, field


@dataclass
class StepDefinition:
    id: str
    pattern: Pattern[str]
    message: Optional[str] = field(default=None)
    exception: Optional[str] = field(default=None)


class WireServerFixture:
    """In-process step definition server speaking the wire protocol on a random local port.

    Register step definitions with `step()`, or force the raw response line of a command with
    `responses`. Every request line received is kept in `lines`, decoded in `requests`.
    """

    host: str
    port: int
    definitions: List[StepDefinition]
    responses: Dict[str, str]
    lines: List[bytes]
    requests: List[List[Any]]
    close_on: Optional[str]

    _socket: socket.socket
    _thread: Thread
    _stopped: Event

    def __init__(self) -> None:
        self.host = '127.0.0.1'
        self.port = 0
        self.definitions = []
        self.responses = {}
        self.lines = []
        self.requests = []
        self.close_on = None
        self._stopped = Event()

    def step(self, pattern: str, *, message: Optional[str] = None, exception: Optional[str] = None) -> StepDefinition:
        definition = StepDefinition(id=str(len(self.definitions) + 1), pattern=re.compile(pattern), message=message, exception=exception)
        self.definitions.append(definition)

        return definition

    def commands(self) -> List[str]:
        return [request[0] for request in self.requests]

    def respond(self, request: List[Any]) -> Any:
        command = request[0]

        if command == 'step_matches':
            text = request[1]['name_to_match']
            matches: List[Dict[str, Any]] = []
            for definition in self.definitions:
                match = definition.pattern.fullmatch(text)
                if match is None:
                    continue

                args = [{'val': value, 'pos': match.start(index + 1)} for index, value in enumerate(match.groups())]
                matches.append({'id': definition.id, 'args': args, 'source': f'steps.py:{definition.id}', 'regexp': definition.pattern.pattern})

            return ['success', matches]
        elif command == 'invoke':
            step_id = request[1]['id']
            for definition in self.definitions:
                if definition.id != step_id:
                    continue

                if definition.message is not None:
                    payload: Dict[str, Any] = {'message': definition.message}
                    if definition.exception is not None:
                        payload['exception'] = definition.exception

                    return ['fail', payload]

                return ['success', []]

            return ['fail', {'message': f'unknown step definition {step_id}'}]

        return ['success']

    def _serve(self, connection: socket.socket) -> None:
        with connection, connection.makefile('rwb') as stream:
            for line in stream:
                self.lines.append(line)
                request = json.loads(line.decode('utf-8'))
                self.requests.append(request)
                command = request[0]

                if self.close_on == command:
                    return

                if command in self.responses:
                    response = self.responses[command]
                else:
                    response = json.dumps(self.respond(request))

                stream.write(f'{response}\r\n'.encode('utf-8'))
                stream.flush()

    def _accept(self) -> None:
        while not self._stopped.is_set():
            try:
                connection, _ = self._socket.accept()
            except socket.timeout:
                continue
            except OSError:
                return

            self._serve(connection)

    def __enter__(self) -> 'WireServerFixture':
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind((self.host, 0))
        self._socket.listen(1)
        self._socket.settimeout(0.1)
        self.port = self._socket.getsockname()[1]

        self._thread = Thread(target=self._accept, daemon=True)
        self._thread.start()

        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> Literal[False]:
        self._stopped.set()
        self._socket.close()
        self._thread.join(timeout=2.0)

        return False

"""Wire codec - monkey command lines and OK/ERROR replies."""

from __future__ import annotations

from dataclasses import dataclass

from monkey_link.errors import invalid_argument_error

OK_MARKER = "OK"
ERROR_MARKER = "ERROR"
PAYLOAD_SEPARATOR = ":"
LINE_BREAKS = frozenset("\r\n")


@dataclass(frozen=True)
class Command:
    """A verb plus ordered arguments, rendered as one line."""

    verb: str
    args: tuple[str, ...] = ()

    @classmethod
    def of(cls, verb: str, *args: object) -> Command:
        """Build a command, converting each argument with str()."""
        return cls(verb=verb, args=tuple(str(arg) for arg in args))

    def __str__(self) -> str:
        return " ".join((self.verb, *self.args))


@dataclass(frozen=True)
class Success:
    """Reply that began with OK."""

    payload: str = ""

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Any other reply; message is the reply text as received."""

    message: str

    @property
    def ok(self) -> bool:
        return False


Response = Success | Failure


def encode_command(command: Command) -> bytes:
    """Render a command as a newline-terminated line.

    Arguments are written as-is; the protocol has no quoting, so callers
    pass tokens that are already safe. A line terminator inside any token
    would split the command into two requests and is rejected.

    Raises:
        MonkeyError: ERR_INVALID_ARGUMENT if a token contains CR or LF.
    """
    for token in (command.verb, *command.args):
        if LINE_BREAKS.intersection(token):
            raise invalid_argument_error(
                command.verb, token, "line breaks cannot be sent to the monkey service"
            )
    return (str(command) + "\n").encode("utf-8")


def decode_response(raw: bytes) -> Response:
    """Decode one reply line.

    ``OK`` and ``OK:<payload>`` decode to Success; everything else, including
    ``ERROR:<message>``, decodes to Failure carrying the full line.
    """
    line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
    if line == OK_MARKER:
        return Success()
    if line.startswith(OK_MARKER + PAYLOAD_SEPARATOR):
        return Success(payload=line[len(OK_MARKER) + 1 :])
    return Failure(message=line)


def split_payload(payload: str) -> list[str]:
    """Split a list payload (listvar, listviews, id lists) into its items."""
    return payload.split()

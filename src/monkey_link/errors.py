"""Error model - Actionable errors with remediation hints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class MonkeyError(Exception):
    """
    Base error with context and remediation guidance.

    Errors raised for a command carry the attempted verb in ``context`` and,
    when the monkey service answered, its literal reply text.
    """

    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    remediation: str = ""

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "remediation": self.remediation,
        }


# Specific error constructors for common cases


def connection_timeout_error(host: str, port: int, timeout_ms: float) -> MonkeyError:
    """Create error for a monkey service that never answered the probe."""
    return MonkeyError(
        code="ERR_CONNECTION_TIMEOUT",
        message=f"Monkey service on {host}:{port} not ready after {timeout_ms:.0f} ms",
        context={"host": host, "port": port, "timeout_ms": timeout_ms},
        remediation="Check the device is online and 'monkey --port' can run, then retry.",
    )


def command_timeout_error(command: str, timeout_ms: float) -> MonkeyError:
    """Create error for a shell command that produced no output in time."""
    return MonkeyError(
        code="ERR_COMMAND_TIMEOUT",
        message=f"Shell command timed out after {timeout_ms:.0f} ms: {command}",
        context={"command": command, "timeout_ms": timeout_ms},
        remediation="Increase the timeout or check the command terminates on the device.",
    )


def remote_rejected_error(command: str, reply: str) -> MonkeyError:
    """Create error for a command the device refused."""
    return MonkeyError(
        code="ERR_REMOTE_REJECTED",
        message=f"Command rejected: {command}: {reply}",
        context={"command": command, "reply": reply},
        remediation="Check the command arguments are valid for the current screen.",
    )


def transport_error(command: str, reason: str) -> MonkeyError:
    """Create error for I/O failure on the socket or shell channel."""
    return MonkeyError(
        code="ERR_TRANSPORT",
        message=f"Transport failure during {command}: {reason}",
        context={"command": command, "reason": reason},
        remediation="Reconnect to the device and start a new session.",
    )


def session_closed_error(command: str) -> MonkeyError:
    """Create error for use of a closed session."""
    return MonkeyError(
        code="ERR_SESSION_CLOSED",
        message=f"Session is closed, cannot send: {command}",
        context={"command": command},
        remediation="Establish a new session with MonkeyConnector.connect().",
    )


def invalid_argument_error(name: str, value: Any, reason: str) -> MonkeyError:
    """Create error for a caller-supplied argument that cannot be used."""
    return MonkeyError(
        code="ERR_INVALID_ARGUMENT",
        message=f"Invalid {name}={value!r}: {reason}",
        context={"name": name, "value": value, "reason": reason},
        remediation="Fix the argument and retry.",
    )


def malformed_result_error(line: str) -> MonkeyError:
    """Create error for an instrumentation result line without '='."""
    return MonkeyError(
        code="ERR_MALFORMED_RESULT",
        message=f"Malformed instrumentation result: {line!r}",
        context={"line": line},
        remediation="Check the instrumentation runner emits key=value results.",
    )

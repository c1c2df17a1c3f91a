"""Tests for error model."""

from __future__ import annotations

from monkey_link.errors import (
    MonkeyError,
    command_timeout_error,
    connection_timeout_error,
    invalid_argument_error,
    malformed_result_error,
    remote_rejected_error,
    session_closed_error,
    transport_error,
)


class TestMonkeyError:
    """Tests for MonkeyError."""

    def test_error_str(self) -> None:
        """Should format error as string."""
        error = MonkeyError(code="ERR_TEST", message="Test error", remediation="Fix it")
        assert str(error) == "[ERR_TEST] Test error"

    def test_error_to_dict(self) -> None:
        """Should convert to dict."""
        error = MonkeyError(
            code="ERR_TEST",
            message="Test error",
            context={"key": "value"},
            remediation="Fix it",
        )
        assert error.to_dict() == {
            "code": "ERR_TEST",
            "message": "Test error",
            "context": {"key": "value"},
            "remediation": "Fix it",
        }

    def test_is_exception(self) -> None:
        """Should be raisable."""
        assert isinstance(transport_error("tap", "reset"), Exception)


class TestErrorConstructors:
    """Tests for error constructor functions."""

    def test_connection_timeout_error(self) -> None:
        """Should name the host, port and ceiling."""
        error = connection_timeout_error("127.0.0.1", 12345, 30000)
        assert error.code == "ERR_CONNECTION_TIMEOUT"
        assert "12345" in error.message
        assert error.context["timeout_ms"] == 30000

    def test_command_timeout_error(self) -> None:
        """Should include the command."""
        error = command_timeout_error("am instrument -w pkg", 5000)
        assert error.code == "ERR_COMMAND_TIMEOUT"
        assert "am instrument" in error.message

    def test_remote_rejected_error(self) -> None:
        """Should include the command and the literal reply."""
        error = remote_rejected_error("getvar nope", "ERROR:unknown var")
        assert error.code == "ERR_REMOTE_REJECTED"
        assert "getvar nope" in error.message
        assert "ERROR:unknown var" in error.message
        assert error.context["reply"] == "ERROR:unknown var"

    def test_transport_error(self) -> None:
        """Should include the verb and reason."""
        error = transport_error("tap", "connection reset")
        assert error.code == "ERR_TRANSPORT"
        assert error.context == {"command": "tap", "reason": "connection reset"}

    def test_session_closed_error(self) -> None:
        """Should point at reconnecting."""
        error = session_closed_error("wake")
        assert error.code == "ERR_SESSION_CLOSED"
        assert "wake" in error.message
        assert "new session" in error.remediation.lower()

    def test_invalid_argument_error(self) -> None:
        """Should include the argument name and value."""
        error = invalid_argument_error("steps", 0, "must be positive")
        assert error.code == "ERR_INVALID_ARGUMENT"
        assert "steps=0" in error.message

    def test_malformed_result_error(self) -> None:
        """Should include the offending line."""
        error = malformed_result_error("no equals here")
        assert error.code == "ERR_MALFORMED_RESULT"
        assert error.context["line"] == "no equals here"

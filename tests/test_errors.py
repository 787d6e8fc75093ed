"""Tests for the error taxonomy."""

from pathlib import Path

from spurs.errors import (
    AlreadyJoinedError,
    AuthFailedError,
    CommandError,
    ConnectionError,
    InvalidCommandError,
    IoError,
    KeyNotFoundError,
    SpursError,
)


def test_command_error_keeps_evidence():
    """CommandError carries exit status and both streams."""
    error = CommandError("false", 2, b"out", b"err")
    assert error.exit_status == 2
    assert error.stdout == b"out"
    assert error.stderr == b"err"
    assert error.stdout_text == "out"
    assert error.stderr_text == "err"
    assert str(error) == "non-zero exit (2) for command: false"


def test_connection_error_attributes():
    """ConnectionError stores host name and original error."""
    original = OSError("refused")
    error = ConnectionError("myhost", original)
    assert error.host_name == "myhost"
    assert error.original_error is original
    assert "myhost" in str(error)
    assert "refused" in str(error)


def test_key_errors_are_connection_errors():
    """Key and auth failures are connection errors."""
    missing = KeyNotFoundError("myhost", "/nope/id_rsa")
    assert isinstance(missing, ConnectionError)
    assert missing.key == Path("/nope/id_rsa")
    assert "no such key" in str(missing)

    denied = AuthFailedError("myhost", None, RuntimeError("denied"))
    assert isinstance(denied, ConnectionError)
    assert denied.key is None


def test_hierarchy():
    """Every error is a SpursError; invalid commands are also ValueErrors."""
    for error in (
        IoError("ls", OSError("reset")),
        AlreadyJoinedError(),
        InvalidCommandError("empty"),
    ):
        assert isinstance(error, SpursError)
    assert isinstance(InvalidCommandError("empty"), ValueError)

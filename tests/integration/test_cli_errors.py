import geoip2.errors
import httpx
import maxminddb
import pytest
import yaml

from whereis.cli_errors import (
    CLIError,
    ConfigError,
    DataError,
    FileError,
    NetworkError,
    classify,
    format_error_message,
    handle_cli_errors,
)
from whereis.fastah import RemoteLookupError, ResponseFormatError
from whereis.local_db import LocalDatabaseError


def test_custom_exceptions():
    assert CLIError("test").exit_code == 1
    assert FileError("test").exit_code == 2
    assert ConfigError("test").exit_code == 3
    assert DataError("test").exit_code == 4
    assert NetworkError("test").exit_code == 5


def test_domain_errors_inherit_exit_codes():
    assert classify(RemoteLookupError("offline")) == ("Network error", 5)
    assert classify(ResponseFormatError("schema")) == ("Data error", 4)
    assert classify(LocalDatabaseError("missing")) == ("Configuration error", 3)


@pytest.mark.parametrize(
    "error, code",
    [
        (httpx.ConnectTimeout("handshake timed out"), 5),
        (httpx.ConnectError("refused"), 5),
        (httpx.DecodingError("bad gzip"), 4),
        (yaml.YAMLError("bad yaml"), 3),
        (maxminddb.InvalidDatabaseError("corrupt"), 3),
        (geoip2.errors.AddressNotFoundError("10.0.0.1 not found"), 4),
        (UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"), 4),
        (PermissionError("denied"), 2),
        (RuntimeError("boom"), 1),
    ],
)
def test_classify_library_errors(error, code):
    assert classify(error)[1] == code


def test_format_error_message():
    assert "Test message" in format_error_message(CLIError("Test message"))
    assert "Fastah API unreachable" in format_error_message(httpx.ConnectError("refused"))
    assert "Test context" in format_error_message(CLIError("Test message"), context="Test context")
    try:
        raise CLIError("Test message")
    except CLIError as e:
        assert "Traceback" in format_error_message(e, include_traceback=True)


@pytest.mark.parametrize(
    "error, code",
    [
        (CLIError("generic"), 1),
        (ConfigError("no key"), 3),
        (DataError("bad data"), 4),
        (NetworkError("offline"), 5),
        (FileError("cannot write"), 2),
        (httpx.ReadTimeout("slow"), 5),
        (yaml.YAMLError("bad yaml"), 3),
    ],
)
def test_handle_cli_errors_exit_codes(error, code, capsys):
    @handle_cli_errors(context="Test operation")
    def failing():
        raise error

    with pytest.raises(SystemExit) as excinfo:
        failing()

    assert excinfo.value.code == code
    err = capsys.readouterr().err
    assert "❌ Test operation" in err
    assert "Traceback" not in err


def test_handle_cli_errors_unexpected_error_shows_traceback(capsys):
    @handle_cli_errors(context="Lookup")
    def failing():
        raise RuntimeError("boom")

    with pytest.raises(SystemExit) as excinfo:
        failing()

    assert excinfo.value.code == 1
    assert "Traceback" in capsys.readouterr().err


def test_handle_cli_errors_prefers_error_context(capsys):
    @handle_cli_errors(context="Outer")
    def failing():
        raise DataError("bad row", context="Inner")

    with pytest.raises(SystemExit):
        failing()

    assert "Inner" in capsys.readouterr().err


def test_handle_cli_errors_keyboard_interrupt(capsys):
    @handle_cli_errors()
    def interrupted():
        raise KeyboardInterrupt

    with pytest.raises(SystemExit) as excinfo:
        interrupted()

    assert excinfo.value.code == 130
    assert "cancelled" in capsys.readouterr().err


def test_handle_cli_errors_reraises_keyboard_interrupt_when_asked():
    @handle_cli_errors(exit_on_keyboard_interrupt=False)
    def interrupted():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        interrupted()


def test_handle_cli_errors_passes_through_result():
    @handle_cli_errors()
    def ok():
        return "success"

    assert ok() == "success"

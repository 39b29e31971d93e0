"""Exception types, exit codes and the top-level error handler for the CLI."""

from typing import Optional, Callable, Any, Tuple, Type, TypeVar
from functools import wraps
import sys
import logging

import geoip2.errors
import httpx
import maxminddb
import yaml

logger = logging.getLogger(__name__)

# Type variable for decorator
F = TypeVar("F", bound=Callable[..., Any])

EXIT_GENERIC = 1
EXIT_FILE = 2
EXIT_CONFIG = 3
EXIT_DATA = 4
EXIT_NETWORK = 5
EXIT_INTERRUPTED = 130  # Standard SIGINT exit code


class CLIError(Exception):
    """Base exception for whereis failures that end the run."""

    exit_code = EXIT_GENERIC
    label = "Error"

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(message)


class FileError(CLIError):
    """The config file could not be read or written."""

    exit_code = EXIT_FILE
    label = "File error"


class ConfigError(CLIError):
    """Missing API key, malformed config file or unusable local database."""

    exit_code = EXIT_CONFIG
    label = "Configuration error"


class DataError(CLIError):
    """Unreadable input or an API response that does not match its schema."""

    exit_code = EXIT_DATA
    label = "Data error"


class NetworkError(CLIError):
    """The Fastah API could not be reached."""

    exit_code = EXIT_NETWORK
    label = "Network error"


# Library exceptions that can escape a command unwrapped, checked in order.
LIBRARY_ERRORS: Tuple[Tuple[Type[BaseException], str, int], ...] = (
    (httpx.TimeoutException, "Fastah API timed out", EXIT_NETWORK),
    (httpx.DecodingError, "Undecodable Fastah API response", EXIT_DATA),
    (httpx.RequestError, "Fastah API unreachable", EXIT_NETWORK),
    (yaml.YAMLError, "Invalid config file", EXIT_CONFIG),
    (maxminddb.InvalidDatabaseError, "Invalid local database", EXIT_CONFIG),
    (geoip2.errors.AddressNotFoundError, "Address not in local database", EXIT_DATA),
    (geoip2.errors.GeoIP2Error, "Local database lookup failed", EXIT_DATA),
    (UnicodeDecodeError, "Input is not valid text", EXIT_DATA),
    (OSError, "I/O error", EXIT_FILE),
)


def classify(error: BaseException) -> Tuple[str, int]:
    """Return the display label and exit code for ``error``."""
    if isinstance(error, CLIError):
        return error.label, error.exit_code
    for error_type, label, exit_code in LIBRARY_ERRORS:
        if isinstance(error, error_type):
            return label, exit_code
    return type(error).__name__, EXIT_GENERIC


def format_error_message(
    error: BaseException, context: Optional[str] = None, include_traceback: bool = False
) -> str:
    """
    Format error message for user display.

    Args:
        error: Exception that occurred
        context: Operation that was running (falls back to the error's own context)
        include_traceback: Whether to include full traceback

    Returns:
        Formatted error message string
    """
    label, _ = classify(error)
    if isinstance(error, CLIError) and error.context:
        context = error.context

    message = f"❌ {context}: {label}" if context else f"❌ {label}"
    if str(error):
        message += f" - {error}"

    if include_traceback:
        import traceback

        message += f"\n{traceback.format_exc()}"

    return message


def handle_cli_errors(
    context: str = "", exit_on_keyboard_interrupt: bool = True
) -> Callable[[F], F]:
    """
    Decorator to turn exceptions escaping a command into a diagnostic and exit code.

    Known failures print one line to stderr; anything unexpected also prints
    the traceback and exits with the generic code.

    Args:
        context: Context string for error messages
        exit_on_keyboard_interrupt: Exit on Ctrl+C (vs re-raise)

    Returns:
        Decorated function
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                if exit_on_keyboard_interrupt:
                    print("\n⚠️  Operation cancelled by user", file=sys.stderr)
                    sys.exit(EXIT_INTERRUPTED)
                else:
                    raise
            except Exception as e:
                _, exit_code = classify(e)
                unexpected = exit_code == EXIT_GENERIC and not isinstance(e, CLIError)
                print(
                    format_error_message(e, context, include_traceback=unexpected),
                    file=sys.stderr,
                )
                logger.debug("%s failed", context or "Command", exc_info=True)
                sys.exit(exit_code)

        return wrapper  # type: ignore

    return decorator

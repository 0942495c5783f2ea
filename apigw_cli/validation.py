"""Argument checks applied before any value is accepted into a route."""

from __future__ import annotations

from .exceptions import UsageError
from .logging_config import get_logger

logger = get_logger(__name__)

API_VERBS: tuple[str, ...] = ("GET", "PUT", "POST", "DELETE")


def has_leading_slash(path: str) -> bool:
    """Return True iff ``path`` is non-empty and begins with ``/``."""
    return bool(path) and path.startswith("/")


def is_valid_verb(verb: str) -> bool:
    """Return True iff ``verb`` is one of the accepted HTTP methods, in any case."""
    return verb.upper() in API_VERBS


def check_path(path: str) -> str:
    """Return ``path`` unchanged, or raise if it lacks a leading slash.

    Raises:
        UsageError: If ``path`` does not begin with ``/``.
    """
    if not has_leading_slash(path):
        logger.debug("Path does not begin with '/'", extra={"path": path})
        raise UsageError(f"'{path}' must begin with '/'.")
    return path


check_rel_path = check_path


def check_verb(verb: str) -> str:
    """Return the upper-cased verb, or raise if it is not accepted.

    Raises:
        UsageError: If ``verb`` is not GET, PUT, POST or DELETE.
    """
    if not is_valid_verb(verb):
        logger.debug("Invalid API verb", extra={"verb": verb})
        raise UsageError(
            f"'{verb}' is not a valid API verb.  Valid values are: {', '.join(API_VERBS)}"
        )
    return verb.upper()


def check_arg_count(
    args: list[str], minimum: int, maximum: int, command: str, hint: str
) -> None:
    """Raise a usage error when the positional argument count is out of range.

    Args:
        args: Positional arguments.
        minimum: Fewest arguments accepted.
        maximum: Most arguments accepted (negative for unbounded).
        command: Command label for logging.
        hint: Explanation appended to the error message.

    Raises:
        UsageError: If ``len(args)`` is outside ``[minimum, maximum]``.
    """
    if len(args) < minimum:
        logger.debug("%s: not enough arguments", command, extra={"arguments": args})
        raise UsageError(f"Invalid argument(s). {hint}")
    if 0 <= maximum < len(args):
        logger.debug("%s: too many arguments", command, extra={"arguments": args})
        raise UsageError(f"Invalid argument(s): {', '.join(args[maximum:])}. {hint}")

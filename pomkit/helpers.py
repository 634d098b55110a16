"""
Helper functions for test code.

This module provides random test values, date and file name formatting, and
retry/polling loops for flaky operations.
"""

import datetime
import random
import re
import string
import time
from collections.abc import Callable
from typing import TypeVar

from pomkit.log import get_logger

T = TypeVar("T")

_ALPHANUMERIC = string.ascii_letters + string.digits
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_UNSAFE_FILENAME_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def random_string(length: int = 10) -> str:
    """
    Generate a random alphanumeric string.

    Args:
        length: Number of characters

    Returns:
        str: Random string of ASCII letters and digits
    """
    return "".join(random.choices(_ALPHANUMERIC, k=length))


def random_email() -> str:
    """Generate a random address of the form test_<8 chars>@example.com."""
    return f"test_{random_string(8)}@example.com"


def random_phone() -> str:
    """Generate a random phone number of the form NNN-NNN-NNNN."""
    return (
        f"{random.randint(100, 999)}-{random.randint(100, 999)}-"
        f"{random.randint(1000, 9999)}"
    )


def format_date(date: datetime.date, fmt: str = "YYYY-MM-DD") -> str:
    """
    Format a date using YYYY, MM and DD tokens.

    Each token is replaced once, left to right.

    Examples:
        >>> format_date(datetime.date(2024, 3, 7), "DD/MM/YYYY")
        '07/03/2024'
    """
    return (
        fmt.replace("YYYY", f"{date.year:04d}", 1)
        .replace("MM", f"{date.month:02d}", 1)
        .replace("DD", f"{date.day:02d}", 1)
    )


def sanitize_filename(name: str) -> str:
    """Replace every character outside [a-zA-Z0-9] with "_" and lower-case the result."""
    return _UNSAFE_FILENAME_RE.sub("_", name).lower()


def timestamp(now: datetime.datetime | None = None) -> str:
    """
    UTC ISO timestamp safe for file names (":" and "." replaced by "-").

    Examples:
        >>> timestamp(datetime.datetime(2024, 3, 7, 9, 5, 1, 250000))
        '2024-03-07T09-05-01-250Z'
    """
    moment = now or datetime.datetime.now(datetime.timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def run_folder_name(now: datetime.datetime | None = None) -> str:
    """Local-time run folder name, YYYY-MM-DD_HH-MM-SS."""
    return (now or datetime.datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")


def parse_boolean(value: str) -> bool:
    """True for "true" (any case) and "1", False for anything else."""
    return value.lower() == "true" or value == "1"


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call fn until it succeeds, backing off exponentially between attempts.

    The wait after failed attempt i (0-based) is delay * 2**i seconds. The
    exception of the last attempt is re-raised.

    Args:
        fn: Zero-argument callable to invoke
        max_retries: Total number of attempts
        delay: Initial wait in seconds
        sleep: Sleep function (injectable for tests)

    Returns:
        The return value of the first successful call

    Raises:
        ValueError: If max_retries is less than 1
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    lg = get_logger("helpers")
    for attempt in range(max_retries):
        try:
            return fn()
        except Exception:
            if attempt == max_retries - 1:
                raise
            wait = delay * 2**attempt
            lg.warning(
                f"retry attempt {attempt + 1}/{max_retries} failed, waiting {wait:g}s",
                extra={"attempt": attempt + 1},
            )
            sleep(wait)

    raise AssertionError("unreachable")


def wait_for_condition(
    condition: Callable[[], bool],
    timeout: float = 10.0,
    interval: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Poll condition until it returns True.

    Args:
        condition: Zero-argument predicate
        timeout: Seconds to keep polling
        interval: Seconds between polls
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Raises:
        TimeoutError: If the condition is not met within timeout
    """
    start = clock()
    while clock() - start < timeout:
        if condition():
            return
        sleep(interval)

    raise TimeoutError(f"Condition not met within {timeout:g}s")

# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_dashboard_auth

"""
Duration strings such as "1h", "30m" or "1w2d".

A `DurationString` keeps the operator's input verbatim. Converting to a timedelta and
back would rewrite equivalent inputs ("14d" becomes "2w"), so values are only validated
at load time and converted on demand with `to_timedelta`.
"""

import re
from datetime import timedelta
from typing import Annotated

from pydantic import AfterValidator, Field

from coreason_dashboard_auth.exceptions import DurationFormatError

__all__ = ["DURATION_PATTERN", "DurationString", "parse_duration", "to_timedelta"]

DURATION_PATTERN = r"^(([0-9]+)y)?(([0-9]+)w)?(([0-9]+)d)?(([0-9]+)h)?(([0-9]+)m)?(([0-9]+)s)?(([0-9]+)ms)?$"

_DURATION_RE = re.compile(DURATION_PATTERN)

# (regex group holding the number, milliseconds per unit)
_UNITS: tuple[tuple[int, int], ...] = (
    (2, 1000 * 60 * 60 * 24 * 365),  # y
    (4, 1000 * 60 * 60 * 24 * 7),  # w
    (6, 1000 * 60 * 60 * 24),  # d
    (8, 1000 * 60 * 60),  # h
    (10, 1000 * 60),  # m
    (12, 1000),  # s
    (14, 1),  # ms
)

_MAX_MILLISECONDS = timedelta.max // timedelta(milliseconds=1)


def parse_duration(text: str) -> timedelta:
    """
    Parses a duration string into a timedelta.

    Args:
        text: A string matching the duration grammar, e.g. "1y2w", "90s", "250ms" or "0".

    Returns:
        timedelta: The equivalent duration.

    Raises:
        DurationFormatError: If the string is empty, malformed, or too large.
    """
    if text == "0":
        return timedelta(0)
    if not text:
        raise DurationFormatError("empty duration string")

    match = _DURATION_RE.fullmatch(text)
    if not match:
        raise DurationFormatError(f"not a valid duration string: {text!r}")

    total = 0
    for group, unit_ms in _UNITS:
        value = match.group(group)
        if value is None:
            continue
        total += int(value) * unit_ms
        if total > _MAX_MILLISECONDS:
            raise DurationFormatError(f"duration out of range: {text!r}")

    return timedelta(milliseconds=total)


def _validate_duration_string(value: str) -> str:
    # Empty means "unset" and is left to the owning model's defaults.
    if value:
        parse_duration(value)
    return value


DurationString = Annotated[
    str,
    AfterValidator(_validate_duration_string),
    Field(json_schema_extra={"format": "duration", "pattern": DURATION_PATTERN}),
]


def to_timedelta(value: str) -> timedelta | None:
    """
    Converts a stored DurationString into a timedelta.

    Returns:
        timedelta | None: The duration, or None when the value is empty.
    """
    if not value:
        return None
    return parse_duration(value)

"""Parsing of human-friendly TTL strings such as ``"3600s"``, ``"15m"`` or ``"7d"``."""

from __future__ import annotations

import re
from datetime import timedelta

ACCESS_TTL_DEFAULT = timedelta(hours=1)
REFRESH_TTL_DEFAULT = timedelta(days=7)

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)([smhd]?)$")


def parse_duration(value: str | int | float | timedelta | None, default: timedelta) -> timedelta:
    """
    Convert ``value`` into a :class:`~datetime.timedelta`.

    Accepted shapes are ``<number><unit>`` with unit ``s``, ``m``, ``h`` or
    ``d``, a bare number of seconds, a numeric value, or a ``timedelta``.
    Empty, malformed or non-positive input yields ``default``.

    >>> parse_duration("15m", ACCESS_TTL_DEFAULT)
    datetime.timedelta(seconds=900)
    >>> parse_duration("soon", REFRESH_TTL_DEFAULT)
    datetime.timedelta(days=7)
    """
    if isinstance(value, timedelta):
        return value if value > timedelta(0) else default
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int | float):
        return timedelta(seconds=value) if value > 0 else default

    match = _DURATION_RE.match(str(value).strip().lower())
    if not match:
        return default
    amount = float(match.group(1)) * _UNIT_SECONDS[match.group(2) or "s"]
    if amount <= 0:
        return default
    return timedelta(seconds=amount)

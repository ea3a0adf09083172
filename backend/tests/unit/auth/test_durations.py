"""Unit tests for TTL string parsing."""

from __future__ import annotations

from datetime import timedelta

import pytest

from academy.services.auth.durations import (
    ACCESS_TTL_DEFAULT,
    REFRESH_TTL_DEFAULT,
    parse_duration,
)


class TestParseDuration:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("3600s", timedelta(hours=1)),
            ("15m", timedelta(minutes=15)),
            ("2h", timedelta(hours=2)),
            ("7d", timedelta(days=7)),
            ("90", timedelta(seconds=90)),
            (" 30M ", timedelta(minutes=30)),
            ("1.5h", timedelta(minutes=90)),
            (120, timedelta(minutes=2)),
            (timedelta(minutes=5), timedelta(minutes=5)),
        ],
    )
    def test_accepted_shapes(self, raw, expected):
        assert parse_duration(raw, ACCESS_TTL_DEFAULT) == expected

    @pytest.mark.parametrize("raw", [None, "", "soon", "10w", "-5m", "0", 0, -10, True])
    def test_falls_back_to_default(self, raw):
        assert parse_duration(raw, REFRESH_TTL_DEFAULT) == REFRESH_TTL_DEFAULT

    def test_non_positive_timedelta_falls_back(self):
        assert parse_duration(timedelta(0), ACCESS_TTL_DEFAULT) == ACCESS_TTL_DEFAULT

    def test_defaults(self):
        assert ACCESS_TTL_DEFAULT == timedelta(hours=1)
        assert REFRESH_TTL_DEFAULT == timedelta(days=7)

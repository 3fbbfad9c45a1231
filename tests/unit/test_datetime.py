# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for datetime helpers."""

from datetime import datetime, timezone

import pytest

from collegehub.utils.datetime import (
    format_time_remaining,
    from_epoch_millis,
    to_epoch_millis,
)


class TestEpochMillis:
    def test_roundtrip(self) -> None:
        value = datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc)

        assert from_epoch_millis(to_epoch_millis(value)) == value

    def test_naive_is_treated_as_utc(self) -> None:
        naive = datetime(2025, 3, 1, 12, 30)

        assert to_epoch_millis(naive) == to_epoch_millis(naive.replace(tzinfo=timezone.utc))


class TestFormatTimeRemaining:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (1, "1 second"),
            (45, "45 seconds"),
            (60, "1 minute"),
            (61, "2 minutes"),
            (1800, "30 minutes"),
            (3600, "1 hour"),
            (3601, "2 hours"),
            (-5, "0 seconds"),
        ],
    )
    def test_format(self, seconds, expected) -> None:
        assert format_time_remaining(seconds) == expected

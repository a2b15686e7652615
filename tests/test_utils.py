"""Unit tests for shared utilities."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from releaser.utils import coerce_datetime, format_timestamp


def test_coerce_datetime_handles_offsets_and_naive_values() -> None:
    assert coerce_datetime("2024-05-01T12:00:00+02:00") == datetime(
        2024, 5, 1, 10, 0, tzinfo=timezone.utc
    )
    assert coerce_datetime("2024-05-01") == datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert coerce_datetime("garbage") is None
    assert coerce_datetime(None) is None


def test_format_timestamp_converts_to_utc() -> None:
    value = datetime(2024, 5, 1, 12, 0, 0, 500000, tzinfo=timezone(timedelta(hours=2)))

    assert format_timestamp(value) == "2024-05-01T10:00:00.5Z"

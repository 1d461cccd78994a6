"""Shared assertions for comparing formatted clock times."""

from __future__ import annotations

from typing import Optional


def time_to_seconds(text: str) -> int:
    parts = [int(part) for part in text.split(":")]
    seconds = parts[2] if len(parts) > 2 else 0
    return parts[0] * 3600 + parts[1] * 60 + seconds


def assert_within_seconds(actual: Optional[str], expected: str, max_diff: int, label: str) -> None:
    assert actual is not None, f"{label}: no value"
    diff = abs(time_to_seconds(actual) - time_to_seconds(expected))
    assert diff <= max_diff, f"{label}: {actual} vs {expected} (diff {diff}s, max {max_diff}s)"

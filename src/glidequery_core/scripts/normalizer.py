"""Normalization of raw script results into predictable shapes.

Remote scripts can return almost anything. normalize() maps the raw value
onto one of a fixed set of shapes, tested in priority order:

  1. Test-mode envelope      -> unwrapped data, truncation flag propagated
                                (recognized only when test_mode is set)
  2. Array (Stream result)   -> capped at MAX_RESULTS records
  3. Optional-like {value}   -> the wrapped value
  4. Bare primitive          -> {"value": v, "type": "number"|"string"|"boolean"}
  5. Aggregate with rowCount -> unchanged, rowCount copied to record_count
  6. None                    -> None with a "no records" log line
  7. Anything else           -> unchanged
"""

from dataclasses import dataclass, field
from typing import Any

from glidequery_core.scripts.wrapping import (
    ORIGINAL_COUNT_TAG,
    TEST_MODE_TAG,
    TRUNCATED_TAG,
)

# Maximum records returned outside test mode
MAX_RESULTS = 1000

NO_RECORDS_MESSAGE = "No records found - query returned empty result"


@dataclass
class NormalizedResult:
    """
    Normalized script output.

    Attributes:
        data: Reshaped result value
        logs: Lines to append after the runner's own logs
        truncated: Whether records were dropped (None if not a record set)
        record_count: Number of records returned (None if unknown)
    """

    data: Any = None
    logs: list[str] = field(default_factory=list)
    truncated: bool | None = None
    record_count: int | None = None


def _truncation_log(shown: int, total: int) -> str:
    return f"Results truncated: showing {shown} of {total} records"


def _primitive_type(value: Any) -> str | None:
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return None


def normalize(raw: Any, test_mode: bool = False) -> NormalizedResult:
    """
    Reshape a raw runner result.

    Args:
        raw: The runner's result value
        test_mode: Whether the script ran under the test-mode wrapper

    Returns:
        NormalizedResult for merging into an ExecutionResult
    """
    if test_mode and isinstance(raw, dict) and raw.get(TEST_MODE_TAG):
        return _normalize_envelope(raw)

    if isinstance(raw, list):
        if len(raw) > MAX_RESULTS:
            return NormalizedResult(
                data=raw[:MAX_RESULTS],
                logs=[_truncation_log(MAX_RESULTS, len(raw))],
                truncated=True,
                record_count=MAX_RESULTS,
            )
        return NormalizedResult(data=raw, truncated=False, record_count=len(raw))

    if isinstance(raw, dict) and "value" in raw:
        return NormalizedResult(data=raw["value"])

    primitive_type = _primitive_type(raw)
    if primitive_type is not None:
        return NormalizedResult(data={"value": raw, "type": primitive_type})

    if isinstance(raw, dict) and "rowCount" in raw:
        row_count = raw["rowCount"]
        return NormalizedResult(
            data=raw,
            record_count=(
                row_count
                if isinstance(row_count, int) and not isinstance(row_count, bool)
                else None
            ),
        )

    if raw is None:
        return NormalizedResult(data=None, logs=[NO_RECORDS_MESSAGE])

    return NormalizedResult(data=raw)


def _normalize_envelope(envelope: dict) -> NormalizedResult:
    data = envelope.get("data")
    truncated = bool(envelope.get(TRUNCATED_TAG, False))
    logs: list[str] = []

    original_count = envelope.get(ORIGINAL_COUNT_TAG)
    if truncated and original_count:
        shown = len(data) if isinstance(data, list) else 0
        logs.append(_truncation_log(shown, original_count))

    return NormalizedResult(
        data=data,
        logs=logs,
        truncated=truncated,
        record_count=len(data) if isinstance(data, list) else None,
    )

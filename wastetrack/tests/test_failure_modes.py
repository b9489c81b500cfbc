"""
Failure Injection Tests.

Validates resilience against location source failures and the error
payloads and logs produced for rejected or failed operations.
"""

import pytest

from wastetrack.app.core.exceptions import (
    InvalidTransitionError, ResourceNotFoundError, ValidationError, error_payload
)
from wastetrack.app.core.observability import track_operation
from wastetrack.app.core.reliability import CircuitBreaker, CircuitOpenError, CircuitState


class FakeMonotonic:

    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


async def failing_func():
    raise ValueError("Boom")


async def working_func():
    return "ok"


@pytest.mark.asyncio
async def test_circuit_breaker_activates():
    """Test that circuit breaker opens after threshold failures."""
    cb = CircuitBreaker(failure_threshold=2, reset_timeout=1)

    for _ in range(2):
        with pytest.raises(ValueError):
            await cb.call(failing_func)

    # Call 3 (Should be CircuitOpenError)
    with pytest.raises(CircuitOpenError):
        await cb.call(working_func)


@pytest.mark.asyncio
async def test_circuit_breaker_half_open_recovers():
    clock = FakeMonotonic()
    cb = CircuitBreaker(failure_threshold=1, reset_timeout=30, clock=clock)

    with pytest.raises(ValueError):
        await cb.call(failing_func)
    assert cb.state == CircuitState.OPEN

    clock.now += 29
    with pytest.raises(CircuitOpenError):
        await cb.call(working_func)

    clock.now += 1
    assert await cb.call(working_func) == "ok"
    assert cb.state == CircuitState.CLOSED
    assert cb.failures == 0


@pytest.mark.asyncio
async def test_failed_trial_call_reopens():
    clock = FakeMonotonic()
    cb = CircuitBreaker(failure_threshold=3, reset_timeout=10, clock=clock)

    for _ in range(3):
        with pytest.raises(ValueError):
            await cb.call(failing_func)

    clock.now += 10
    with pytest.raises(ValueError):
        await cb.call(failing_func)

    assert cb.state == CircuitState.OPEN
    with pytest.raises(CircuitOpenError):
        await cb.call(working_func)


@pytest.mark.asyncio
async def test_success_resets_failure_count():
    cb = CircuitBreaker(failure_threshold=2)

    with pytest.raises(ValueError):
        await cb.call(failing_func)
    await cb.call(working_func)
    with pytest.raises(ValueError):
        await cb.call(failing_func)

    assert cb.state == CircuitState.CLOSED


# Error payloads

def test_error_payload_for_app_exceptions():
    payload = error_payload(InvalidTransitionError("c1", "completed", "complete"))

    assert payload == {
        "error_code": "ERR_TRANSITION_001",
        "message": "Cannot complete collection c1 while it is completed",
        "details": {"collection_id": "c1", "current_status": "completed", "attempted": "complete"}
    }
    assert error_payload(ValidationError("Please enter a valid weight", field="actual_weight")) == {
        "error_code": "ERR_VALIDATION_001",
        "message": "Please enter a valid weight",
        "details": {"field": "actual_weight"}
    }
    assert error_payload(ResourceNotFoundError("Route", "r9"))["message"] == "Route with ID r9 not found"


def test_error_payload_hides_internal_errors():
    payload = error_payload(KeyError("secret internals"))

    assert payload["error_code"] == "ERR_INTERNAL"
    assert "secret" not in payload["message"]


# Operation logging

@pytest.mark.asyncio
async def test_track_operation_logs_failures(caplog):
    caplog.set_level("INFO", logger="wastetrack")

    with pytest.raises(RuntimeError):
        async with track_operation("complete", correlation_id="abc-123", collection_id="c1"):
            raise RuntimeError("store exploded")

    record = caplog.records[-1]
    assert record.getMessage() == "Operation Failed"
    assert record.levelname == "ERROR"
    assert record.correlation_id == "abc-123"
    assert record.collection_id == "c1"
    assert record.error == "RuntimeError"
    assert record.duration_ms >= 0


@pytest.mark.asyncio
async def test_track_operation_generates_correlation_id(caplog):
    caplog.set_level("INFO", logger="wastetrack")

    async with track_operation("start") as log_data:
        log_data["status"] = "in-progress"

    record = caplog.records[-1]
    assert record.getMessage() == "Operation Completed"
    assert record.status == "in-progress"
    assert len(record.correlation_id) == 36

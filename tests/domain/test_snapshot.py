from __future__ import annotations

import pytest

from domain.exceptions import ValidationError
from domain.snapshot import DispatchResult, FailureKind, ResponseSnapshot, ResultSlot


def _snapshot(body="", status=200):
    return ResponseSnapshot(
        url="https://example.com",
        status=status,
        status_text="OK",
        content_type="application/json",
        headers=[("Content-Type", "application/json"), ("X-Trace", "1")],
        body=body,
        length=len(body),
    )


class TestResponseSnapshot:
    def test_pretty_body_formats_json(self):
        snapshot = _snapshot('{"a":1}')
        assert snapshot.pretty_body() == '{\n  "a": 1\n}'

    def test_pretty_body_keeps_non_json(self):
        assert _snapshot("<html/>").pretty_body() == "<html/>"

    def test_size_kb(self):
        assert _snapshot("x" * 1500).size_kb == 1.5

    def test_frozen(self):
        with pytest.raises(Exception):
            _snapshot().status = 500


class TestDispatchResult:
    def test_needs_exactly_one_outcome(self):
        with pytest.raises(ValidationError):
            DispatchResult(dispatch_id="d", location_id="l", sequence=0)

    def test_ok_and_failed(self):
        ok = DispatchResult.succeeded("d1", "l", 0, _snapshot())
        failed = DispatchResult.failed("d2", "l", 1, FailureKind.TRANSPORT, "refused")
        assert ok.ok is True
        assert failed.ok is False
        assert failed.failure.kind == FailureKind.TRANSPORT


class TestResultSlot:
    def test_failure_keeps_previous_snapshot(self):
        first = _snapshot("first")
        slot = ResultSlot().apply(DispatchResult.succeeded("d1", "l", 0, first))

        slot = slot.apply(DispatchResult.failed("d2", "l", 1, FailureKind.TRANSPORT, "timeout"))

        assert slot.snapshot is first
        assert slot.failure.message == "timeout"
        assert slot.dispatch_id == "d2"

    def test_older_result_is_ignored(self):
        newer = _snapshot("newer")
        slot = ResultSlot().apply(DispatchResult.succeeded("d2", "l", 5, newer))

        slot = slot.apply(DispatchResult.succeeded("d1", "l", 3, _snapshot("older")))

        assert slot.snapshot is newer
        assert slot.sequence == 5

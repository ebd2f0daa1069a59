import threading
from types import SimpleNamespace
from typing import Callable, Dict, List

import pytest

from tlsgauge.core.models import ConnectionFailureKind, ProbeTarget, ProtocolVersion
from tlsgauge.probe.driver import (
    Negotiated,
    ProbeOutcome,
    Rejected,
    Timeout,
    Unreachable,
)
from tlsgauge.probe import prober
from tlsgauge.probe.prober import probe_all

TARGET = ProbeTarget(host="localhost", port=8443)


class RecordingDriver:
    """Thread-safe fake driver returning a scripted outcome per version."""

    def __init__(self, script: Callable[[ProtocolVersion, int], ProbeOutcome]) -> None:
        self.script = script
        self.calls: List[ProtocolVersion] = []
        self._counts: Dict[ProtocolVersion, int] = {}
        self._lock = threading.Lock()

    def __call__(self, target: ProbeTarget, version: ProtocolVersion) -> ProbeOutcome:
        with self._lock:
            self.calls.append(version)
            attempt = self._counts.get(version, 0)
            self._counts[version] = attempt + 1
        return self.script(version, attempt)


def _modern_only(version: ProtocolVersion, attempt: int) -> ProbeOutcome:
    if version is ProtocolVersion.TLS1_3:
        return Negotiated(version=version, cipher="TLS_AES_256_GCM_SHA384")
    if version is ProtocolVersion.TLS1_2:
        return Negotiated(version=version, cipher="ECDHE-RSA-AES256-GCM-SHA384")
    return Rejected(version=version, reason="alert protocol version")


def test_results_cover_every_version_in_order(consent: None) -> None:
    fake = RecordingDriver(_modern_only)
    results = probe_all(TARGET, driver=fake, max_workers=4)
    assert [r.version for r in results] == list(ProtocolVersion)
    assert [r.supported for r in results] == [False, False, True, True]
    assert results[0].failure_kind is ConnectionFailureKind.REJECTED
    assert results[3].negotiated_cipher is not None
    assert results[3].negotiated_cipher.raw_name == "TLS_AES_256_GCM_SHA384"
    assert sorted(fake.calls) == sorted(ProtocolVersion)


def test_unreachable_short_circuits_remaining_probes(consent: None) -> None:
    fake = RecordingDriver(lambda version, attempt: Unreachable(reason="DNS resolution failed"))
    results = probe_all(TARGET, driver=fake, max_workers=1, retries=3)
    assert fake.calls == [ProtocolVersion.TLS1_0]
    assert all(r.failure_kind is ConnectionFailureKind.UNREACHABLE for r in results)
    assert not any(r.supported for r in results)
    assert results[0].detail == "DNS resolution failed"
    assert "cancelled" in results[3].detail


def test_unreachable_discards_probes_already_in_flight(
    monkeypatch: pytest.MonkeyPatch, consent: None
) -> None:
    in_flight = threading.Semaphore(0)
    release = threading.Event()

    class SignallingEvent(threading.Event):
        def set(self) -> None:
            super().set()
            release.set()

    monkeypatch.setattr(prober, "threading", SimpleNamespace(Event=SignallingEvent))

    def script(version: ProtocolVersion, attempt: int) -> ProbeOutcome:
        if version is ProtocolVersion.TLS1_0:
            for _ in range(len(ProtocolVersion) - 1):
                assert in_flight.acquire(timeout=5)
            return Unreachable(reason="DNS resolution failed")
        in_flight.release()
        assert release.wait(timeout=5)
        return _modern_only(version, attempt)

    fake = RecordingDriver(script)
    results = probe_all(TARGET, driver=fake, max_workers=4, retries=0)

    assert sorted(fake.calls) == sorted(ProtocolVersion)
    assert all(r.failure_kind is ConnectionFailureKind.UNREACHABLE for r in results)
    assert not any(r.supported for r in results)
    assert results[0].detail == "DNS resolution failed"
    assert all("cancelled" in r.detail for r in results[1:])


def test_timeout_is_retried(consent: None) -> None:
    def script(version: ProtocolVersion, attempt: int) -> ProbeOutcome:
        if version is ProtocolVersion.TLS1_2 and attempt == 0:
            return Timeout(version=version, reason="handshake timed out")
        return _modern_only(version, attempt)

    fake = RecordingDriver(script)
    results = probe_all(TARGET, driver=fake, retries=1)
    assert fake.calls.count(ProtocolVersion.TLS1_2) == 2
    assert results[2].supported


def test_persistent_timeout_is_reported(consent: None) -> None:
    fake = RecordingDriver(lambda version, attempt: Timeout(version=version, reason="slow"))
    results = probe_all(TARGET, driver=fake, retries=2)
    assert len(fake.calls) == 3 * len(ProtocolVersion)
    assert all(r.failure_kind is ConnectionFailureKind.TIMEOUT for r in results)


def test_transient_unreachable_is_retried(consent: None) -> None:
    def script(version: ProtocolVersion, attempt: int) -> ProbeOutcome:
        if attempt == 0:
            return Unreachable(reason="no route to host", transient=True)
        return _modern_only(version, attempt)

    fake = RecordingDriver(script)
    results = probe_all(TARGET, driver=fake, max_workers=1, retries=1)
    assert [r.supported for r in results] == [False, False, True, True]


def test_rejection_is_not_retried(consent: None) -> None:
    fake = RecordingDriver(_modern_only)
    probe_all(TARGET, driver=fake, retries=3)
    assert fake.calls.count(ProtocolVersion.TLS1_0) == 1


def test_driver_exception_becomes_error_result(consent: None) -> None:
    def script(version: ProtocolVersion, attempt: int) -> ProbeOutcome:
        if version is ProtocolVersion.TLS1_1:
            raise RuntimeError("boom")
        return _modern_only(version, attempt)

    results = probe_all(TARGET, driver=RecordingDriver(script))
    assert results[1].failure_kind is ConnectionFailureKind.ERROR
    assert "boom" in results[1].detail
    assert results[3].supported


def test_safe_mode_blocks_before_any_handshake(consent: None) -> None:
    fake = RecordingDriver(_modern_only)
    with pytest.raises(PermissionError):
        probe_all(ProbeTarget(host="example.com"), driver=fake)
    assert fake.calls == []


def test_missing_consent_blocks_probing() -> None:
    fake = RecordingDriver(_modern_only)
    with pytest.raises(PermissionError):
        probe_all(TARGET, driver=fake)
    assert fake.calls == []

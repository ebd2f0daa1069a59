"""Per-target protocol capability probing."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List

from ..analysis.certificate import summarize
from ..analysis.ciphers import analyze
from ..core.config import DEFAULT_PROBE_WORKERS, DEFAULT_RETRIES
from ..core.models import (
    ConnectionFailureKind,
    ProbeTarget,
    ProtocolProbeResult,
    ProtocolVersion,
)
from ..core.safemode import safe_mode
from .driver import (
    Negotiated,
    ProbeOutcome,
    ProtocolMismatch,
    Timeout,
    Unreachable,
    probe_version,
)

logger = logging.getLogger(__name__)

Driver = Callable[[ProbeTarget, ProtocolVersion], ProbeOutcome]

_ABORTED = "probe cancelled: target unreachable"


def _attempt(
    driver: Driver,
    target: ProbeTarget,
    version: ProtocolVersion,
    retries: int,
    abort: threading.Event,
) -> ProbeOutcome:
    outcome: ProbeOutcome = Unreachable(reason=_ABORTED)
    for attempt in range(retries + 1):
        if abort.is_set():
            return Unreachable(reason=_ABORTED)
        outcome = driver(target, version)
        if isinstance(outcome, Unreachable):
            if outcome.retryable and attempt < retries:
                logger.debug("%s %s: %s; retrying", target.locator, version.label, outcome.reason)
                continue
            abort.set()
            return outcome
        if isinstance(outcome, Timeout) and attempt < retries:
            logger.debug("%s %s: %s; retrying", target.locator, version.label, outcome.reason)
            continue
        break
    if abort.is_set():
        # Another probe found the host unreachable while this one was in flight.
        return Unreachable(reason=_ABORTED)
    return outcome


def _to_result(
    target: ProbeTarget, version: ProtocolVersion, outcome: ProbeOutcome
) -> ProtocolProbeResult:
    if isinstance(outcome, Negotiated):
        logger.info("%s supports %s (%s)", target.locator, version.label, outcome.cipher)
        return ProtocolProbeResult(
            version=version,
            supported=True,
            negotiated_cipher=analyze(outcome.cipher),
            certificate=summarize(outcome.peer_certificate),
        )

    if outcome.kind is ConnectionFailureKind.REJECTED:
        logger.debug("%s rejected %s: %s", target.locator, version.label, outcome.reason)
    elif isinstance(outcome, ProtocolMismatch):
        logger.warning("%s protocol anomaly: %s", target.locator, outcome.reason)
    elif outcome.kind is ConnectionFailureKind.TIMEOUT:
        logger.warning("%s %s timed out: %s", target.locator, version.label, outcome.reason)
    elif outcome.kind is ConnectionFailureKind.CLIENT_UNSUPPORTED:
        logger.warning(
            "%s cannot be probed locally; %s support is unknown: %s",
            version.label,
            target.locator,
            outcome.reason,
        )
    return ProtocolProbeResult(
        version=version,
        supported=False,
        failure_kind=outcome.kind,
        detail=outcome.reason,
    )


def _error_result(version: ProtocolVersion, exc: BaseException) -> ProtocolProbeResult:
    return ProtocolProbeResult(
        version=version,
        supported=False,
        failure_kind=ConnectionFailureKind.ERROR,
        detail=f"{type(exc).__name__}: {exc}",
    )


def probe_all(
    target: ProbeTarget,
    *,
    driver: Driver = probe_version,
    max_workers: int = DEFAULT_PROBE_WORKERS,
    retries: int = DEFAULT_RETRIES,
) -> List[ProtocolProbeResult]:
    """Probe every protocol version once and return results in ascending version order."""

    safe_mode.authorize(target.host)

    abort = threading.Event()
    results: Dict[ProtocolVersion, ProtocolProbeResult] = {}
    with ThreadPoolExecutor(
        max_workers=max(1, max_workers), thread_name_prefix="tlsgauge-probe"
    ) as pool:
        futures: Dict[Future[ProbeOutcome], ProtocolVersion] = {
            pool.submit(_attempt, driver, target, version, retries, abort): version
            for version in ProtocolVersion
        }
        for future in as_completed(futures):
            version = futures[future]
            if future.cancelled():
                results[version] = _to_result(target, version, Unreachable(reason=_ABORTED))
                continue
            try:
                outcome = future.result()
            except Exception as exc:
                logger.exception("%s %s probe failed unexpectedly", target.locator, version.label)
                results[version] = _error_result(version, exc)
                continue
            if abort.is_set():
                for pending in futures:
                    pending.cancel()
            results[version] = _to_result(target, version, outcome)

    if abort.is_set():
        logger.warning("%s is unreachable; remaining probes were skipped", target.locator)
    return [results[version] for version in ProtocolVersion]


__all__ = ["Driver", "probe_all"]

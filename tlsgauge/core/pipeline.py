"""Assessment pipeline: probe, classify, score and recommend."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ..analysis.recommendations import recommend
from ..analysis.scoring import grade, score
from ..probe.driver import probe_version
from ..probe.prober import Driver, probe_all
from .config import DEFAULT_BATCH_WORKERS, DEFAULT_PROBE_WORKERS, DEFAULT_RETRIES
from .models import (
    CertificateSummary,
    ConnectionFailureKind,
    ProbeTarget,
    ProtocolProbeResult,
    ProtocolVersion,
    SecurityAssessment,
)
from .safemode import safe_mode
from .utils import now_utc

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _certificate(results: Sequence[ProtocolProbeResult]) -> Optional[CertificateSummary]:
    for result in reversed(results):
        if result.certificate is not None:
            return result.certificate
    return None


def build_assessment(
    target: ProbeTarget,
    results: Sequence[ProtocolProbeResult],
    *,
    clock: Clock = now_utc,
) -> SecurityAssessment:
    """Score and annotate already collected probe results."""

    results = tuple(sorted(results, key=lambda r: r.version.order))
    descriptors = [r.negotiated_cipher for r in results if r.negotiated_cipher is not None]
    value, level = score(results)
    return SecurityAssessment(
        target=target,
        protocol_results=results,
        security_score=value,
        security_level=level,
        recommendations=tuple(recommend(results, descriptors, level)),
        grade=grade(value),
        certificate=_certificate(results),
        timestamp=clock(),
    )


def assess(
    target: ProbeTarget,
    *,
    driver: Driver = probe_version,
    probe_workers: int = DEFAULT_PROBE_WORKERS,
    retries: int = DEFAULT_RETRIES,
    clock: Clock = now_utc,
) -> SecurityAssessment:
    """Assess one target end to end."""

    results = probe_all(target, driver=driver, max_workers=probe_workers, retries=retries)
    assessment = build_assessment(target, results, clock=clock)
    if assessment.unreachable:
        logger.warning("%s could not be reached; no TLS assessment possible", target.locator)
    else:
        logger.info(
            "%s scored %d (%s)",
            target.locator,
            assessment.security_score,
            assessment.security_level.value,
        )
    return assessment


def _failed_assessment(target: ProbeTarget, exc: BaseException, clock: Clock) -> SecurityAssessment:
    detail = f"{type(exc).__name__}: {exc}"
    results = [
        ProtocolProbeResult(
            version=version,
            supported=False,
            failure_kind=ConnectionFailureKind.ERROR,
            detail=detail,
        )
        for version in ProtocolVersion
    ]
    return build_assessment(target, results, clock=clock)


def assess_many(
    targets: Sequence[ProbeTarget],
    *,
    max_workers: int = DEFAULT_BATCH_WORKERS,
    driver: Driver = probe_version,
    probe_workers: int = DEFAULT_PROBE_WORKERS,
    retries: int = DEFAULT_RETRIES,
    clock: Clock = now_utc,
) -> List[SecurityAssessment]:
    """Assess targets in parallel; results keep the order of ``targets``."""

    for target in targets:
        safe_mode.authorize(target.host)
    if not targets:
        return []

    def run(target: ProbeTarget) -> SecurityAssessment:
        try:
            return assess(
                target,
                driver=driver,
                probe_workers=probe_workers,
                retries=retries,
                clock=clock,
            )
        except Exception as exc:
            logger.exception("Assessment of %s failed", target.locator)
            return _failed_assessment(target, exc, clock)

    workers = max(1, min(max_workers, len(targets)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tlsgauge-batch") as pool:
        return list(pool.map(run, targets))


__all__ = ["assess", "assess_many", "build_assessment"]

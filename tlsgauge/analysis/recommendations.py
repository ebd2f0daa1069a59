"""Remediation guidance derived from probe results."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..core.models import (
    CipherDescriptor,
    CipherStrength,
    ConnectionFailureKind,
    Priority,
    ProtocolProbeResult,
    ProtocolVersion,
    Recommendation,
    SecurityLevel,
    target_unreachable,
)
from .scoring import score


@dataclass(frozen=True)
class Findings:
    """Facts the rule predicates are evaluated against."""

    supported: frozenset[ProtocolVersion]
    descriptors: Sequence[CipherDescriptor]


@dataclass(frozen=True)
class Rule:
    finding: str
    priority: Priority
    message: str
    applies: Callable[[Findings], bool]

    def recommendation(self) -> Recommendation:
        return Recommendation(
            priority=self.priority, message=self.message, related_finding=self.finding
        )


def _legacy(f: Findings) -> bool:
    return bool(f.supported & {ProtocolVersion.TLS1_0, ProtocolVersion.TLS1_1})


def _no_modern(f: Findings) -> bool:
    return not any(version.is_modern for version in f.supported)


def _weak_cipher(f: Findings) -> bool:
    return any(d.strength is CipherStrength.WEAK for d in f.descriptors)


def _no_forward_secrecy(f: Findings) -> bool:
    return bool(f.descriptors) and not any(d.has_forward_secrecy for d in f.descriptors)


def _missing_tls13(f: Findings) -> bool:
    return ProtocolVersion.TLS1_2 in f.supported and ProtocolVersion.TLS1_3 not in f.supported


def _missing_tls12(f: Findings) -> bool:
    return ProtocolVersion.TLS1_3 in f.supported and ProtocolVersion.TLS1_2 not in f.supported


def _no_strong_cipher(f: Findings) -> bool:
    return bool(f.descriptors) and not any(
        d.strength is CipherStrength.STRONG for d in f.descriptors
    )


RULES: Sequence[Rule] = (
    Rule("legacy_protocol", Priority.CRITICAL, "Disable TLS 1.0/1.1", _legacy),
    Rule("no_modern_protocol", Priority.CRITICAL, "Enable TLS 1.2 and/or 1.3", _no_modern),
    Rule("weak_cipher", Priority.HIGH, "Remove weak cipher suites", _weak_cipher),
    Rule(
        "no_forward_secrecy",
        Priority.MEDIUM,
        "Enable ECDHE/DHE-based cipher suites",
        _no_forward_secrecy,
    ),
    Rule("tls13_disabled", Priority.MEDIUM, "Enable TLS 1.3", _missing_tls13),
    Rule(
        "tls12_disabled",
        Priority.LOW,
        "Enable TLS 1.2 alongside TLS 1.3 for older clients",
        _missing_tls12,
    ),
    Rule(
        "no_strong_cipher",
        Priority.LOW,
        "Prefer AEAD cipher suites with AES-256 or ChaCha20",
        _no_strong_cipher,
    ),
)

ACCEPTABLE = Recommendation(
    priority=Priority.LOW,
    message="Configuration is acceptable; no changes required",
    related_finding="none",
)
REVIEW = Recommendation(
    priority=Priority.LOW,
    message="Review the TLS configuration; the security score is below the HIGH threshold",
    related_finding="score_below_threshold",
)
UNREACHABLE = Recommendation(
    priority=Priority.CRITICAL,
    message=(
        "Target unreachable; cannot assess TLS configuration. "
        "Check DNS, routing and firewall rules"
    ),
    related_finding="target_unreachable",
)
PROBE_FAILED = Recommendation(
    priority=Priority.CRITICAL,
    message="Probing failed; cannot assess TLS configuration",
    related_finding="probe_failed",
)


def _blocked(results: Sequence[ProtocolProbeResult]) -> Recommendation | None:
    if not results or any(r.supported for r in results):
        return None
    if target_unreachable(results):
        return UNREACHABLE
    if {r.failure_kind for r in results} == {ConnectionFailureKind.ERROR}:
        return PROBE_FAILED
    return None


def recommend(
    results: Sequence[ProtocolProbeResult],
    descriptors: Sequence[CipherDescriptor],
    level: Optional[SecurityLevel] = None,
) -> List[Recommendation]:
    """Evaluate the rule table; the result is never empty.

    ``level`` defaults to the level scored from ``results``.
    """

    blocked = _blocked(results)
    if blocked is not None:
        return [blocked]

    findings = Findings(
        supported=frozenset(r.version for r in results if r.supported),
        descriptors=tuple(descriptors),
    )
    fired = [rule.recommendation() for rule in RULES if rule.applies(findings)]
    if not fired:
        if level is None:
            _, level = score(results)
        return [ACCEPTABLE if level is SecurityLevel.HIGH else REVIEW]
    # sorted() is stable, so equal priorities keep rule-table order
    return sorted(fired, key=lambda rec: -rec.priority.rank)


__all__ = ["ACCEPTABLE", "PROBE_FAILED", "REVIEW", "RULES", "UNREACHABLE", "Rule", "recommend"]

"""Security scoring over protocol probe results."""
from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from ..core.models import CipherStrength, ProtocolProbeResult, ProtocolVersion, SecurityLevel

TLS12_BONUS = 40
TLS13_BONUS = 50
STRONG_CIPHER_BONUS = 15
STRONG_CIPHER_CAP = 30
LEGACY_PENALTY = 30

HIGH_THRESHOLD = 80
MEDIUM_THRESHOLD = 50

_GRADES: Sequence[Tuple[int, str]] = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))


def _supported(results: Iterable[ProtocolProbeResult]) -> set[ProtocolVersion]:
    return {result.version for result in results if result.supported}


def raw_score(results: Sequence[ProtocolProbeResult]) -> int:
    """Unclamped additive score.

    Strong-cipher credit is only counted on TLS 1.2 and 1.3 handshakes, so
    enabling a legacy version can never raise the score.
    """

    supported = _supported(results)
    total = 0
    if ProtocolVersion.TLS1_2 in supported:
        total += TLS12_BONUS
    if ProtocolVersion.TLS1_3 in supported:
        total += TLS13_BONUS

    strong = sum(
        1
        for result in results
        if result.supported
        and result.version.is_modern
        and result.negotiated_cipher is not None
        and result.negotiated_cipher.strength is CipherStrength.STRONG
    )
    total += min(strong * STRONG_CIPHER_BONUS, STRONG_CIPHER_CAP)

    if supported & {ProtocolVersion.TLS1_0, ProtocolVersion.TLS1_1}:
        total -= LEGACY_PENALTY
    return total


def level_for(value: int) -> SecurityLevel:
    if value >= HIGH_THRESHOLD:
        return SecurityLevel.HIGH
    if value >= MEDIUM_THRESHOLD:
        return SecurityLevel.MEDIUM
    return SecurityLevel.LOW


def score(results: Sequence[ProtocolProbeResult]) -> Tuple[int, SecurityLevel]:
    """Return the clamped 0-100 score and its security level."""

    value = max(0, min(100, raw_score(results)))
    return value, level_for(value)


def grade(value: int) -> str:
    for threshold, letter in _GRADES:
        if value >= threshold:
            return letter
    return "F"


__all__ = [
    "HIGH_THRESHOLD",
    "LEGACY_PENALTY",
    "MEDIUM_THRESHOLD",
    "STRONG_CIPHER_BONUS",
    "STRONG_CIPHER_CAP",
    "TLS12_BONUS",
    "TLS13_BONUS",
    "grade",
    "level_for",
    "raw_score",
    "score",
]

"""Core data models for tlsgauge."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from .utils import now_utc


class ProtocolVersion(str, Enum):
    """TLS protocol versions probed, in ascending order."""

    TLS1_0 = "TLS1_0"
    TLS1_1 = "TLS1_1"
    TLS1_2 = "TLS1_2"
    TLS1_3 = "TLS1_3"

    @property
    def is_modern(self) -> bool:
        return self in (ProtocolVersion.TLS1_2, ProtocolVersion.TLS1_3)

    @property
    def wire_name(self) -> str:
        """Name reported by the handshake layer for this version."""

        return _WIRE_NAMES[self]

    @property
    def label(self) -> str:
        return "TLS " + self.value[3:].replace("_", ".")

    @property
    def order(self) -> int:
        return list(ProtocolVersion).index(self)


_WIRE_NAMES = {
    ProtocolVersion.TLS1_0: "TLSv1",
    ProtocolVersion.TLS1_1: "TLSv1.1",
    ProtocolVersion.TLS1_2: "TLSv1.2",
    ProtocolVersion.TLS1_3: "TLSv1.3",
}


class ConnectionFailureKind(str, Enum):
    REJECTED = "REJECTED"
    UNREACHABLE = "UNREACHABLE"
    TIMEOUT = "TIMEOUT"
    PROTOCOL_MISMATCH = "PROTOCOL_MISMATCH"
    CLIENT_UNSUPPORTED = "CLIENT_UNSUPPORTED"
    ERROR = "ERROR"


class KeyExchange(str, Enum):
    ECDHE = "ECDHE"
    DHE = "DHE"
    RSA = "RSA"
    UNKNOWN = "UNKNOWN"


class BulkCipher(str, Enum):
    AES128 = "AES128"
    AES256 = "AES256"
    CHACHA20 = "CHACHA20"
    UNKNOWN = "UNKNOWN"


class MacMode(str, Enum):
    AEAD = "AEAD"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA1 = "SHA1"
    UNKNOWN = "UNKNOWN"


class CipherStrength(str, Enum):
    STRONG = "STRONG"
    MEDIUM = "MEDIUM"
    WEAK = "WEAK"


class SecurityLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Priority(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS = {
    Priority.CRITICAL: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


@dataclass(frozen=True)
class ProbeTarget:
    """A single TLS endpoint to assess."""

    host: str
    port: int = 443
    timeout_ms: int = 10_000

    @property
    def locator(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"tls://{host}:{self.port}"

    def as_dict(self) -> dict[str, object]:
        return {"host": self.host, "port": self.port, "timeoutMs": self.timeout_ms}


@dataclass(frozen=True)
class CipherDescriptor:
    """Structural decomposition of a negotiated cipher suite name."""

    raw_name: str
    key_exchange: KeyExchange = KeyExchange.UNKNOWN
    bulk_cipher: BulkCipher = BulkCipher.UNKNOWN
    mac_mode: MacMode = MacMode.UNKNOWN
    has_forward_secrecy: bool = False
    strength: CipherStrength = CipherStrength.WEAK

    @property
    def degraded(self) -> bool:
        """True when no classification rule recognised the name."""

        return (
            self.key_exchange is KeyExchange.UNKNOWN
            and self.bulk_cipher is BulkCipher.UNKNOWN
            and self.mac_mode is MacMode.UNKNOWN
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "rawName": self.raw_name,
            "keyExchange": self.key_exchange.value,
            "bulkCipher": self.bulk_cipher.value,
            "macMode": self.mac_mode.value,
            "hasForwardSecrecy": self.has_forward_secrecy,
            "strength": self.strength.value,
        }


@dataclass(frozen=True)
class CertificateSummary:
    """Informational view of the peer's leaf certificate."""

    subject: str
    issuer: str
    not_after: Optional[datetime] = None
    days_remaining: Optional[int] = None
    key_type: Optional[str] = None
    key_size: Optional[int] = None
    signature_algorithm: Optional[str] = None

    def as_dict(self) -> dict[str, object]:
        return {
            "subject": self.subject,
            "issuer": self.issuer,
            "notAfter": self.not_after.isoformat() if self.not_after else None,
            "daysRemaining": self.days_remaining,
            "keyType": self.key_type,
            "keySize": self.key_size,
            "signatureAlgorithm": self.signature_algorithm,
        }


@dataclass(frozen=True)
class ProtocolProbeResult:
    """Outcome of probing one protocol version against one target."""

    version: ProtocolVersion
    supported: bool
    negotiated_cipher: Optional[CipherDescriptor] = None
    failure_kind: Optional[ConnectionFailureKind] = None
    detail: str = ""
    certificate: Optional[CertificateSummary] = None

    def __post_init__(self) -> None:
        if self.supported != (self.negotiated_cipher is not None):
            raise ValueError(
                f"{self.version.label}: negotiated cipher must be present "
                "if and only if the version is supported"
            )
        if self.supported and self.failure_kind is not None:
            raise ValueError(f"{self.version.label}: supported result cannot carry a failure")

    def as_dict(self) -> dict[str, object]:
        return {
            "version": self.version.value,
            "supported": self.supported,
            "negotiatedCipher": (
                self.negotiated_cipher.as_dict() if self.negotiated_cipher else None
            ),
            "failureKind": self.failure_kind.value if self.failure_kind else None,
            "detail": self.detail,
        }


_UNREACHABLE_KINDS = frozenset(
    {
        ConnectionFailureKind.UNREACHABLE,
        ConnectionFailureKind.TIMEOUT,
        ConnectionFailureKind.ERROR,
        ConnectionFailureKind.CLIENT_UNSUPPORTED,
    }
)


def target_unreachable(results: Sequence[ProtocolProbeResult]) -> bool:
    """True when nothing was negotiated and the host itself could not be reached."""

    if any(r.supported for r in results):
        return False
    kinds = {r.failure_kind for r in results}
    return ConnectionFailureKind.UNREACHABLE in kinds and kinds <= _UNREACHABLE_KINDS


@dataclass(frozen=True)
class Recommendation:
    """Prioritised remediation action."""

    priority: Priority
    message: str
    related_finding: str

    def as_dict(self) -> dict[str, object]:
        return {
            "priority": self.priority.value,
            "message": self.message,
            "relatedFinding": self.related_finding,
        }


@dataclass(frozen=True)
class SecurityAssessment:
    """Aggregate posture result for one target."""

    target: ProbeTarget
    protocol_results: Sequence[ProtocolProbeResult]
    security_score: int
    security_level: SecurityLevel
    recommendations: Sequence[Recommendation]
    grade: str = "F"
    certificate: Optional[CertificateSummary] = None
    timestamp: datetime = field(default_factory=now_utc)

    @property
    def unreachable(self) -> bool:
        return target_unreachable(self.protocol_results)

    @property
    def has_critical(self) -> bool:
        return any(r.priority is Priority.CRITICAL for r in self.recommendations)

    @property
    def passed(self) -> bool:
        """CI gate: HIGH level and no critical recommendation."""

        return self.security_level is SecurityLevel.HIGH and not self.has_critical

    def as_dict(self) -> dict[str, object]:
        return {
            "target": self.target.as_dict(),
            "timestamp": self.timestamp.isoformat(),
            "protocolResults": [r.as_dict() for r in self.protocol_results],
            "securityScore": self.security_score,
            "securityLevel": self.security_level.value,
            "grade": self.grade,
            "unreachable": self.unreachable,
            "recommendations": [r.as_dict() for r in self.recommendations],
            "certificate": self.certificate.as_dict() if self.certificate else None,
        }


__all__ = [
    "BulkCipher",
    "CertificateSummary",
    "CipherDescriptor",
    "CipherStrength",
    "ConnectionFailureKind",
    "KeyExchange",
    "MacMode",
    "Priority",
    "ProbeTarget",
    "ProtocolProbeResult",
    "ProtocolVersion",
    "Recommendation",
    "SecurityAssessment",
    "SecurityLevel",
    "target_unreachable",
]

"""Version-pinned TLS handshakes.

``probe_version`` performs exactly one handshake that offers a single protocol
version and classifies what happened. It never retries and never raises for
network conditions; every outcome is one of the variants below.
"""
from __future__ import annotations

import logging
import socket
import ssl
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from ..core.models import ConnectionFailureKind, ProbeTarget, ProtocolVersion

logger = logging.getLogger(__name__)

_TLS_VERSIONS = {
    ProtocolVersion.TLS1_0: ("TLSv1", "HAS_TLSv1"),
    ProtocolVersion.TLS1_1: ("TLSv1_1", "HAS_TLSv1_1"),
    ProtocolVersion.TLS1_2: ("TLSv1_2", "HAS_TLSv1_2"),
    ProtocolVersion.TLS1_3: ("TLSv1_3", "HAS_TLSv1_3"),
}

# Legacy versions need the OpenSSL security level lowered or the local
# library refuses to offer them at all.
_LEGACY_CIPHERS = "ALL:@SECLEVEL=0"

# Library reasons raised by our own context rather than by the peer.
_CLIENT_SIDE_REASONS = frozenset({"NO_PROTOCOLS_AVAILABLE", "NO_CIPHERS_AVAILABLE"})


@dataclass(frozen=True)
class Negotiated:
    version: ProtocolVersion
    cipher: str
    bits: Optional[int] = None
    peer_certificate: bytes = b""


@dataclass(frozen=True)
class Rejected:
    version: ProtocolVersion
    reason: str

    kind: ClassVar[ConnectionFailureKind] = ConnectionFailureKind.REJECTED
    retryable: ClassVar[bool] = False


@dataclass(frozen=True)
class Unreachable:
    reason: str
    transient: bool = False

    kind: ClassVar[ConnectionFailureKind] = ConnectionFailureKind.UNREACHABLE

    @property
    def retryable(self) -> bool:
        return self.transient


@dataclass(frozen=True)
class Timeout:
    version: ProtocolVersion
    reason: str

    kind: ClassVar[ConnectionFailureKind] = ConnectionFailureKind.TIMEOUT
    retryable: ClassVar[bool] = True


@dataclass(frozen=True)
class ProtocolMismatch:
    version: ProtocolVersion
    negotiated: Optional[str]

    kind: ClassVar[ConnectionFailureKind] = ConnectionFailureKind.PROTOCOL_MISMATCH
    retryable: ClassVar[bool] = False

    @property
    def reason(self) -> str:
        return f"requested {self.version.wire_name}, peer negotiated {self.negotiated or 'nothing'}"


@dataclass(frozen=True)
class ClientUnsupported:
    version: ProtocolVersion
    reason: str

    kind: ClassVar[ConnectionFailureKind] = ConnectionFailureKind.CLIENT_UNSUPPORTED
    retryable: ClassVar[bool] = False


Failure = Union[Rejected, Unreachable, Timeout, ProtocolMismatch, ClientUnsupported]
ProbeOutcome = Union[Negotiated, Failure]


def client_supports(version: ProtocolVersion) -> bool:
    """Whether the local TLS library can offer ``version`` at all."""

    _, flag = _TLS_VERSIONS[version]
    return bool(getattr(ssl, flag, False))


def _build_context(version: ProtocolVersion) -> ssl.SSLContext:
    tls_version = getattr(ssl.TLSVersion, _TLS_VERSIONS[version][0])
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    ctx.minimum_version = tls_version
    ctx.maximum_version = tls_version
    if not version.is_modern:
        ctx.set_ciphers(_LEGACY_CIPHERS)
    return ctx


def _is_client_side(exc: ssl.SSLError) -> bool:
    return (getattr(exc, "reason", None) or "") in _CLIENT_SIDE_REASONS


def _connect(target: ProbeTarget, version: ProtocolVersion) -> Union[socket.socket, Failure]:
    try:
        return socket.create_connection(
            (target.host, target.port), timeout=target.timeout_ms / 1000
        )
    except socket.gaierror as exc:
        return Unreachable(reason=f"DNS resolution failed for {target.host}: {exc}")
    except ConnectionRefusedError as exc:
        return Unreachable(reason=f"Connection refused by {target.locator}: {exc}")
    except socket.timeout:
        return Timeout(
            version=version, reason=f"TCP connect timed out after {target.timeout_ms} ms"
        )
    except OSError as exc:
        return Unreachable(reason=f"Could not connect to {target.locator}: {exc}", transient=True)


def probe_version(target: ProbeTarget, version: ProtocolVersion) -> ProbeOutcome:
    """Attempt one handshake offering only ``version``."""

    if not client_supports(version):
        return ClientUnsupported(
            version=version,
            reason=f"local TLS library cannot offer {version.label}",
        )
    try:
        ctx = _build_context(version)
    except (ValueError, ssl.SSLError) as exc:
        return ClientUnsupported(version=version, reason=f"cannot pin {version.label}: {exc}")

    connected = _connect(target, version)
    if isinstance(connected, (Unreachable, Timeout)):
        return connected

    with connected as sock:
        try:
            with ctx.wrap_socket(sock, server_hostname=target.host) as ssock:
                negotiated = ssock.version()
                cipher = ssock.cipher()
                der = ssock.getpeercert(binary_form=True) or b""
        except socket.timeout:
            return Timeout(
                version=version,
                reason=f"{version.label} handshake timed out after {target.timeout_ms} ms",
            )
        except ssl.SSLError as exc:
            if _is_client_side(exc):
                return ClientUnsupported(version=version, reason=str(exc))
            return Rejected(version=version, reason=str(exc))
        except OSError as exc:
            # Resets and aborted connections mid-handshake are how many
            # servers refuse a version they do not speak.
            return Rejected(version=version, reason=f"connection dropped during handshake: {exc}")

    if negotiated != version.wire_name:
        return ProtocolMismatch(version=version, negotiated=negotiated)
    name, _, bits = cipher if cipher else ("", None, None)
    logger.debug("%s negotiated %s with %s", target.locator, negotiated, name or "no cipher")
    return Negotiated(version=version, cipher=name, bits=bits, peer_certificate=der)


__all__ = [
    "ClientUnsupported",
    "Failure",
    "Negotiated",
    "ProbeOutcome",
    "ProtocolMismatch",
    "Rejected",
    "Timeout",
    "Unreachable",
    "client_supports",
    "probe_version",
]

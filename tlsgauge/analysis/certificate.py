"""Leaf certificate summary for negotiated handshakes."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from ..core.models import CertificateSummary
from ..core.utils import maybe_import

logger = logging.getLogger(__name__)


_KEY_TYPES = (
    ("rsa", "RSAPublicKey", "RSA"),
    ("ec", "EllipticCurvePublicKey", "ECDSA"),
    ("dsa", "DSAPublicKey", "DSA"),
    ("ed25519", "Ed25519PublicKey", "Ed25519"),
)


def _key_type(public_key: object) -> str:
    for module_name, class_name, label in _KEY_TYPES:
        module = maybe_import(f"cryptography.hazmat.primitives.asymmetric.{module_name}")
        cls = getattr(module, class_name, None)
        if cls is not None and isinstance(public_key, cls):
            return label
    return "Unknown"


def summarize(der: bytes, now: Optional[datetime] = None) -> Optional[CertificateSummary]:
    """Summarise a DER certificate; ``None`` without ``cryptography`` or on bad input."""

    if not der:
        return None
    x509 = maybe_import("cryptography.x509")
    if x509 is None:
        return None

    try:
        cert = x509.load_der_x509_certificate(der)
    except ValueError as exc:
        logger.debug("Could not decode peer certificate: %s", exc)
        return None

    not_after = getattr(cert, "not_valid_after_utc", None)
    if not_after is None:  # pragma: no cover - cryptography < 42
        not_after = cert.not_valid_after.replace(tzinfo=timezone.utc)
    current = now or datetime.now(tz=timezone.utc)
    public_key = cert.public_key()
    sig_hash = cert.signature_hash_algorithm

    return CertificateSummary(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        not_after=not_after,
        days_remaining=int((not_after - current).total_seconds() // 86400),
        key_type=_key_type(public_key),
        key_size=getattr(public_key, "key_size", None),
        signature_algorithm=sig_hash.name if sig_hash else None,
    )


__all__ = ["summarize"]

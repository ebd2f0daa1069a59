"""Cipher suite name decomposition.

Each attribute is decided by an ordered rule table and the first matching rule
wins. More specific patterns precede the patterns they contain, so ``ECDHE``
is tested before ``DHE`` and the AES-256 spellings before the AES-128 ones.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from ..core.models import (
    BulkCipher,
    CipherDescriptor,
    CipherStrength,
    KeyExchange,
    MacMode,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Rule = Tuple[Callable[[str], bool], T]


def _contains(*markers: str) -> Callable[[str], bool]:
    return lambda name: any(marker in name for marker in markers)


def is_tls13_suite(name: str) -> bool:
    """TLS 1.3 suites (``TLS_AES_128_GCM_SHA256``) omit the key exchange."""

    upper = name.upper()
    return upper.startswith("TLS_") and "_WITH_" not in upper


def _static_rsa(name: str) -> bool:
    """RSA key transport; static ECDH suites also carry RSA in their name."""

    return "RSA" in name and not any(marker in name for marker in ("ECDH", "DHE"))


KEY_EXCHANGE_RULES: Sequence[Rule[KeyExchange]] = (
    (_contains("ECDHE"), KeyExchange.ECDHE),
    (_contains("DHE"), KeyExchange.DHE),
    (_static_rsa, KeyExchange.RSA),
    (is_tls13_suite, KeyExchange.ECDHE),
)

BULK_CIPHER_RULES: Sequence[Rule[BulkCipher]] = (
    (_contains("AES256", "AES_256", "AES-256"), BulkCipher.AES256),
    (_contains("AES128", "AES_128", "AES-128"), BulkCipher.AES128),
    (_contains("CHACHA20"), BulkCipher.CHACHA20),
)

MAC_RULES: Sequence[Rule[MacMode]] = (
    (_contains("GCM", "POLY1305", "CCM"), MacMode.AEAD),
    (_contains("SHA384"), MacMode.SHA384),
    (_contains("SHA256"), MacMode.SHA256),
    (_contains("SHA"), MacMode.SHA1),
)

LEGACY_MARKERS: Sequence[str] = ("RC4", "DES", "3DES", "MD5", "NULL", "EXPORT")

_STRONG_BULK = (BulkCipher.AES256, BulkCipher.CHACHA20)


def _first_match(rules: Sequence[Rule[T]], name: str) -> Optional[T]:
    for predicate, value in rules:
        if predicate(name):
            return value
    return None


def classify_strength(
    name: str,
    *,
    forward_secrecy: bool,
    bulk: BulkCipher,
    mac: MacMode,
) -> CipherStrength:
    upper = name.upper()
    if bulk is BulkCipher.UNKNOWN or any(marker in upper for marker in LEGACY_MARKERS):
        return CipherStrength.WEAK
    if forward_secrecy and bulk in _STRONG_BULK and mac is MacMode.AEAD:
        return CipherStrength.STRONG
    return CipherStrength.MEDIUM


def analyze(raw_name: str) -> CipherDescriptor:
    """Decompose a cipher suite name; unknown names yield ``UNKNOWN`` fields."""

    name = (raw_name or "").strip().upper()
    key_exchange = _first_match(KEY_EXCHANGE_RULES, name) or KeyExchange.UNKNOWN
    bulk = _first_match(BULK_CIPHER_RULES, name) or BulkCipher.UNKNOWN
    mac = _first_match(MAC_RULES, name) or MacMode.UNKNOWN
    forward_secrecy = key_exchange in (KeyExchange.ECDHE, KeyExchange.DHE) or is_tls13_suite(name)

    descriptor = CipherDescriptor(
        raw_name=raw_name or "",
        key_exchange=key_exchange,
        bulk_cipher=bulk,
        mac_mode=mac,
        has_forward_secrecy=forward_secrecy,
        strength=classify_strength(name, forward_secrecy=forward_secrecy, bulk=bulk, mac=mac),
    )
    if descriptor.degraded:
        logger.warning("Unrecognised cipher suite %r; classified as UNKNOWN", raw_name)
    return descriptor


__all__ = [
    "BULK_CIPHER_RULES",
    "KEY_EXCHANGE_RULES",
    "LEGACY_MARKERS",
    "MAC_RULES",
    "analyze",
    "classify_strength",
    "is_tls13_suite",
]

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from tlsgauge.analysis.certificate import summarize

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _self_signed(days_valid: int) -> bytes:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(NOW - timedelta(days=1))
        .not_valid_after(NOW + timedelta(days=days_valid))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.DER)


def test_summarize_self_signed_certificate() -> None:
    summary = summarize(_self_signed(30), now=NOW)
    assert summary is not None
    assert summary.subject == "CN=localhost"
    assert summary.issuer == "CN=localhost"
    assert summary.days_remaining == 30
    assert summary.key_type == "ECDSA"
    assert summary.key_size == 256
    assert summary.signature_algorithm == "sha256"
    assert summary.as_dict()["notAfter"].startswith("2024-05-31")


def test_expired_certificate_has_negative_days() -> None:
    summary = summarize(_self_signed(0), now=NOW + timedelta(days=3))
    assert summary is not None
    assert summary.days_remaining is not None
    assert summary.days_remaining < 0


def test_empty_or_garbage_input_yields_none() -> None:
    assert summarize(b"") is None
    assert summarize(b"not a certificate") is None

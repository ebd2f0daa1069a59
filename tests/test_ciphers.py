import pytest

from tlsgauge.analysis.ciphers import BULK_CIPHER_RULES, analyze, is_tls13_suite
from tlsgauge.core.models import BulkCipher, CipherStrength, KeyExchange, MacMode


def test_ecdhe_aes256_gcm_is_strong() -> None:
    d = analyze("ECDHE-RSA-AES256-GCM-SHA384")
    assert d.key_exchange is KeyExchange.ECDHE
    assert d.bulk_cipher is BulkCipher.AES256
    assert d.mac_mode is MacMode.AEAD
    assert d.has_forward_secrecy is True
    assert d.strength is CipherStrength.STRONG


def test_rc4_md5_is_weak() -> None:
    d = analyze("RC4-MD5")
    assert d.bulk_cipher is BulkCipher.UNKNOWN
    assert d.strength is CipherStrength.WEAK


def test_dhe_is_not_mistaken_for_ecdhe() -> None:
    d = analyze("DHE-RSA-AES256-GCM-SHA384")
    assert d.key_exchange is KeyExchange.DHE
    assert d.has_forward_secrecy is True
    assert d.strength is CipherStrength.STRONG


def test_aes128_is_not_classified_as_aes256() -> None:
    d = analyze("ECDHE-RSA-AES128-GCM-SHA256")
    assert d.bulk_cipher is BulkCipher.AES128
    assert d.strength is CipherStrength.MEDIUM


def test_aes256_patterns_precede_aes128_patterns() -> None:
    bulk_order = [value for _, value in BULK_CIPHER_RULES]
    assert bulk_order.index(BulkCipher.AES256) < bulk_order.index(BulkCipher.AES128)


@pytest.mark.parametrize(
    "name, bulk, strength",
    [
        ("TLS_AES_256_GCM_SHA384", BulkCipher.AES256, CipherStrength.STRONG),
        ("TLS_CHACHA20_POLY1305_SHA256", BulkCipher.CHACHA20, CipherStrength.STRONG),
        ("TLS_AES_128_GCM_SHA256", BulkCipher.AES128, CipherStrength.MEDIUM),
    ],
)
def test_tls13_suites_imply_forward_secrecy(
    name: str, bulk: BulkCipher, strength: CipherStrength
) -> None:
    d = analyze(name)
    assert d.key_exchange is KeyExchange.ECDHE
    assert d.has_forward_secrecy is True
    assert d.mac_mode is MacMode.AEAD
    assert d.bulk_cipher is bulk
    assert d.strength is strength


def test_iana_rsa_suite_is_not_treated_as_tls13() -> None:
    assert not is_tls13_suite("TLS_RSA_WITH_AES_128_CBC_SHA")
    d = analyze("TLS_RSA_WITH_AES_128_CBC_SHA")
    assert d.key_exchange is KeyExchange.RSA
    assert d.has_forward_secrecy is False
    assert d.mac_mode is MacMode.SHA1
    assert d.strength is CipherStrength.MEDIUM


@pytest.mark.parametrize(
    "name, mac",
    [
        ("ECDHE-RSA-AES256-SHA384", MacMode.SHA384),
        ("ECDHE-RSA-AES128-SHA256", MacMode.SHA256),
        ("ECDHE-RSA-AES128-SHA", MacMode.SHA1),
        ("ECDHE-ECDSA-AES128-CCM", MacMode.AEAD),
    ],
)
def test_mac_mode(name: str, mac: MacMode) -> None:
    assert analyze(name).mac_mode is mac


@pytest.mark.parametrize(
    "name",
    ["DES-CBC3-SHA", "ECDHE-RSA-NULL-SHA", "TLS_RSA_EXPORT_WITH_RC4_40_MD5", "EXP-RC4-MD5"],
)
def test_legacy_markers_are_weak(name: str) -> None:
    assert analyze(name).strength is CipherStrength.WEAK


def test_plain_rsa_cbc_suite_is_medium() -> None:
    d = analyze("AES256-SHA")
    assert d.key_exchange is KeyExchange.UNKNOWN
    assert d.has_forward_secrecy is False
    assert d.strength is CipherStrength.MEDIUM


def test_names_are_case_insensitive_and_raw_name_kept() -> None:
    d = analyze("ecdhe-ecdsa-chacha20-poly1305")
    assert d.raw_name == "ecdhe-ecdsa-chacha20-poly1305"
    assert d.strength is CipherStrength.STRONG


@pytest.mark.parametrize("name", ["", "   ", "totally-made-up", "☃", "-_-"])
def test_unknown_names_never_raise(name: str) -> None:
    d = analyze(name)
    assert d.key_exchange is KeyExchange.UNKNOWN
    assert d.bulk_cipher is BulkCipher.UNKNOWN
    assert d.mac_mode is MacMode.UNKNOWN
    assert d.strength is not CipherStrength.STRONG
    assert d.degraded


def test_unknown_name_logs_degradation(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="tlsgauge"):
        analyze("MYSTERY")
    assert "Unrecognised cipher suite" in caplog.text


@pytest.mark.parametrize("name", ["ECDH-RSA-AES256-GCM-SHA384", "ECDH-ECDSA-AES128-SHA256"])
def test_static_ecdh_is_not_rsa_key_exchange(name: str) -> None:
    d = analyze(name)
    assert d.key_exchange is KeyExchange.UNKNOWN
    assert d.has_forward_secrecy is False
    assert d.strength is not CipherStrength.STRONG

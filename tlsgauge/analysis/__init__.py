"""Cipher classification, scoring and remediation rules."""

from .certificate import summarize as summarize_certificate
from .ciphers import analyze as analyze_cipher
from .recommendations import recommend
from .scoring import grade, score

__all__ = ["analyze_cipher", "grade", "recommend", "score", "summarize_certificate"]

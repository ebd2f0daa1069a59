"""tlsgauge core package."""

from .core.models import (
    CipherDescriptor,
    ProbeTarget,
    ProtocolProbeResult,
    ProtocolVersion,
    Recommendation,
    SecurityAssessment,
)
from .core.pipeline import assess, assess_many

__all__ = [
    "CipherDescriptor",
    "ProbeTarget",
    "ProtocolProbeResult",
    "ProtocolVersion",
    "Recommendation",
    "SecurityAssessment",
    "assess",
    "assess_many",
]

__version__ = "0.1.0"

"""JSON reporting."""
from __future__ import annotations

from typing import Sequence

from ..core.models import SecurityAssessment
from ..core.utils import json_dump, now_utc


def to_dict(assessments: Sequence[SecurityAssessment]) -> dict[str, object]:
    return {
        "generatedAt": now_utc().isoformat(),
        "assessments": [assessment.as_dict() for assessment in assessments],
    }


def to_json(assessments: Sequence[SecurityAssessment]) -> str:
    """Serialize assessments to JSON."""

    return json_dump(to_dict(assessments))


__all__ = ["to_dict", "to_json"]

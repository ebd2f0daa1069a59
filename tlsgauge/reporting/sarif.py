"""SARIF output generation."""
from __future__ import annotations

from typing import Sequence

from ..core.models import Priority, Recommendation, SecurityAssessment
from ..core.utils import json_dump, now_utc

_PRIORITY_TO_LEVEL = {
    Priority.CRITICAL: "error",
    Priority.HIGH: "error",
    Priority.MEDIUM: "warning",
    Priority.LOW: "note",
}


def _rule_id(rec: Recommendation) -> str:
    return f"TLS-{rec.related_finding.upper().replace('_', '-')}"


def to_sarif(assessments: Sequence[SecurityAssessment]) -> str:
    """Convert assessments into SARIF v2.1.0 format."""

    rules: dict[str, dict[str, object]] = {}
    sarif_results = []
    for assessment in assessments:
        for rec in assessment.recommendations:
            rule_id = _rule_id(rec)
            rules.setdefault(
                rule_id,
                {
                    "id": rule_id,
                    "name": rec.related_finding,
                    "shortDescription": {"text": rec.message},
                },
            )
            sarif_results.append(
                {
                    "ruleId": rule_id,
                    "level": _PRIORITY_TO_LEVEL[rec.priority],
                    "message": {"text": f"{assessment.target.locator}: {rec.message}"},
                    "properties": {
                        "priority": rec.priority.value,
                        "target": assessment.target.locator,
                        "securityScore": assessment.security_score,
                        "securityLevel": assessment.security_level.value,
                    },
                }
            )

    sarif = {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "tlsgauge",
                        "rules": list(rules.values()),
                    }
                },
                "results": sarif_results,
                "invocations": [
                    {
                        "executionSuccessful": True,
                        "endTimeUtc": now_utc().isoformat(),
                    }
                ],
                "properties": {
                    "targets": [a.target.locator for a in assessments],
                },
            }
        ],
    }
    return json_dump(sarif)


__all__ = ["to_sarif"]

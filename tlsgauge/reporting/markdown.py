"""Markdown reporting."""
from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from ..core.models import ProtocolProbeResult, SecurityAssessment


def _status(result: ProtocolProbeResult) -> str:
    if result.supported:
        return "Supported"
    if result.failure_kind is None:
        return "Not supported"
    return result.failure_kind.value.replace("_", " ").title()


def _protocol_table(results: Sequence[ProtocolProbeResult]) -> List[str]:
    lines = ["| Protocol | Status | Cipher | Strength |", "| --- | --- | --- | --- |"]
    for result in results:
        cipher = result.negotiated_cipher
        lines.append(
            f"| {result.version.label} | {_status(result)} | "
            f"{cipher.raw_name if cipher else '-'} | "
            f"{cipher.strength.value if cipher else '-'} |"
        )
    return lines


def _section(assessment: SecurityAssessment) -> List[str]:
    lines: List[str] = [f"## {assessment.target.locator}", ""]
    if assessment.unreachable:
        lines.extend(
            [
                "**Target unreachable.** No handshake could be attempted, so the score below "
                "says nothing about the TLS configuration.",
                "",
            ]
        )
    lines.extend(
        [
            f"- **Score:** {assessment.security_score}/100 (grade {assessment.grade})",
            f"- **Security level:** {assessment.security_level.value}",
            f"- **Assessed at:** {assessment.timestamp.isoformat()}",
        ]
    )
    if assessment.certificate is not None:
        cert = assessment.certificate
        lines.append(f"- **Certificate:** {cert.subject} (issuer {cert.issuer})")
        if cert.days_remaining is not None:
            lines.append(f"- **Certificate expires in:** {cert.days_remaining} days")
    lines.extend(["", "### Protocols", ""])
    lines.extend(_protocol_table(assessment.protocol_results))
    lines.extend(["", "### Recommendations", ""])
    for index, rec in enumerate(assessment.recommendations, start=1):
        lines.append(f"{index}. **{rec.priority.value}:** {rec.message}")
    lines.append("")
    return lines


def to_markdown(assessments: Sequence[SecurityAssessment]) -> str:
    """Render assessments to a Markdown report."""

    counts = Counter(a.security_level.value for a in assessments)
    lines: List[str] = ["# TLS Security Posture Report", "", "## Overview"]
    for level in ["HIGH", "MEDIUM", "LOW"]:
        lines.append(f"- **{level}:** {counts.get(level, 0)} targets")
    unreachable = sum(1 for a in assessments if a.unreachable)
    if unreachable:
        lines.append(f"- **Unreachable:** {unreachable} targets")
    lines.append("")
    if not assessments:
        lines.append("No targets were assessed.")
    for assessment in assessments:
        lines.extend(_section(assessment))
    return "\n".join(lines)


__all__ = ["to_markdown"]

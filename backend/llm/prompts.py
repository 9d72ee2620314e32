"""
Prompt Templates

Prompts for enriching security metric insights with Ollama.
"""

from schemas.insights import Insight, InsightSeverity


SYSTEM_PROMPT = """You are a cybersecurity metrics analyst. Provide concise, actionable insights based on security metrics data. Be specific and avoid generic advice."""


NARRATIVE_SYSTEM_PROMPT = """You are a cybersecurity metrics analyst. Identify patterns and connections between security metrics."""


INSIGHT_ENHANCEMENT_PROMPT = """Analyze this security metric insight and provide:

1. **Enhanced Summary** (2-3 sentences): a contextual, business-focused explanation of
   - what this insight means in practical terms
   - why it matters for security posture
   - the business impact or risk implications

2. **Actionable Recommendations** (3-4 specific recommendations) that
   - address the root cause or contributing factors
   - are specific to security operations
   - include both immediate actions and longer-term improvements
   - consider the severity level

**Insight Details:**
- Type: {type}
- Title: {title}
- Current Summary: {summary}
- Severity: {severity}
{details}

**Response Format (JSON only, no markdown):**
{{
  "enhancedSummary": "Your enhanced 2-3 sentence explanation here",
  "recommendations": [
    "Specific actionable recommendation 1",
    "Specific actionable recommendation 2",
    "Specific actionable recommendation 3"
  ]
}}"""


NARRATIVE_PROMPT = """Analyze these security metric insights and identify:

1. **Patterns or Connections**: How do these metrics relate to each other? Are there common root causes?
2. **Strategic Context**: What do these insights collectively tell us about the security posture?
3. **Holistic Recommendations**: What actions would address multiple issues simultaneously?

**Insights to Analyze:**
{insights}

**Response Format (JSON array only, no markdown):**
[
  {{
    "title": "Clear, descriptive title connecting the insights",
    "summary": "2-3 sentence explanation of how these metrics connect and what they indicate about overall security posture",
    "recommendations": [
      "Strategic recommendation that addresses multiple issues",
      "Another strategic recommendation"
    ]
  }}
]

Provide 1-2 narrative insights that synthesize these findings into actionable strategic guidance."""


def _detail_lines(insight: Insight) -> list[str]:
    lines = []
    if insight.metric_keys:
        lines.append(f"- Metrics affected: {', '.join(str(m) for m in insight.metric_keys)}")

    evidence = insight.evidence
    if evidence is not None:
        if evidence.values:
            points = ", ".join(f"{p.month}: {p.value:g}" for p in evidence.values)
            lines.append(f"- Evidence: {points}")
        if evidence.z_score is not None:
            strength = "significant deviation" if abs(evidence.z_score) > 2 else "moderate deviation"
            lines.append(f"- Z-Score: {evidence.z_score:.2f} ({strength})")
        if evidence.change_pct is not None:
            lines.append(f"- Change: {evidence.change_pct:+.1f}%")

    if insight.period is not None:
        lines.append(f"- Period: {insight.period.start} to {insight.period.end}")
    return lines


def build_enhancement_prompt(insight: Insight) -> str:
    """Per-insight prompt asking for a JSON object."""
    severity = insight.severity.value if insight.severity else InsightSeverity.INFO.value
    return INSIGHT_ENHANCEMENT_PROMPT.format(
        type=insight.type.value,
        title=insight.title,
        summary=insight.summary,
        severity=severity,
        details="\n".join(_detail_lines(insight)),
    )


def build_narrative_prompt(insights: list[Insight], limit: int = 5) -> str:
    """Cross-metric prompt over critical insights first, then warnings."""
    critical = [i for i in insights if i.severity == InsightSeverity.CRITICAL]
    warning = [i for i in insights if i.severity == InsightSeverity.WARNING]

    lines = []
    for insight in (critical + warning)[:limit]:
        metrics = ""
        if insight.metric_keys:
            metrics = f" [Metrics: {', '.join(str(m) for m in insight.metric_keys)}]"
        lines.append(f"- {insight.title} ({insight.severity.value}): {insight.summary}{metrics}")

    return NARRATIVE_PROMPT.format(insights="\n".join(lines))

"""
Security Metric Catalog

Names and units of the metrics tracked by the reference deployment.
The engine treats metric numbers as an open space; numbers outside the
catalog are reported under a generic name.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class MetricDefinition:
    number: int
    name: str
    description: str
    unit: str


METRIC_DEFINITIONS: tuple[MetricDefinition, ...] = (
    MetricDefinition(1, "Critical systems security coverage",
                     "Percentage of critical systems with security coverage", "%"),
    MetricDefinition(2, "Security incidents resolved",
                     "Number of security incidents resolved within SLA", "count"),
    MetricDefinition(3, "Vulnerability remediation time",
                     "Average time to remediate critical vulnerabilities", "hours"),
    MetricDefinition(4, "Security awareness training completion",
                     "Percentage of staff who completed security awareness training", "%"),
    MetricDefinition(5, "Phishing simulation click rate",
                     "Percentage of staff who clicked on phishing simulation emails", "%"),
    MetricDefinition(6, "Security control effectiveness",
                     "Percentage of security controls operating effectively", "%"),
    MetricDefinition(7, "Mean time to detect (MTTD)",
                     "Average time to detect security incidents", "hours"),
    MetricDefinition(8, "Mean time to respond (MTTR)",
                     "Average time to respond to security incidents", "hours"),
    MetricDefinition(9, "Security policy compliance",
                     "Percentage of systems compliant with security policies", "%"),
    MetricDefinition(10, "Third-party security assessments",
                     "Number of third-party security assessments completed", "count"),
    MetricDefinition(11, "Security budget utilization",
                     "Percentage of security budget utilized", "%"),
)

_BY_NUMBER = {m.number: m for m in METRIC_DEFINITIONS}


def get_metric_name(metric_number: int) -> str:
    """Catalog name for a metric, or a generic label for unknown numbers."""
    definition = _BY_NUMBER.get(metric_number)
    if definition is None:
        return f"Metric {metric_number}"
    return definition.name


def get_metric_names_map() -> dict[int, str]:
    return {m.number: m.name for m in METRIC_DEFINITIONS}

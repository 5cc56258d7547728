"""Reference thresholds for Core Web Vitals (https://web.dev/vitals/)"""

from typing import Dict

# value <= good is "good", value <= poor is "needs-improvement", above is "poor"
VITAL_THRESHOLDS: Dict[str, Dict[str, float]] = {
    "LCP": {"good": 2500, "poor": 4000},
    "FID": {"good": 100, "poor": 300},
    "CLS": {"good": 0.1, "poor": 0.25},
    "FCP": {"good": 1800, "poor": 3000},
    "TTFB": {"good": 800, "poor": 1800},
}

KNOWN_METRICS = tuple(VITAL_THRESHOLDS)


def normalize_metric_name(name: str) -> str:
    return name.upper()


def rating_for_metric(name: str, value: float) -> str:
    """Rate a value against the thresholds for a metric, or "unknown" if none exist"""
    thresholds = VITAL_THRESHOLDS.get(normalize_metric_name(name))
    if thresholds is None:
        return "unknown"

    if value <= thresholds["good"]:
        return "good"
    if value <= thresholds["poor"]:
        return "needs-improvement"
    return "poor"

"""Services for the Web Vitals API"""

from .thresholds import KNOWN_METRICS, VITAL_THRESHOLDS, rating_for_metric
from .vitals_service import REPORT_PERIODS, VitalsService

__all__ = [
    "KNOWN_METRICS",
    "REPORT_PERIODS",
    "VITAL_THRESHOLDS",
    "VitalsService",
    "rating_for_metric",
]

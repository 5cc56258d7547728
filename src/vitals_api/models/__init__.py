"""Models for the Web Vitals API"""

from .events import RATING_CLASSES, MetricEvent, Rating
from .summary import (
    IngestResponse,
    MetricAggregate,
    MetricReport,
    PeriodReportResponse,
    ReportPeriod,
    SummaryMetrics,
    SummaryPeriod,
    SummaryResponse,
    TrendPoint,
)

__all__ = [
    "RATING_CLASSES",
    "MetricEvent",
    "Rating",
    "IngestResponse",
    "MetricAggregate",
    "MetricReport",
    "PeriodReportResponse",
    "ReportPeriod",
    "SummaryMetrics",
    "SummaryPeriod",
    "SummaryResponse",
    "TrendPoint",
]

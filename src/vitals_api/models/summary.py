"""
Models for aggregated Web Vitals responses
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class IngestResponse(BaseModel):
    """Acknowledgement for a stored sample"""

    success: bool = Field(default=True, description="Whether the sample was stored")


class MetricAggregate(BaseModel):
    """Average and rating breakdown for one metric"""

    average: float = Field(..., description="Arithmetic mean of sample values")
    count: int = Field(..., description="Number of samples averaged")
    rating: str = Field(..., description="Threshold rating of the average")
    ratings: Dict[str, int] = Field(
        default_factory=dict,
        description="Number of stored samples per reported rating class",
    )


class SummaryPeriod(BaseModel):
    start: str = Field(..., description="Resolved start instant (ISO)")
    end: str = Field(..., description="Resolved end instant (ISO)")


class SummaryMetrics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(..., description="Number of samples considered")
    averages: Dict[str, MetricAggregate] = Field(default_factory=dict)
    by_page: Dict[str, Dict[str, MetricAggregate]] = Field(default_factory=dict, alias="byPage")


class SummaryResponse(BaseModel):
    """Response for the summary endpoint"""

    period: SummaryPeriod
    metrics: SummaryMetrics
    pages: int = Field(..., description="Number of distinct pages observed")


class TrendPoint(BaseModel):
    date: str = Field(..., description="Calendar day (YYYY-MM-DD)")
    average: float


class MetricReport(BaseModel):
    """Per-metric figures for the period report"""

    model_config = ConfigDict(populate_by_name=True)

    average: float
    count: int
    good: float = Field(..., description="Percentage of rated samples rated good")
    needs_improvement: float = Field(..., alias="needsImprovement")
    poor: float
    trend: List[TrendPoint] = Field(default_factory=list)


class ReportPeriod(BaseModel):
    start: str = Field(..., description="First day of the period (YYYY-MM-DD)")
    end: str = Field(..., description="Last day of the period (YYYY-MM-DD)")


class PeriodReportResponse(BaseModel):
    """Response for the period report endpoint"""

    period: ReportPeriod
    total: int
    metrics: Dict[str, MetricReport] = Field(default_factory=dict)

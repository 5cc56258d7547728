"""
Web Vitals Service

Validates incoming samples, appends them to the day log and builds
summaries over ranges of days.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from vitals_api.dates import ensure_utc, format_instant, iter_days, parse_instant, utcnow
from vitals_api.exceptions import StorageError, ValidationError
from vitals_api.models import (
    MetricEvent,
    MetricReport,
    PeriodReportResponse,
    ReportPeriod,
    SummaryMetrics,
    SummaryPeriod,
    SummaryResponse,
    TrendPoint,
)
from vitals_api.services.aggregation import (
    average,
    calculate_average_metrics,
    calculate_page_averages,
    filter_by_page,
    group_by_metric,
    rating_counts,
    rating_percentages,
)
from vitals_api.storage import DayLogInterface

logger = logging.getLogger(__name__)

REPORT_PERIODS: Dict[str, int] = {"7d": 7, "30d": 30, "90d": 90}


def _describe_errors(error: PydanticValidationError) -> str:
    parts = []
    for detail in error.errors():
        field = ".".join(str(loc) for loc in detail["loc"]) or "body"
        parts.append(f"{field}: {detail['msg']}")
    return "; ".join(parts)


class VitalsService:
    """Records Web Vitals samples and aggregates them"""

    def __init__(
        self,
        day_log: DayLogInterface,
        default_range_days: int = 7,
        max_range_days: int = 366,
    ):
        self.day_log = day_log
        self.default_range_days = default_range_days
        self.max_range_days = max_range_days

    async def record_event(self, payload: Any, now: Optional[datetime] = None) -> MetricEvent:
        """
        Validate a sample payload and append it to today's store.

        Args:
            payload: Decoded JSON body
            now: Ingestion time; defaults to the current UTC time

        Returns:
            The stored sample, with its timestamp resolved

        Raises:
            ValidationError: if the payload is not a valid sample
            StorageError: if the day store cannot be read or written
        """
        if not isinstance(payload, dict):
            raise ValidationError("Metric payload must be a JSON object")

        try:
            event = MetricEvent.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(f"Incomplete metric data: {_describe_errors(e)}") from e

        now = ensure_utc(now) if now else utcnow()
        if event.timestamp is None:
            event = event.model_copy(update={"timestamp": now})

        day = now.date()
        count = await self.day_log.append(day, event)
        logger.info(f"Stored {event.name} sample {event.id} for {day.isoformat()} ({count} total)")
        return event

    def resolve_range(
        self,
        start: Optional[str],
        end: Optional[str],
        now: Optional[datetime] = None,
    ) -> Tuple[datetime, datetime]:
        """
        Resolve optional ISO date strings into a (start, end) pair of instants.

        Raises:
            ValidationError: if a date cannot be parsed or the range is too long
        """
        try:
            end_at = parse_instant(end) if end else (now or utcnow())
            start_at = parse_instant(start) if start else end_at - timedelta(days=self.default_range_days)
        except ValueError as e:
            raise ValidationError(f"Invalid dates: {e}") from e

        if (end_at.date() - start_at.date()).days >= self.max_range_days:
            raise ValidationError(f"Date range may span at most {self.max_range_days} days")

        return start_at, end_at

    async def load_days(self, start: date, end: date) -> List[Tuple[date, List[MetricEvent]]]:
        """
        Load every day store from start to end inclusive.

        A day that cannot be read is logged and contributes no samples.
        """
        days: List[Tuple[date, List[MetricEvent]]] = []
        for day in iter_days(start, end):
            try:
                loaded = await self.day_log.load_day(day)
            except StorageError as e:
                logger.warning(f"Skipping day {day.isoformat()}: {e.message}")
                continue
            if loaded.events:
                days.append((day, loaded.events))
        return days

    async def summarize(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        page: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SummaryResponse:
        """Average each metric over a date range, overall and per page"""
        start_at, end_at = self.resolve_range(start, end, now)

        events = [
            event
            for _, day_events in await self.load_days(start_at.date(), end_at.date())
            for event in day_events
        ]
        events = filter_by_page(events, page or None)
        by_page = calculate_page_averages(events)

        return SummaryResponse(
            period=SummaryPeriod(start=format_instant(start_at), end=format_instant(end_at)),
            metrics=SummaryMetrics(
                total=len(events),
                averages=calculate_average_metrics(events),
                by_page=by_page,
            ),
            pages=len(by_page),
        )

    async def period_report(self, period: str = "7d", now: Optional[datetime] = None) -> PeriodReportResponse:
        """
        Report averages, rating shares and a daily trend per metric
        for the last 7, 30 or 90 days.
        """
        if period not in REPORT_PERIODS:
            raise ValidationError(
                f"Invalid period: {period}. Must be one of: {', '.join(REPORT_PERIODS)}"
            )

        end_at = now or utcnow()
        start_at = end_at - timedelta(days=REPORT_PERIODS[period])
        days = await self.load_days(start_at.date(), end_at.date())

        events = [event for _, day_events in days for event in day_events]
        metrics: Dict[str, MetricReport] = {}
        for name, group in group_by_metric(events).items():
            shares = rating_percentages(rating_counts(group))
            trend = []
            for day, day_events in days:
                values = [event.value for event in group_by_metric(day_events).get(name, [])]
                if values:
                    trend.append(TrendPoint(date=day.isoformat(), average=average(values)))

            metrics[name] = MetricReport(
                average=average([event.value for event in group]),
                count=len(group),
                good=shares["good"],
                needs_improvement=shares["needs-improvement"],
                poor=shares["poor"],
                trend=trend,
            )

        return PeriodReportResponse(
            period=ReportPeriod(start=start_at.date().isoformat(), end=end_at.date().isoformat()),
            total=len(events),
            metrics=metrics,
        )

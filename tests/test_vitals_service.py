from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from tests.utils import sample
from vitals_api.exceptions import StorageError, ValidationError
from vitals_api.models import MetricEvent
from vitals_api.services import VitalsService
from vitals_api.storage import InMemoryDayLog

NOW = datetime(2024, 3, 3, 15, 0, tzinfo=timezone.utc)


class FlakyDayLog(InMemoryDayLog):
    """Fails to read one particular day"""

    def __init__(self, broken_day: date):
        super().__init__()
        self.broken_day = broken_day

    async def read_raw(self, day: date) -> Optional[bytes]:
        if day == self.broken_day:
            raise StorageError("disk error")
        return await super().read_raw(day)


async def store(day_log: InMemoryDayLog, day: date, *payloads: dict) -> None:
    for payload in payloads:
        await day_log.append(day, MetricEvent.model_validate(payload))


@pytest.fixture
def day_log() -> InMemoryDayLog:
    return InMemoryDayLog()


@pytest.fixture
def service(day_log: InMemoryDayLog) -> VitalsService:
    return VitalsService(day_log)


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["name", "id", "value"])
async def test_record_event_requires_name_id_and_value(service, day_log, missing):
    payload = sample("LCP", 1200.0)
    del payload[missing]

    with pytest.raises(ValidationError) as exc_info:
        await service.record_event(payload, now=NOW)

    assert missing in exc_info.value.message
    assert day_log.days() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        [sample("LCP", 1.0)],
        "LCP",
        {"name": "", "id": "a", "value": 1},
        {"name": "LCP", "id": "a", "value": "fast"},
        {"name": "LCP", "id": "a", "value": 1, "rating": "excellent"},
        {"name": "LCP", "id": "a", "value": 1, "timestamp": "yesterday"},
    ],
)
async def test_record_event_rejects_malformed_payloads(service, day_log, payload):
    with pytest.raises(ValidationError):
        await service.record_event(payload, now=NOW)

    assert day_log.days() == []


@pytest.mark.asyncio
async def test_record_event_resolves_timestamp_to_ingestion_time(service, day_log):
    stored = await service.record_event(sample("LCP", 1200.0, page="/home"), now=NOW)

    assert stored.timestamp == NOW
    loaded = await day_log.load_day(NOW.date())
    assert [e.id for e in loaded.events] == ["v3-LCP-1200.0"]
    assert loaded.events[0].timestamp == NOW


@pytest.mark.asyncio
async def test_record_event_keys_by_ingestion_day_not_sample_timestamp(service, day_log):
    await service.record_event(sample("CLS", 0.05, timestamp="2020-01-01T10:00:00Z"), now=NOW)

    assert day_log.days() == ["2024-03-03"]
    [event] = (await day_log.load_day(NOW.date())).events
    assert event.timestamp == datetime(2020, 1, 1, 10, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_record_event_appends_in_order(service, day_log):
    for value in (1.0, 2.0, 3.0, 4.0):
        await service.record_event(sample("FCP", value), now=NOW)

    loaded = await day_log.load_day(NOW.date())
    assert [e.value for e in loaded.events] == [1.0, 2.0, 3.0, 4.0]


@pytest.mark.asyncio
async def test_summarize_averages_over_range_with_missing_days(service, day_log):
    await store(day_log, date(2024, 3, 1), sample("LCP", 2.0), sample("CLS", 0.1))
    await store(day_log, date(2024, 3, 3), sample("LCP", 4.0))

    summary = await service.summarize(start="2024-03-01", end="2024-03-03")

    assert summary.period.start == "2024-03-01T00:00:00.000Z"
    assert summary.period.end == "2024-03-03T00:00:00.000Z"
    assert summary.metrics.total == 3
    assert summary.metrics.averages["LCP"].average == pytest.approx(3.0)
    assert summary.metrics.averages["CLS"].average == pytest.approx(0.1)


@pytest.mark.asyncio
async def test_summarize_default_range_is_seven_days_before_now(service, day_log):
    await store(day_log, date(2024, 2, 25), sample("LCP", 9999.0))
    await store(day_log, date(2024, 2, 26), sample("LCP", 1000.0))
    await store(day_log, date(2024, 3, 4), sample("LCP", 9999.0))

    summary = await service.summarize(now=NOW)

    assert summary.period.start == "2024-02-25T15:00:00.000Z"
    assert summary.period.end == "2024-03-03T15:00:00.000Z"
    assert summary.metrics.total == 2


@pytest.mark.asyncio
async def test_summarize_filters_by_page(service, day_log):
    await store(
        day_log,
        date(2024, 3, 2),
        sample("LCP", 1000.0, page="/home"),
        sample("LCP", 3000.0, page="/menu"),
        sample("CLS", 0.2, page="/home"),
    )

    summary = await service.summarize(start="2024-03-02", end="2024-03-02", page="/home")

    assert summary.metrics.total == 2
    assert summary.metrics.averages["LCP"].average == pytest.approx(1000.0)
    assert list(summary.metrics.by_page) == ["/home"]
    assert summary.pages == 1


@pytest.mark.asyncio
async def test_summarize_groups_by_page(service, day_log):
    await store(
        day_log,
        date(2024, 3, 2),
        sample("LCP", 1000.0, page="/home"),
        sample("LCP", 3000.0, page="/menu"),
        sample("LCP", 2000.0, page="/menu"),
    )

    summary = await service.summarize(start="2024-03-02", end="2024-03-02")

    assert summary.pages == 2
    assert summary.metrics.by_page["/menu"]["LCP"].average == pytest.approx(2500.0)
    assert summary.metrics.averages["LCP"].average == pytest.approx(2000.0)


@pytest.mark.asyncio
async def test_summarize_treats_corrupt_day_as_empty(service, day_log):
    await day_log.write_raw(date(2024, 3, 1), b"[{oops")
    await store(day_log, date(2024, 3, 2), sample("TTFB", 500.0))

    summary = await service.summarize(start="2024-03-01", end="2024-03-02")

    assert summary.metrics.total == 1


@pytest.mark.asyncio
async def test_summarize_skips_unreadable_day():
    day_log = FlakyDayLog(broken_day=date(2024, 3, 2))
    service = VitalsService(day_log)
    await store(day_log, date(2024, 3, 1), sample("LCP", 1000.0))
    await store(day_log, date(2024, 3, 3), sample("LCP", 2000.0))

    summary = await service.summarize(start="2024-03-01", end="2024-03-03")

    assert summary.metrics.total == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(("start", "end"), [("not-a-date", None), (None, "2024-13-45"), ("2024-03-01", "soon")])
async def test_summarize_rejects_unparseable_dates(service, start, end):
    with pytest.raises(ValidationError):
        await service.summarize(start=start, end=end, now=NOW)


@pytest.mark.asyncio
async def test_summarize_rejects_overlong_range():
    service = VitalsService(InMemoryDayLog(), max_range_days=30)

    with pytest.raises(ValidationError):
        await service.summarize(start="2024-01-01", end="2024-03-01")


@pytest.mark.asyncio
async def test_summarize_reversed_range_is_empty(service, day_log):
    await store(day_log, date(2024, 3, 2), sample("LCP", 1000.0))

    summary = await service.summarize(start="2024-03-03", end="2024-03-01")

    assert summary.metrics.total == 0
    assert summary.metrics.averages == {}
    assert summary.pages == 0


@pytest.mark.asyncio
async def test_period_report(service, day_log):
    await store(
        day_log,
        date(2024, 3, 1),
        sample("LCP", 2000.0, rating="good"),
        sample("LCP", 3000.0, rating="needs-improvement"),
    )
    await store(day_log, date(2024, 3, 3), sample("LCP", 4000.0, rating="good"), sample("CLS", 0.3, rating="poor"))

    report = await service.period_report("7d", now=NOW)

    assert report.period.start == "2024-02-25"
    assert report.period.end == "2024-03-03"
    assert report.total == 4

    lcp = report.metrics["LCP"]
    assert lcp.average == pytest.approx(3000.0)
    assert lcp.count == 3
    assert (lcp.good, lcp.needs_improvement, lcp.poor) == (66.7, 33.3, 0.0)
    assert [(p.date, p.average) for p in lcp.trend] == [("2024-03-01", 2500.0), ("2024-03-03", 4000.0)]
    assert report.metrics["CLS"].poor == 100.0


@pytest.mark.asyncio
async def test_period_report_rejects_unknown_period(service):
    with pytest.raises(ValidationError):
        await service.period_report("1y", now=NOW)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        '{"name": "LCP", "id": "a", "value": NaN}',
        '{"name": "LCP", "id": "a", "value": Infinity}',
        '{"name": "LCP", "id": "a", "value": -Infinity}',
        '{"name": "LCP", "id": "a", "value": 1e400}',
        '{"name": "LCP", "id": "a", "value": 1.0, "delta": NaN}',
    ],
)
async def test_record_event_rejects_non_finite_numbers(service, day_log, body):
    with pytest.raises(ValidationError):
        await service.record_event(json.loads(body), now=NOW)

    assert day_log.days() == []

"""
Aggregation of Web Vitals samples.

Pure functions over lists of samples; nothing here touches storage.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from vitals_api.models import RATING_CLASSES, MetricAggregate, MetricEvent
from vitals_api.services.thresholds import KNOWN_METRICS, normalize_metric_name, rating_for_metric

UNKNOWN_PAGE = "unknown"


def filter_by_page(events: List[MetricEvent], page: Optional[str]) -> List[MetricEvent]:
    """Keep samples recorded on exactly this page; no filter when page is None"""
    if page is None:
        return list(events)
    return [event for event in events if event.page == page]


def group_by_metric(events: Iterable[MetricEvent]) -> Dict[str, List[MetricEvent]]:
    """Group samples of known metrics by upper-cased metric name"""
    groups: Dict[str, List[MetricEvent]] = defaultdict(list)
    for event in events:
        key = normalize_metric_name(event.name)
        if key in KNOWN_METRICS:
            groups[key].append(event)
    return dict(groups)


def group_by_page(events: Iterable[MetricEvent]) -> Dict[str, List[MetricEvent]]:
    groups: Dict[str, List[MetricEvent]] = defaultdict(list)
    for event in events:
        groups[event.page if event.page is not None else UNKNOWN_PAGE].append(event)
    return dict(groups)


def average(values: List[float]) -> float:
    return sum(values) / len(values)


def rating_counts(events: Iterable[MetricEvent]) -> Dict[str, int]:
    """Count samples per rating class as reported by the browser"""
    counts = {rating: 0 for rating in RATING_CLASSES}
    for event in events:
        if event.rating is not None:
            counts[event.rating] += 1
    return counts


def calculate_average_metrics(events: Iterable[MetricEvent]) -> Dict[str, MetricAggregate]:
    """
    Average each known metric over the given samples.

    Metrics without samples are left out. The `rating` of each aggregate
    comes from the threshold table applied to the average, while `ratings`
    counts the ratings stored with the samples themselves.
    """
    result: Dict[str, MetricAggregate] = {}
    for name, group in group_by_metric(events).items():
        mean = average([event.value for event in group])
        result[name] = MetricAggregate(
            average=mean,
            count=len(group),
            rating=rating_for_metric(name, mean),
            ratings=rating_counts(group),
        )
    return result


def calculate_page_averages(events: Iterable[MetricEvent]) -> Dict[str, Dict[str, MetricAggregate]]:
    return {page: calculate_average_metrics(group) for page, group in group_by_page(events).items()}


def rating_percentages(counts: Dict[str, int]) -> Dict[str, float]:
    """Share of each rating class among rated samples, in percent"""
    rated = sum(counts.values())
    if not rated:
        return {rating: 0.0 for rating in counts}
    return {rating: round(count / rated * 100, 1) for rating, count in counts.items()}

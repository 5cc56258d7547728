#!/usr/bin/env python3
"""
Seed the day stores with synthetic Web Vitals samples.

Useful for trying the summary endpoints locally without a browser
reporting real samples.

Usage:
    vitals-seed --days 7 --per-day 50 --page / --page /restaurantes
"""

import argparse
import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Sequence
from uuid import uuid4

from vitals_api.dates import utcnow
from vitals_api.models import MetricEvent
from vitals_api.services.thresholds import KNOWN_METRICS, VITAL_THRESHOLDS, rating_for_metric
from vitals_api.settings import settings
from vitals_api.storage import DayLogInterface, JsonFileDayLog

DEFAULT_PAGES = ["/", "/restaurantes", "/busca"]


def synthetic_event(rng: random.Random, page: str, at: datetime) -> MetricEvent:
    """Build one plausible sample, centred around the "poor" threshold"""
    name = rng.choice(KNOWN_METRICS)
    value = round(rng.uniform(0, VITAL_THRESHOLDS[name]["poor"] * 1.25), 4)
    return MetricEvent(
        name=name,
        id=f"v3-{uuid4().hex[:16]}",
        value=value,
        delta=value,
        rating=rating_for_metric(name, value),
        navigation_type="navigate",
        page=page,
        user_agent="vitals-seed",
        timestamp=at,
    )


async def seed(
    day_log: DayLogInterface,
    days: int,
    per_day: int,
    pages: List[str],
    seed_value: Optional[int] = None,
    now: Optional[datetime] = None,
) -> int:
    """Append per_day samples to each of the last `days` days; returns the number written"""
    rng = random.Random(seed_value)
    now = now or utcnow()
    written = 0
    for offset in range(days):
        day_start = datetime.combine((now - timedelta(days=offset)).date(), datetime.min.time(), timezone.utc)
        for _ in range(per_day):
            at = day_start + timedelta(seconds=rng.randrange(24 * 60 * 60))
            await day_log.append(day_start.date(), synthetic_event(rng, rng.choice(pages), at))
            written += 1
    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Write synthetic Web Vitals samples")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir, help="Day store directory")
    parser.add_argument("--days", type=int, default=7, help="Number of days to fill, ending today")
    parser.add_argument("--per-day", type=int, default=25, help="Samples per day")
    parser.add_argument("--page", action="append", dest="pages", help="Page path (repeatable)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args(argv)

    if args.days < 1 or args.per_day < 1:
        print("Error: --days and --per-day must be positive")
        return 1

    written = asyncio.run(
        seed(
            JsonFileDayLog(args.data_dir),
            days=args.days,
            per_day=args.per_day,
            pages=args.pages or DEFAULT_PAGES,
            seed_value=args.seed,
        )
    )
    print(f"✓ Wrote {written} samples to {args.data_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Models for Web Vitals samples
"""

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from vitals_api.dates import ensure_utc, format_instant

Rating = Literal["good", "needs-improvement", "poor"]

RATING_CLASSES: tuple[str, ...] = ("good", "needs-improvement", "poor")


class MetricEvent(BaseModel):
    """A single performance sample reported by a browser"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="Metric identifier (LCP, FID, CLS, FCP, TTFB)")
    id: str = Field(..., min_length=1, description="Opaque sample identifier")
    value: float = Field(..., allow_inf_nan=False, description="Measured value")
    delta: Optional[float] = Field(default=None, allow_inf_nan=False, description="Change since the last report")
    rating: Optional[Rating] = Field(default=None, description="Rating assigned by the browser")
    navigation_type: Optional[str] = Field(
        default=None, alias="navigationType", description="Navigation type (navigate, reload, ...)"
    )
    page: Optional[str] = Field(default=None, description="Path the sample was recorded on")
    user_agent: Optional[str] = Field(default=None, alias="userAgent", description="Reporting user agent")
    timestamp: Optional[datetime] = Field(default=None, description="When the sample was taken")

    @field_validator("timestamp")
    @classmethod
    def _timestamp_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return format_instant(value) if value is not None else None

    def to_record(self) -> Dict[str, Any]:
        """Convert to the JSON shape written to day stores"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

from __future__ import annotations

from typing import Any


def sample(name: str, value: float, **extra: Any) -> dict[str, Any]:
    """Minimal valid sample payload; extra keys use wire names"""
    payload: dict[str, Any] = {"name": name, "id": f"v3-{name}-{value}", "value": value}
    payload.update(extra)
    return payload

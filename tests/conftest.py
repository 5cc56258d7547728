from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from vitals_api.main import app
from vitals_api.settings import settings


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "vitals"
    monkeypatch.setattr(settings, "data_dir", directory)
    return directory


@pytest.fixture
def client(data_dir: Path):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def write_day(data_dir: Path):
    def _write(day: date, content: list | str) -> Path:
        data_dir.mkdir(parents=True, exist_ok=True)
        path = data_dir / f"{day.isoformat()}.json"
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write

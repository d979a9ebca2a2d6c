from pathlib import Path

from correlate_engine.config import CorrelateSettings
from correlate_engine.schema import MEASUREMENT_CATEGORIES


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    settings = CorrelateSettings()

    assert settings.time_zone_offset_hours == 1.0
    assert settings.lookback_hours == 24.0
    assert settings.measurement_categories == MEASUREMENT_CATEGORIES
    assert settings.vw.binary == "vw"
    assert settings.vw.passes == 20


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CORRELATE_LOOKBACK_HOURS", "6")
    monkeypatch.setenv("CORRELATE_WORK_DIR", str(tmp_path / "vw"))
    monkeypatch.setenv("CORRELATE_VW__PASSES", "5")
    monkeypatch.setenv("CORRELATE_MEASUREMENT_CATEGORIES", '["mood", "weight"]')

    settings = CorrelateSettings()

    assert settings.lookback_hours == 6.0
    assert settings.work_dir == Path(tmp_path / "vw")
    assert settings.vw.passes == 5
    assert settings.measurement_categories == frozenset({"mood", "weight"})

"""Environment-driven settings for the correlation pipeline."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from correlate_engine.schema import MEASUREMENT_CATEGORIES


class VowpalWabbitSettings(BaseModel):
    binary: str = "vw"
    passes: int = 20
    timeout_s: Optional[float] = None


class CorrelateSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CORRELATE_", env_nested_delimiter="__", env_file=".env", extra="ignore"
    )

    time_zone_offset_hours: float = 1.0  # wall-clock offset from UTC of the spreadsheet and tracker exports
    lookback_hours: float = Field(default=24.0, ge=0)
    work_dir: Path = Path("./resources")  # model and cache files live here
    out_dir: Path = Path("./out")
    split_seed: Optional[int] = None
    measurement_categories: frozenset[str] = MEASUREMENT_CATEGORIES
    vw: VowpalWabbitSettings = VowpalWabbitSettings()

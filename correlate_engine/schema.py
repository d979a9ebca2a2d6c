"""Core data schema for tracked events and learning examples."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional


class Category(str, Enum):
    """Well-known event categories.

    Members compare equal to their string value, so categories coming from a
    spreadsheet that are not listed here are still plain activity categories.
    """

    BRAIN_FOG = "brain-fog"
    LIBIDO = "libido"
    EXTROVERSION = "extroversion"
    POOP = "poop"
    WEIGHT = "weight"
    MEDICAL = "medical"
    STROOP = "stroop"

    FOOD = "food"
    DRUG = "drug"
    SPORT = "sport"
    GOOGLE_FIT = "google-fit"
    EMFIT_QS = "emfit-qs"

    def __str__(self) -> str:
        return self.value


# Plain strings: Enum hashes by member name, which would break lookups of raw strings.
MEASUREMENT_CATEGORIES: frozenset[str] = frozenset(
    category.value
    for category in (
        Category.BRAIN_FOG,
        Category.LIBIDO,
        Category.EXTROVERSION,
        Category.POOP,
        Category.WEIGHT,
        Category.MEDICAL,
        Category.STROOP,
    )
)

AggregatedWindow = Mapping[str, Mapping[str, float]]


def canonicalize_token(value: str) -> str:
    """Trim and replace spaces with dashes; the trainer format splits on whitespace."""

    return str(value).strip().replace(" ", "-")


@dataclass(frozen=True)
class EventRecord:
    """Normalized event record used by all modules."""

    datetime: datetime
    category: str
    event: str
    value: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.category, Category):
            object.__setattr__(self, "category", self.category.value)


@dataclass(frozen=True)
class Example:
    """A measurement paired with the aggregated activities preceding it."""

    measurement: EventRecord
    window: AggregatedWindow

    @property
    def label(self) -> Optional[float]:
        return self.measurement.value

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import re

DEFAULT_MEAL_NAME = "Untitled"
_MEAL_TITLE_PATTERN = re.compile(
    r"\b(breakfast|lunch|dinner|brunch|snack)\b\s*:?\s*([^\s:].*)",
    flags=re.IGNORECASE,
)


class MealSlot(StrEnum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    BRUNCH = "Brunch"
    SNACK = "Snack"
    UNLABELED = "Unlabeled"


@dataclass(frozen=True)
class MealTag:
    slot: MealSlot
    name: str
    description: str | None
    has_distinct_description: bool


def extract_meal_tag(title: str | None, description: str | None = None) -> MealTag:
    cleaned_title = (title or "").strip()
    cleaned_description = (description or "").strip() or None

    match = _MEAL_TITLE_PATTERN.search(cleaned_title)
    if match:
        slot = MealSlot(match.group(1).title())
        name = match.group(2).strip()
    else:
        slot = MealSlot.UNLABELED
        name = cleaned_title or DEFAULT_MEAL_NAME

    return MealTag(
        slot=slot,
        name=name,
        description=cleaned_description,
        has_distinct_description=_is_distinct(cleaned_description, name, cleaned_title),
    )


def _is_distinct(description: str | None, name: str, title: str) -> bool:
    if not description:
        return False
    return description != name and description != title

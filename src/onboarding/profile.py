"""
Onboarding Profile Model.

The Profile is the single aggregate every onboarding screen reads and writes.
Answers accumulate into it one fragment at a time; nothing here checks
whether an answer is *good*, only how it is shaped.

Snapshot keys are camelCase so a stored profile round-trips with the
mobile client. Python attributes are snake_case.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping
import copy
import json

from .errors import UnknownProfileFieldError


class SubscriptionTier(Enum):
    """Account tiers."""
    FREE = "free"
    PREMIUM = "premium"


class PrimaryGoal(Enum):
    """Recognized primary goals (goals screen options)."""
    LOSE_WEIGHT = "lose-weight"
    GAIN_MUSCLE = "gain-muscle"
    IMPROVE_HEALTH = "improve-health"
    EAT_SMARTER = "eat-smarter"


# Diet options shown on the diet screen. Labels are free text, so this is
# a rendering hint rather than a whitelist.
DIET_OPTIONS = [
    "No specific diet",
    "Vegetarian",
    "Vegan",
    "Keto",
    "Paleo",
    "Pescatarian",
    "Gluten-Free",
    "Low-Carb",
    "Mediterranean",
    "Flexitarian",
    "Dairy-Free",
]


@dataclass
class Location:
    """Where the user is. City + country is enough; coordinates are optional."""
    city: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class MealTimings:
    """Time-of-day strings (e.g. "08:00") for the three daily meals."""
    breakfast: str | None = None
    lunch: str | None = None
    dinner: str | None = None


@dataclass
class MacroPreferences:
    """Macro split, usually grams or percent depending on the screen."""
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


# Nested value types, keyed by the Profile attribute that holds them
NESTED_TYPES: dict[str, type] = {
    "location": Location,
    "meal_timings": MealTimings,
    "macro_preferences": MacroPreferences,
}

LABEL_FIELDS = ("dietary_preferences", "preferred_cuisines", "allergies")


@dataclass
class Profile:
    """
    Accumulated onboarding answers and account state for one user.

    None means "not answered yet". For `allergies` the distinction matters:
    None is "never asked", [] is "explicitly declared no allergies".
    """
    # Authentication (unset until sign in)
    id: str | None = None
    email: str | None = None
    phone: str | None = None

    # Onboarding answers
    location: Location | None = None
    dietary_preferences: list[str] | None = None
    primary_goal: str | None = None
    meal_timings: MealTimings | None = None
    calorie_target: float | None = None
    macro_preferences: MacroPreferences | None = None
    preferred_cuisines: list[str] | None = None
    allergies: list[str] | None = None

    # App state
    onboarding_completed: bool = False
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    last_updated: datetime | None = None

    def copy(self) -> "Profile":
        """Deep copy, so callers can't reach back into a store."""
        return copy.deepcopy(self)

    def merge(self, fragment: Mapping[str, Any]) -> "Profile":
        """Return a new Profile with top-level fields from `fragment` replacing ours."""
        return self.apply(coerce_fragment(fragment))

    def apply(self, changes: Mapping[str, Any]) -> "Profile":
        """Like `merge`, for a fragment already run through `coerce_fragment`."""
        return replace(self, **copy.deepcopy(dict(changes)))

    def to_dict(self) -> dict:
        """Serialize to a camelCase dict, leaving out unset fields."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            key = SNAKE_TO_CAMEL[f.name]
            if f.name in NESTED_TYPES:
                value = {k: v for k, v in vars(value).items() if v is not None}
            elif isinstance(value, Enum):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, list):
                value = list(value)
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Profile":
        """Deserialize from a snapshot dict (camelCase or snake_case keys)."""
        return cls().merge(data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "Profile":
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))


PROFILE_FIELDS = tuple(f.name for f in fields(Profile))


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


SNAKE_TO_CAMEL = {name: _camel(name) for name in PROFILE_FIELDS}
CAMEL_TO_SNAKE = {camel: snake for snake, camel in SNAKE_TO_CAMEL.items()}


def _field_name(key: str) -> str:
    if key in PROFILE_FIELDS:
        return key
    if key in CAMEL_TO_SNAKE:
        return CAMEL_TO_SNAKE[key]
    raise UnknownProfileFieldError(key)


def _unique_labels(labels) -> list[str]:
    """Keep first occurrence of each label, preserving display order."""
    if isinstance(labels, (str, bytes)):
        raise TypeError(f"expected a list of labels, got {labels!r}")
    seen: list[str] = []
    for label in labels:
        if label not in seen:
            seen.append(label)
    return seen


def _coerce_value(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in NESTED_TYPES:
        nested_type = NESTED_TYPES[name]
        if isinstance(value, nested_type):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"{SNAKE_TO_CAMEL[name]} must be an object, got {value!r}")
        known = {f.name for f in fields(nested_type)}
        return nested_type(**{k: v for k, v in value.items() if k in known})
    if name in LABEL_FIELDS:
        return _unique_labels(value)
    if name == "subscription_tier":
        return SubscriptionTier(value)
    if name == "primary_goal" and isinstance(value, PrimaryGoal):
        return value.value
    if name == "last_updated":
        if isinstance(value, str):
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        # Naive timestamps are taken as UTC so they compare with the store clock
        if isinstance(value, datetime) and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
    return value


def coerce_fragment(fragment: Mapping[str, Any]) -> dict[str, Any]:
    """
    Normalize a partial profile into Profile attribute names and value types.

    Accepts either key style. Nested values may be dicts. Raises
    UnknownProfileFieldError for keys that are not Profile fields; value
    ranges are never checked.
    """
    coerced = {}
    for key, value in fragment.items():
        name = _field_name(key)
        coerced[name] = _coerce_value(name, value)
    return coerced

"""
Onboarding Forms - one per screen.

The checks a screen makes before it calls the store: required answers,
recognized goal values, normalized labels. Each form turns its answers into
a profile fragment with `to_fragment()`.

User-facing messages live here (not in the store or validators), matching
what the screens show.
"""

import logging

from pydantic import BaseModel, Field, field_validator, model_validator

from .profile import DIET_OPTIONS, PrimaryGoal

logger = logging.getLogger(__name__)


# =============================================================================
# Valid Options
# =============================================================================

GOAL_OPTIONS = [
    {"id": PrimaryGoal.LOSE_WEIGHT.value, "label": "Lose Weight"},
    {"id": PrimaryGoal.GAIN_MUSCLE.value, "label": "Gain Muscle"},
    {"id": PrimaryGoal.IMPROVE_HEALTH.value, "label": "Improve Health"},
    {"id": PrimaryGoal.EAT_SMARTER.value, "label": "Eat Smarter"},
]
VALID_GOAL_IDS = {g["id"] for g in GOAL_OPTIONS}

# Common allergens - suggestions only, custom entries are accepted
COMMON_ALLERGENS = [
    "peanuts",
    "tree nuts",
    "milk",
    "eggs",
    "wheat",
    "soy",
    "fish",
    "shellfish",
    "sesame",
]


def _clean_labels(v: list[str] | None) -> list[str]:
    """Strip, drop blanks, de-duplicate (first occurrence wins)."""
    if not v:
        return []
    cleaned: list[str] = []
    for label in v:
        if not label or not label.strip():
            continue
        label = label.strip()
        if label not in cleaned:
            cleaned.append(label)
    return cleaned


def _clean_text(v: str | None) -> str | None:
    if not isinstance(v, str):
        return v
    v = v.strip()
    return v or None


# =============================================================================
# Sign in
# =============================================================================

class SignInForm(BaseModel):
    """Sign in: email or phone, at least one."""

    email: str | None = None
    phone: str | None = None
    user_id: str | None = Field(default=None, description="Backend user id, if known")

    @field_validator("email", "phone", "user_id", mode="before")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return _clean_text(v)

    @model_validator(mode="after")
    def email_or_phone(self) -> "SignInForm":
        if not self.email and not self.phone:
            raise ValueError("Please enter either email or phone number")
        return self

    def to_fragment(self) -> dict:
        fragment = {"email": self.email, "phone": self.phone}
        if self.user_id:
            fragment["id"] = self.user_id
        return fragment


# =============================================================================
# Step forms
# =============================================================================

class LocationForm(BaseModel):
    """Location step. City + country is enough; coordinates are optional."""

    city: str | None = None
    country: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @field_validator("city", "country", mode="before")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return _clean_text(v)

    def to_fragment(self) -> dict:
        return {"location": self.model_dump()}


class DietForm(BaseModel):
    """Diet step: any number of labels, free text allowed."""

    dietary_preferences: list[str] = Field(default_factory=list)

    @field_validator("dietary_preferences", mode="before")
    @classmethod
    def normalize(cls, v: list[str]) -> list[str]:
        labels = _clean_labels(v)
        unknown = [d for d in labels if d not in DIET_OPTIONS]
        if unknown:
            # Accepted; logged so new options can be considered
            logger.info(f"Custom dietary preferences (accepted): {unknown}")
        return labels

    def toggle(self, label: str) -> "DietForm":
        """Select `label` if unselected, deselect it otherwise."""
        if label in self.dietary_preferences:
            selected = [d for d in self.dietary_preferences if d != label]
        else:
            selected = self.dietary_preferences + [label]
        return DietForm(dietary_preferences=selected)

    def to_fragment(self) -> dict:
        return {"dietary_preferences": list(self.dietary_preferences)}


class GoalForm(BaseModel):
    """Goals step: exactly one recognized goal."""

    primary_goal: str | None = Field(default=None, validate_default=True)

    @field_validator("primary_goal", mode="before")
    @classmethod
    def check_goal(cls, v: str | None) -> str:
        v = _clean_text(v)
        if not v:
            raise ValueError(
                "Please select your primary health goal to personalize your meal recommendations."
            )
        if v not in VALID_GOAL_IDS:
            raise ValueError("Please select a valid goal option.")
        return v

    def to_fragment(self) -> dict:
        return {"primary_goal": self.primary_goal}


class TimingsForm(BaseModel):
    """Meal timings step. Partial answers are allowed; the step needs all three."""

    breakfast: str | None = None
    lunch: str | None = None
    dinner: str | None = None

    @field_validator("breakfast", "lunch", "dinner", mode="before")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return _clean_text(v)

    def to_fragment(self) -> dict:
        return {"meal_timings": self.model_dump()}


class CaloriesForm(BaseModel):
    """Calorie target step. Range is left to the step predicate."""

    calorie_target: float

    def to_fragment(self) -> dict:
        return {"calorie_target": self.calorie_target}


class MacrosForm(BaseModel):
    """Macro preferences step."""

    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)

    def to_fragment(self) -> dict:
        return {"macro_preferences": self.model_dump()}


class CuisinesForm(BaseModel):
    """Cuisines step: labels, at least one needed for the step to pass."""

    preferred_cuisines: list[str] = Field(default_factory=list)

    @field_validator("preferred_cuisines", mode="before")
    @classmethod
    def normalize(cls, v: list[str]) -> list[str]:
        return _clean_labels(v)

    def to_fragment(self) -> dict:
        return {"preferred_cuisines": list(self.preferred_cuisines)}


class AllergiesForm(BaseModel):
    """Allergies step. Submitting an empty list means "no allergies"."""

    allergies: list[str] = Field(default_factory=list)

    @field_validator("allergies", mode="before")
    @classmethod
    def normalize_allergies(cls, v: list[str]) -> list[str]:
        """Normalize allergy names to lowercase."""
        return [a.lower() for a in _clean_labels(v)]

    def to_fragment(self) -> dict:
        # Deduplicate again after lowercasing ("Milk", "milk")
        return {"allergies": _clean_labels(self.allergies)}


STEP_FORMS: dict[str, type[BaseModel]] = {
    "location": LocationForm,
    "diet": DietForm,
    "goals": GoalForm,
    "timings": TimingsForm,
    "calories": CaloriesForm,
    "macros": MacrosForm,
    "cuisines": CuisinesForm,
    "allergies": AllergiesForm,
}


def validate_goal(value: str | None) -> tuple[bool, list[str]]:
    """
    Validate a goal selection with screen-ready error messages.

    Returns:
        (is_valid, error_messages)
    """
    errors = []
    value = _clean_text(value) if isinstance(value, str) else None
    if not value:
        errors.append("Please select your primary health goal to personalize your meal recommendations.")
    elif value not in VALID_GOAL_IDS:
        errors.append("Please select a valid goal option.")
    return (len(errors) == 0, errors)


# =============================================================================
# API Response Helpers
# =============================================================================

def get_form_options() -> dict:
    """
    Get all form options for frontend rendering.

    Returns dict with:
    - diets: Diet screen options
    - goals: Goal options (id + label)
    - allergens: Common allergen suggestions
    """
    return {
        "diets": list(DIET_OPTIONS),
        "goals": GOAL_OPTIONS,
        "allergens": COMMON_ALLERGENS,
    }

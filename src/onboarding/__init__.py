"""
NutriAI Onboarding.

Step-gated profile accumulation. Screens hand the store one fragment per
step; a predicate per step says whether that step is done, and a separate
completion gate decides when the user may enter the main app.

Steps (in screen order):
location, diet, goals, timings, calories, macros, cuisines, allergies
"""

from .completion import is_complete, missing_requirements
from .errors import (
    OnboardingError,
    OnboardingIncompleteError,
    SessionNotFoundError,
    UnknownProfileFieldError,
)
from .profile import (
    Location,
    MacroPreferences,
    MealTimings,
    PrimaryGoal,
    Profile,
    SubscriptionTier,
)
from .steps import OnboardingStep, validate_step
from .store import ProfileStore

__all__ = [
    "Location",
    "MacroPreferences",
    "MealTimings",
    "OnboardingError",
    "OnboardingIncompleteError",
    "OnboardingStep",
    "PrimaryGoal",
    "Profile",
    "ProfileStore",
    "SessionNotFoundError",
    "SubscriptionTier",
    "UnknownProfileFieldError",
    "is_complete",
    "missing_requirements",
    "validate_step",
]

"""
Onboarding Steps.

One pure predicate per step, each answering "has the profile satisfied this
step yet?". Predicates are independent: nothing here stops a caller asking
about `cuisines` before `location` is done. Ordering lives in the
navigation helpers at the bottom, which follow the screen order.
"""

import logging
from enum import Enum
from typing import Callable

from .profile import Profile

logger = logging.getLogger(__name__)


class OnboardingStep(Enum):
    """Onboarding steps, in navigation order."""
    LOCATION = "location"
    DIET = "diet"
    GOALS = "goals"
    TIMINGS = "timings"
    CALORIES = "calories"
    MACROS = "macros"
    CUISINES = "cuisines"
    ALLERGIES = "allergies"


STEP_ORDER = list(OnboardingStep)


# =============================================================================
# Predicates
# =============================================================================


def location_valid(profile: Profile) -> bool:
    loc = profile.location
    return bool(loc and loc.city and loc.country)


def diet_valid(profile: Profile) -> bool:
    return bool(profile.dietary_preferences)


def goals_valid(profile: Profile) -> bool:
    # Membership in PrimaryGoal is the goals form's job, not ours
    return bool(profile.primary_goal)


def timings_valid(profile: Profile) -> bool:
    t = profile.meal_timings
    return bool(t and t.breakfast and t.lunch and t.dinner)


def calories_valid(profile: Profile) -> bool:
    target = profile.calorie_target
    return isinstance(target, (int, float)) and target > 0


def macros_valid(profile: Profile) -> bool:
    # Only protein is checked; carbs and fat are not required
    return bool(profile.macro_preferences and profile.macro_preferences.protein)


def cuisines_valid(profile: Profile) -> bool:
    return bool(profile.preferred_cuisines)


def allergies_valid(profile: Profile) -> bool:
    # Explicitly empty counts: "no allergies" is an answer
    return profile.allergies is not None


STEP_VALIDATORS: dict[OnboardingStep, Callable[[Profile], bool]] = {
    OnboardingStep.LOCATION: location_valid,
    OnboardingStep.DIET: diet_valid,
    OnboardingStep.GOALS: goals_valid,
    OnboardingStep.TIMINGS: timings_valid,
    OnboardingStep.CALORIES: calories_valid,
    OnboardingStep.MACROS: macros_valid,
    OnboardingStep.CUISINES: cuisines_valid,
    OnboardingStep.ALLERGIES: allergies_valid,
}


def parse_step(key: "OnboardingStep | str") -> OnboardingStep | None:
    """Resolve a step key to an OnboardingStep, or None if unrecognized."""
    if isinstance(key, OnboardingStep):
        return key
    try:
        return OnboardingStep(key)
    except ValueError:
        return None


def validate_step(profile: Profile, step: "OnboardingStep | str") -> bool:
    """
    Check whether `profile` satisfies one onboarding step.

    Unrecognized keys fail closed: they return False and never raise.
    """
    resolved = parse_step(step)
    if resolved is None:
        logger.warning(f"Unknown onboarding step (treated as incomplete): {step!r}")
        return False
    return STEP_VALIDATORS[resolved](profile)


# =============================================================================
# Navigation helpers
# =============================================================================


def next_step(step: OnboardingStep) -> OnboardingStep | None:
    """Step after `step` in navigation order, or None after the last one."""
    idx = STEP_ORDER.index(step)
    if idx + 1 < len(STEP_ORDER):
        return STEP_ORDER[idx + 1]
    return None


def completed_steps(profile: Profile) -> list[OnboardingStep]:
    """Steps whose predicate currently holds, in navigation order."""
    return [step for step in STEP_ORDER if STEP_VALIDATORS[step](profile)]


def first_incomplete_step(profile: Profile) -> OnboardingStep | None:
    """Earliest step not yet satisfied, or None if all eight are."""
    for step in STEP_ORDER:
        if not STEP_VALIDATORS[step](profile):
            return step
    return None


def step_progress(step: OnboardingStep) -> float:
    """Progress bar value (percent) shown on a step's screen: n-th of 8 is n * 12.5."""
    return (STEP_ORDER.index(step) + 1) * 100 / len(STEP_ORDER)

"""
Onboarding Completion Gate.

Decides whether the user may leave onboarding for the main app. This is its
own rule, not "every step predicate holds": macro preferences are not
required here even though the macros step has a predicate.
"""

from .profile import Profile
from .steps import OnboardingStep

# Steps the gate requires, in navigation order (macros deliberately absent)
REQUIRED_STEPS = [
    OnboardingStep.LOCATION,
    OnboardingStep.DIET,
    OnboardingStep.GOALS,
    OnboardingStep.TIMINGS,
    OnboardingStep.CALORIES,
    OnboardingStep.CUISINES,
    OnboardingStep.ALLERGIES,
]


def missing_requirements(profile: Profile) -> list[OnboardingStep]:
    """Gate requirements the profile doesn't meet yet, in navigation order."""
    missing = []

    loc = profile.location
    if not (loc and loc.city and loc.country):
        missing.append(OnboardingStep.LOCATION)

    if not profile.dietary_preferences:
        missing.append(OnboardingStep.DIET)

    if not profile.primary_goal:
        missing.append(OnboardingStep.GOALS)

    timings = profile.meal_timings
    if not (timings and timings.breakfast and timings.lunch and timings.dinner):
        missing.append(OnboardingStep.TIMINGS)

    target = profile.calorie_target
    if not (isinstance(target, (int, float)) and target > 0):
        missing.append(OnboardingStep.CALORIES)

    if not profile.preferred_cuisines:
        missing.append(OnboardingStep.CUISINES)

    # Can be empty, must be set
    if profile.allergies is None:
        missing.append(OnboardingStep.ALLERGIES)

    return missing


def is_complete(profile: Profile) -> bool:
    """True iff every gate requirement is met. Use this to unlock the main app."""
    return not missing_requirements(profile)

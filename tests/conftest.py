"""
Pytest configuration and fixtures for NutriAI tests.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest

# Set test environment before importing nutriai modules
os.environ["NUTRIAI_ENV"] = "development"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from onboarding.store import ProfileStore


class FakeClock:
    """Deterministic clock: each call advances by `step` unless frozen."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Fresh store on a fake clock."""
    return ProfileStore(clock=clock)


@pytest.fixture
def required_fragments():
    """
    One fragment per completion requirement except the goal, in screen order.

    Allergies comes last and is explicitly empty.
    """
    return [
        {"location": {"city": "Lisbon", "country": "Portugal"}},
        {"dietary_preferences": ["Vegetarian"]},
        {"meal_timings": {"breakfast": "08:00", "lunch": "13:00", "dinner": "19:30"}},
        {"calorie_target": 2000},
        {"preferred_cuisines": ["Italian", "Japanese"]},
        {"allergies": []},
    ]


@pytest.fixture
def complete_store(store, required_fragments):
    """Store that passes the completion gate (no macros)."""
    store.update({"email": "ana@example.com"})
    store.update({"primary_goal": "lose-weight"})
    for fragment in required_fragments:
        store.update(fragment)
    return store


@pytest.fixture
def sample_snapshot():
    """A stored profile, as the mobile client would send it."""
    return {
        "id": "user-1",
        "email": "ana@example.com",
        "location": {"city": "Lisbon", "country": "Portugal", "latitude": 38.72, "longitude": -9.14},
        "dietaryPreferences": ["Vegetarian", "Low-Carb"],
        "primaryGoal": "eat-smarter",
        "mealTimings": {"breakfast": "08:00", "lunch": "13:00", "dinner": "19:30"},
        "calorieTarget": 1800,
        "macroPreferences": {"protein": 120},
        "preferredCuisines": ["Portuguese"],
        "allergies": [],
        "onboardingCompleted": True,
        "subscriptionTier": "premium",
        "lastUpdated": "2026-01-01T10:00:00+00:00",
    }

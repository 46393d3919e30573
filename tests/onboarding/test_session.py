"""
Tests for onboarding sessions and the session registry.
"""

from datetime import timedelta

import pytest

from onboarding.errors import OnboardingIncompleteError, SessionNotFoundError
from onboarding.forms import SignInForm
from onboarding.session import OnboardingSession, Route, SessionRegistry
from onboarding.steps import OnboardingStep
from onboarding.store import ProfileStore


@pytest.fixture
def session(store):
    return OnboardingSession(store=store)


@pytest.fixture
def signed_in(session):
    session.sign_in(SignInForm(email="ana@example.com"))
    return session


class TestRouting:
    """Where the navigator sends a session."""

    def test_signed_out_goes_to_sign_in(self, session):
        assert session.route() is Route.SIGN_IN

    def test_new_user_starts_at_location(self, signed_in):
        assert signed_in.route() is Route.LOCATION

    def test_resumes_at_first_unfinished_step(self, signed_in):
        signed_in.submit(OnboardingStep.LOCATION, {"location": {"city": "Lisbon", "country": "Portugal"}})
        signed_in.submit(OnboardingStep.DIET, {"dietary_preferences": ["Vegan"]})
        assert signed_in.route() is Route.GOALS

    def test_resume_skips_optional_macros(self, signed_in, required_fragments):
        signed_in.store.update({"primary_goal": "gain-muscle"})
        for fragment in required_fragments[:4]:
            signed_in.store.update(fragment)
        assert not signed_in.store.is_step_valid(OnboardingStep.MACROS)
        assert signed_in.route() is Route.CUISINES

    def test_complete_profile_goes_to_main(self, complete_store):
        session = OnboardingSession(store=complete_store)
        assert session.route() is Route.MAIN

    def test_route_for_every_step(self):
        for step in OnboardingStep:
            assert Route.for_step(step).value == f"onboarding_{step.value}"


class TestSubmit:

    def test_valid_step_reports_next(self, signed_in):
        result = signed_in.submit(OnboardingStep.GOALS, {"primary_goal": "lose-weight"})
        assert result.valid
        assert result.next_step is OnboardingStep.TIMINGS

    def test_invalid_answer_still_stored(self, signed_in):
        result = signed_in.submit(OnboardingStep.CALORIES, {"calorie_target": 0})
        assert not result.valid
        assert result.next_step is None
        assert signed_in.store.get_profile().calorie_target == 0

    def test_last_step_has_no_next(self, signed_in):
        result = signed_in.submit(OnboardingStep.ALLERGIES, {"allergies": []})
        assert result.valid
        assert result.next_step is None


class TestFinish:

    def test_finish_incomplete_raises(self, signed_in):
        with pytest.raises(OnboardingIncompleteError) as exc:
            signed_in.finish()
        assert OnboardingStep.LOCATION in exc.value.missing
        assert signed_in.store.get_profile().onboarding_completed is False

    def test_finish_sets_flag(self, complete_store):
        session = OnboardingSession(store=complete_store)
        session.finish()
        assert session.store.get_profile().onboarding_completed is True

    def test_sign_out_resets(self, complete_store):
        session = OnboardingSession(store=complete_store)
        session.sign_out()
        assert session.route() is Route.SIGN_IN
        assert session.store.snapshot() == {"subscriptionTier": "free", "onboardingCompleted": False}


class TestStatus:

    def test_active_then_stale(self, session):
        assert session.status() == "active"
        later = session.last_active_at + timedelta(minutes=31)
        assert session.status(later) == "stale"

    def test_expiry(self, session):
        assert not session.is_expired()
        assert session.is_expired(session.last_active_at + timedelta(hours=25))


class TestSessionRegistry:

    def test_start_and_get(self):
        registry = SessionRegistry()
        session = registry.start()
        assert registry.get(session.session_id) is session
        assert len(registry) == 1

    def test_sessions_have_separate_stores(self):
        registry = SessionRegistry()
        a = registry.start()
        b = registry.start()
        a.store.update({"primary_goal": "lose-weight"})
        assert b.store.get_profile().primary_goal is None

    def test_start_from_snapshot(self, sample_snapshot):
        session = SessionRegistry().start(sample_snapshot)
        assert session.route() is Route.MAIN

    def test_end_destroys(self):
        registry = SessionRegistry()
        session = registry.start()
        registry.end(session.session_id)
        assert session.session_id not in registry
        with pytest.raises(SessionNotFoundError):
            registry.get(session.session_id)

    def test_end_unknown_raises(self):
        with pytest.raises(SessionNotFoundError):
            SessionRegistry().end("missing")

    def test_expired_sessions_purged(self, clock):
        registry = SessionRegistry(clock=clock)
        session = registry.start()
        session.last_active_at = clock.now - timedelta(hours=30)
        assert registry.purge_expired() == [session.session_id]
        assert len(registry) == 0

    def test_hydrated_store_independent_of_snapshot(self, sample_snapshot):
        session = SessionRegistry().start(sample_snapshot)
        sample_snapshot["allergies"].append("peanuts")
        assert session.store.get_profile().allergies == []


def test_store_default_in_session():
    session = OnboardingSession()
    assert isinstance(session.store, ProfileStore)
    assert not session.signed_in

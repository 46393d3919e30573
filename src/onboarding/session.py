"""
Onboarding Sessions.

A session owns exactly one ProfileStore for one signed-in user. It is created
at sign in, reset on sign out, and destroyed when the session ends; there is
no ambient global profile. The registry keeps active sessions in process
memory only.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Literal, Mapping

from nutriai.config import get_settings

from .completion import missing_requirements
from .errors import OnboardingIncompleteError, SessionNotFoundError
from .forms import SignInForm
from .steps import OnboardingStep, next_step, validate_step
from .store import ProfileStore

logger = logging.getLogger(__name__)


SessionStatus = Literal["active", "stale"]


def _utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


class Route(Enum):
    """Where the navigator sends a session next."""
    SIGN_IN = "sign_in"
    LOCATION = "onboarding_location"
    DIET = "onboarding_diet"
    GOALS = "onboarding_goals"
    TIMINGS = "onboarding_timings"
    CALORIES = "onboarding_calories"
    MACROS = "onboarding_macros"
    CUISINES = "onboarding_cuisines"
    ALLERGIES = "onboarding_allergies"
    MAIN = "main"

    @classmethod
    def for_step(cls, step: OnboardingStep) -> "Route":
        return cls[step.name]


@dataclass
class StepResult:
    """Outcome of submitting one step."""
    step: OnboardingStep
    valid: bool
    next_step: OnboardingStep | None


@dataclass
class OnboardingSession:
    """One user's onboarding session."""
    store: ProfileStore = field(default_factory=ProfileStore)
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=_utc_now)
    last_active_at: datetime = field(default_factory=_utc_now)

    def touch(self) -> None:
        self.last_active_at = _utc_now()

    @property
    def signed_in(self) -> bool:
        profile = self.store.get_profile()
        return bool(profile.email or profile.phone)

    def sign_in(self, form: SignInForm) -> None:
        """Record identity fields from the sign-in form."""
        self.store.update(form.to_fragment())
        self.touch()
        logger.info(f"Session {self.session_id} signed in")

    def submit(self, step: OnboardingStep, fragment: Mapping[str, Any]) -> StepResult:
        """
        Apply one screen's answers and report whether that step now passes.

        The fragment is stored even when the step doesn't pass; the caller
        decides whether to let the user continue.
        """
        self.store.update(fragment)
        self.touch()
        valid = validate_step(self.store.get_profile(), step)
        return StepResult(
            step=step,
            valid=valid,
            next_step=next_step(step) if valid else None,
        )

    def route(self) -> Route:
        """
        Decide where this session belongs.

        Signed-out sessions go to sign in, complete profiles go straight to
        the main app, everything else resumes at the first step the
        completion gate still needs. Macros are optional, so a returning
        user is never sent back to that screen.
        """
        if not self.signed_in:
            return Route.SIGN_IN
        missing = missing_requirements(self.store.get_profile())
        if not missing:
            return Route.MAIN
        return Route.for_step(missing[0])

    def finish(self) -> None:
        """Mark onboarding completed. Raises if the completion gate fails."""
        profile = self.store.get_profile()
        missing = missing_requirements(profile)
        if missing:
            logger.info(
                f"Session {self.session_id} tried to finish onboarding, missing: "
                f"{[s.value for s in missing]}"
            )
            raise OnboardingIncompleteError(missing)
        self.store.update({"onboarding_completed": True})
        self.touch()
        logger.info(f"Session {self.session_id} completed onboarding")

    def sign_out(self) -> None:
        """Drop everything collected so far."""
        self.store.reset()
        self.touch()
        logger.info(f"Session {self.session_id} signed out")

    def status(self, now: datetime | None = None) -> SessionStatus:
        """"active" within the active timeout, "stale" beyond it."""
        now = now or _utc_now()
        minutes_idle = (now - self.last_active_at).total_seconds() / 60
        if minutes_idle <= get_settings().session_active_timeout_minutes:
            return "active"
        return "stale"

    def is_expired(self, now: datetime | None = None) -> bool:
        """Idle longer than the expiration threshold."""
        now = now or _utc_now()
        hours_idle = (now - self.last_active_at).total_seconds() / 3600
        return hours_idle > get_settings().session_expire_hours


class SessionRegistry:
    """
    Active sessions, keyed by session id.

    In-memory only: sessions don't survive a restart.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._sessions: dict[str, OnboardingSession] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def start(self, snapshot: Mapping[str, Any] | None = None) -> OnboardingSession:
        """Create a session, optionally hydrated from a stored profile snapshot."""
        store = ProfileStore.from_snapshot(snapshot) if snapshot else ProfileStore()
        session = OnboardingSession(store=store)
        self._sessions[session.session_id] = session
        logger.info(f"Session {session.session_id} started (hydrated={bool(snapshot)})")
        return session

    def get(self, session_id: str) -> OnboardingSession:
        """Look up an active session. Expired sessions are dropped first."""
        self.purge_expired()
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def end(self, session_id: str) -> None:
        """Destroy a session and its profile."""
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info(f"Session {session_id} ended")

    def purge_expired(self) -> list[str]:
        """Drop sessions past the expiration threshold; returns their ids."""
        now = self._clock()
        expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
            logger.info(f"Session {sid} expired")
        return expired

"""
Profile Store.

Owns the one Profile for an active session. Screens read it, hand it
fragments, and ask whether a step (or the whole flow) is done.

The store is synchronous and unlocked. It is meant to be driven by a single
actor; anything feeding it from several producers must serialize access
itself.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from .completion import is_complete
from .profile import Profile, coerce_fragment
from .steps import OnboardingStep, validate_step

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


class ProfileStore:
    """
    Holds the current partial profile.

    `update` shallow-merges a fragment and stamps `last_updated`; `reset`
    returns to defaults. Neither validates: a negative calorie target is
    stored as-is and simply reads as "incomplete" to the validators.
    """

    def __init__(
        self,
        profile: Profile | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._profile = profile.copy() if profile is not None else Profile()
        self._clock = clock

    @classmethod
    def from_snapshot(
        cls,
        data: Mapping[str, Any],
        clock: Callable[[], datetime] = _utc_now,
    ) -> "ProfileStore":
        """Hydrate a store from a stored profile snapshot."""
        return cls(Profile.from_dict(data), clock=clock)

    def get_profile(self) -> Profile:
        """Current profile. Returns a copy; edit through `update`."""
        return self._profile.copy()

    def snapshot(self) -> dict:
        """Current profile as a JSON-ready dict, for a persistence collaborator."""
        return self._profile.to_dict()

    def update(self, fragment: Mapping[str, Any]) -> None:
        """
        Shallow-merge `fragment` onto the profile and stamp `last_updated`.

        Top-level fields in the fragment replace ours wholesale (nested values
        included); fields it doesn't mention are untouched. `last_updated`
        moves on every call, even for an empty fragment, and never goes
        backwards.
        """
        changes = coerce_fragment(fragment)
        merged = self._profile.apply(changes)

        now = self._clock()
        previous = self._profile.last_updated
        if previous is not None and now < previous:
            now = previous
        merged.last_updated = now

        self._profile = merged
        logger.debug(f"Profile updated: {sorted(changes)}")

    def reset(self) -> None:
        """Back to defaults (free tier, onboarding not completed, nothing else)."""
        self._profile = Profile()
        logger.debug("Profile reset")

    def is_step_valid(self, step: "OnboardingStep | str") -> bool:
        """Whether the current profile satisfies `step`."""
        return validate_step(self._profile, step)

    def is_complete(self) -> bool:
        """Whether the current profile passes the completion gate."""
        return is_complete(self._profile)

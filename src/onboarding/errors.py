"""Onboarding exceptions."""


class OnboardingError(Exception):
    """Base class for onboarding errors."""


class UnknownProfileFieldError(OnboardingError, KeyError):
    """A profile fragment named a field the Profile doesn't have."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown profile field: {key!r}")

    def __str__(self) -> str:
        return self.args[0]


class SessionNotFoundError(OnboardingError, LookupError):
    """No active onboarding session with this id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"No active session: {session_id}")


class OnboardingIncompleteError(OnboardingError):
    """Raised when finishing onboarding before the completion gate passes."""

    def __init__(self, missing: list):
        self.missing = missing
        names = ", ".join(step.value for step in missing)
        super().__init__(f"Onboarding incomplete, missing: {names}")

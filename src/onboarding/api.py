"""
Onboarding API Endpoints.

The screens' view of the onboarding core over HTTP. Each request names its
session with the `X-Session-Id` header; the session owns the profile store.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, ValidationError

from .completion import is_complete, missing_requirements
from .errors import OnboardingIncompleteError, SessionNotFoundError, UnknownProfileFieldError
from .forms import STEP_FORMS, SignInForm, get_form_options
from .session import OnboardingSession, SessionRegistry
from .steps import STEP_ORDER, completed_steps, parse_step, step_progress, validate_step

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


# =============================================================================
# Session lookup
# =============================================================================

_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    """Process-wide session registry (overridable in tests)."""
    return _registry


def get_session(
    x_session_id: str = Header(None),
    registry: SessionRegistry = Depends(get_registry),
) -> OnboardingSession:
    """Resolve the X-Session-Id header to an active session."""
    if not x_session_id:
        raise HTTPException(status_code=401, detail="Missing X-Session-Id header")
    try:
        return registry.get(x_session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found or expired")


# =============================================================================
# Request/Response Models
# =============================================================================


class StartSessionRequest(BaseModel):
    """Start a session, optionally resuming from a stored profile."""
    snapshot: dict[str, Any] | None = None


class SessionResponse(BaseModel):
    session_id: str
    route: str
    profile: dict


class StepResponse(BaseModel):
    """Response after submitting or checking a step."""
    step: str
    valid: bool
    next_step: str | None = None
    progress: float | None = None


class StateResponse(BaseModel):
    """Current onboarding state."""
    session_id: str
    route: str
    steps: dict[str, bool]
    steps_completed: list[str]
    missing: list[str]
    complete: bool
    profile: dict


class CompleteResponse(BaseModel):
    success: bool
    route: str
    profile: dict


def _state(session: OnboardingSession) -> StateResponse:
    profile = session.store.get_profile()
    return StateResponse(
        session_id=session.session_id,
        route=session.route().value,
        steps={step.value: validate_step(profile, step) for step in STEP_ORDER},
        steps_completed=[step.value for step in completed_steps(profile)],
        missing=[step.value for step in missing_requirements(profile)],
        complete=is_complete(profile),
        profile=profile.to_dict(),
    )


# =============================================================================
# Endpoints: Session lifecycle
# =============================================================================


@router.post("/session", response_model=SessionResponse)
async def start_session(
    request: StartSessionRequest | None = None,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    """Start a session. A snapshot hydrates the profile (returning user)."""
    snapshot = request.snapshot if request else None
    try:
        session = registry.start(snapshot)
    except (UnknownProfileFieldError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid snapshot: {e}")
    return SessionResponse(
        session_id=session.session_id,
        route=session.route().value,
        profile=session.store.snapshot(),
    )


@router.delete("/session")
async def end_session(
    session: OnboardingSession = Depends(get_session),
    registry: SessionRegistry = Depends(get_registry),
) -> dict:
    """End the session. The profile is discarded."""
    registry.end(session.session_id)
    return {"success": True}


@router.post("/sign-in", response_model=SessionResponse)
async def sign_in(
    form: SignInForm,
    session: OnboardingSession = Depends(get_session),
) -> SessionResponse:
    """Record the user's email and/or phone."""
    session.sign_in(form)
    return SessionResponse(
        session_id=session.session_id,
        route=session.route().value,
        profile=session.store.snapshot(),
    )


# =============================================================================
# Endpoints: Profile
# =============================================================================


@router.get("/profile")
async def get_profile(session: OnboardingSession = Depends(get_session)) -> dict:
    """Current profile snapshot."""
    return session.store.snapshot()


@router.patch("/profile")
async def update_profile(
    fragment: dict[str, Any],
    session: OnboardingSession = Depends(get_session),
) -> dict:
    """Shallow-merge a partial profile. No validation beyond field names."""
    try:
        session.store.update(fragment)
    except UnknownProfileFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid value: {e}")
    session.touch()
    return session.store.snapshot()


@router.delete("/profile")
async def reset_profile(session: OnboardingSession = Depends(get_session)) -> dict:
    """Sign out: reset the profile to defaults."""
    session.sign_out()
    return session.store.snapshot()


# =============================================================================
# Endpoints: Steps
# =============================================================================


@router.get("/options")
async def get_options() -> dict:
    """Options for rendering the step screens."""
    return get_form_options()


@router.get("/state", response_model=StateResponse)
async def get_state(session: OnboardingSession = Depends(get_session)) -> StateResponse:
    """Per-step validity, completion, and where to route the user."""
    return _state(session)


@router.get("/steps/{step_key}", response_model=StepResponse)
async def check_step(
    step_key: str,
    session: OnboardingSession = Depends(get_session),
) -> StepResponse:
    """Whether one step is satisfied. Unknown steps report `valid: false`."""
    step = parse_step(step_key)
    return StepResponse(
        step=step_key,
        valid=session.store.is_step_valid(step_key),
        progress=step_progress(step) if step else None,
    )


@router.post("/steps/{step_key}", response_model=StepResponse)
async def submit_step(
    step_key: str,
    answers: dict[str, Any],
    session: OnboardingSession = Depends(get_session),
) -> StepResponse:
    """Validate a step's form, store its fragment, report whether the step passes."""
    step = parse_step(step_key)
    if step is None:
        raise HTTPException(status_code=404, detail=f"Unknown step: {step_key}")

    form_cls = STEP_FORMS[step.value]
    try:
        form = form_cls(**answers)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=[err["msg"] for err in e.errors()],
        )

    result = session.submit(step, form.to_fragment())
    return StepResponse(
        step=step.value,
        valid=result.valid,
        next_step=result.next_step.value if result.next_step else None,
        progress=step_progress(step),
    )


@router.post("/complete", response_model=CompleteResponse)
async def complete_onboarding(
    session: OnboardingSession = Depends(get_session),
) -> CompleteResponse:
    """Finish onboarding. 409 with the missing steps if the gate fails."""
    try:
        session.finish()
    except OnboardingIncompleteError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "message": "Onboarding incomplete",
                "missing": [step.value for step in e.missing],
            },
        )
    return CompleteResponse(
        success=True,
        route=session.route().value,
        profile=session.store.snapshot(),
    )

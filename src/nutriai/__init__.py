"""
NutriAI - food and nutrition companion app backend.

The onboarding flow (profile accumulation and step gating) lives in the
separate `onboarding` package; this package carries settings, the web app
and the CLI.
"""

__version__ = "1.0.0"

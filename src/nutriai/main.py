"""
NutriAI - CLI Entry Point.

Usage:
    nutriai onboard          Walk through onboarding in the terminal
    nutriai steps            Show the onboarding steps
    nutriai health           Check configuration
    nutriai serve            Start the API server
"""

import json

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from onboarding.completion import REQUIRED_STEPS, missing_requirements
from onboarding.forms import GOAL_OPTIONS, STEP_FORMS, SignInForm
from onboarding.profile import DIET_OPTIONS
from onboarding.session import OnboardingSession
from onboarding.steps import STEP_ORDER, OnboardingStep, step_progress

app = typer.Typer(
    name="nutriai",
    help="NutriAI - personalized meals, starting with your profile.",
    add_completion=False,
)
console = Console()


# Prompts per step: (form field, question, is_list)
STEP_PROMPTS: dict[OnboardingStep, list[tuple[str, str, bool]]] = {
    OnboardingStep.LOCATION: [
        ("city", "City", False),
        ("country", "Country", False),
    ],
    OnboardingStep.DIET: [
        ("dietary_preferences", "Diets (comma separated)", True),
    ],
    OnboardingStep.GOALS: [
        ("primary_goal", "Primary goal", False),
    ],
    OnboardingStep.TIMINGS: [
        ("breakfast", "Breakfast time", False),
        ("lunch", "Lunch time", False),
        ("dinner", "Dinner time", False),
    ],
    OnboardingStep.CALORIES: [
        ("calorie_target", "Daily calorie target", False),
    ],
    OnboardingStep.MACROS: [
        ("protein", "Protein (g, blank to skip)", False),
        ("carbs", "Carbs (g)", False),
        ("fat", "Fat (g)", False),
    ],
    OnboardingStep.CUISINES: [
        ("preferred_cuisines", "Favorite cuisines (comma separated)", True),
    ],
    OnboardingStep.ALLERGIES: [
        ("allergies", "Allergies (comma separated, blank for none)", True),
    ],
}

STEP_HINTS = {
    OnboardingStep.DIET: ", ".join(DIET_OPTIONS),
    OnboardingStep.GOALS: ", ".join(g["id"] for g in GOAL_OPTIONS),
}


def _ask(question: str) -> str:
    return console.input(f"[bold blue]{question}:[/bold blue] ").strip()


def _collect_answers(step: OnboardingStep) -> dict:
    answers: dict = {}
    for field_name, question, is_list in STEP_PROMPTS[step]:
        raw = _ask(question)
        if is_list:
            answers[field_name] = [part for part in raw.split(",") if part.strip()]
        elif raw:
            answers[field_name] = raw
        if step == OnboardingStep.MACROS and field_name == "protein" and not raw:
            break
    return answers


def _run_step(session: OnboardingSession, step: OnboardingStep) -> None:
    """Prompt for one step until it passes (macros may be skipped)."""
    console.print(f"\n[bold]{step.value.title()}[/bold] [dim]({step_progress(step):g}%)[/dim]")
    if step in STEP_HINTS:
        console.print(f"[dim]Options: {STEP_HINTS[step]}[/dim]")

    while True:
        answers = _collect_answers(step)
        if step == OnboardingStep.MACROS and "protein" not in answers:
            console.print("[dim]Skipped.[/dim]")
            return
        try:
            form = STEP_FORMS[step.value](**answers)
        except ValidationError as e:
            for err in e.errors():
                console.print(f"[red]{err['msg']}[/red]")
            continue

        result = session.submit(step, form.to_fragment())
        if result.valid:
            console.print("[green]OK[/green]")
            return
        console.print("[yellow]That doesn't complete this step yet, try again.[/yellow]")


@app.command()
def onboard() -> None:
    """Walk through onboarding and print the resulting profile."""
    console.print(
        Panel.fit(
            "[bold green]Welcome to NutriAI[/bold green]\n"
            "A few questions to personalize your meals.\n\n"
            "[dim]Press Ctrl+C to quit.[/dim]",
            title="Onboarding",
            border_style="green",
        )
    )

    session = OnboardingSession()

    try:
        while not session.signed_in:
            try:
                form = SignInForm(email=_ask("Email") or None, phone=_ask("Phone") or None)
            except ValidationError as e:
                for err in e.errors():
                    console.print(f"[red]{err['msg']}[/red]")
                continue
            session.sign_in(form)

        for step in STEP_ORDER:
            _run_step(session, step)
    except (KeyboardInterrupt, EOFError):
        console.print("\n\n[dim]Onboarding interrupted. Nothing was saved.[/dim]")
        raise typer.Exit(1)

    session.finish()
    console.print(f"\n[green]Onboarding complete![/green] Route: {session.route().value}")
    console.print_json(json.dumps(session.store.snapshot()))


@app.command()
def steps() -> None:
    """List the onboarding steps and which the completion gate requires."""
    table = Table(title="Onboarding Steps")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Progress", justify="right")
    table.add_column("Required")

    for idx, step in enumerate(STEP_ORDER, start=1):
        required = "yes" if step in REQUIRED_STEPS else "[dim]no[/dim]"
        table.add_row(str(idx), step.value, f"{step_progress(step):g}%", required)

    console.print(table)


@app.command()
def check(
    snapshot: typer.FileText = typer.Argument(..., help="Profile snapshot JSON file"),
) -> None:
    """Check a stored profile snapshot against the completion gate."""
    from onboarding.store import ProfileStore

    store = ProfileStore.from_snapshot(json.load(snapshot))
    for step in STEP_ORDER:
        mark = "[green]OK[/green]" if store.is_step_valid(step) else "[red]--[/red]"
        console.print(f"{mark} {step.value}")

    if store.is_complete():
        console.print("\n[green]Complete[/green]")
        return

    missing = ", ".join(s.value for s in missing_requirements(store.get_profile()))
    console.print(f"\n[yellow]Incomplete[/yellow], missing: {missing}")
    raise typer.Exit(1)


@app.command()
def health() -> None:
    """Check configuration."""
    from nutriai.config import get_settings

    console.print("\n[bold]NutriAI Health Check[/bold]\n")

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Check your .env file and environment variables.[/dim]")
        raise typer.Exit(1)

    console.print("[green]OK[/green] Configuration loaded")
    console.print(f"   Environment: {settings.nutriai_env}")
    console.print(f"   Log level: {settings.log_level}")
    console.print(f"   Session expiry: {settings.session_expire_hours}h")


@app.command()
def version() -> None:
    """Show version information."""
    from nutriai import __version__

    console.print(f"NutriAI version {__version__}")


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print("\n[bold green]NutriAI API[/bold green]")
    console.print(f"Starting server on http://localhost:{port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "nutriai.web.app:app",
        host="0.0.0.0",
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()

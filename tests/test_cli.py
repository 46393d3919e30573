"""
Tests for the nutriai CLI.
"""

import json

from typer.testing import CliRunner

from nutriai.main import app

runner = CliRunner()


WALKTHROUGH = "\n".join([
    "ana@example.com",  # email
    "",                 # phone
    "Lisbon",
    "Portugal",
    "Vegan, Keto",
    "lose-weight",
    "08:00",
    "13:00",
    "19:00",
    "2000",
    "",                 # protein blank: skip macros
    "Thai",
    "",                 # no allergies
]) + "\n"


class TestOnboardCommand:

    def test_full_walkthrough(self):
        result = runner.invoke(app, ["onboard"], input=WALKTHROUGH)
        assert result.exit_code == 0, result.output
        assert "Onboarding complete!" in result.output
        assert "Route: main" in result.output
        assert '"onboardingCompleted": true' in result.output

    def test_invalid_goal_reprompts(self):
        answers = WALKTHROUGH.replace("lose-weight\n", "get-rich\nlose-weight\n")
        result = runner.invoke(app, ["onboard"], input=answers)
        assert result.exit_code == 0, result.output
        assert "Please select a valid goal option." in result.output

    def test_running_out_of_input_exits(self):
        result = runner.invoke(app, ["onboard"], input="ana@example.com\n\nLisbon\n")
        assert result.exit_code == 1
        assert "Onboarding interrupted" in result.output


class TestInfoCommands:

    def test_steps_table(self):
        result = runner.invoke(app, ["steps"])
        assert result.exit_code == 0
        assert "allergies" in result.output
        assert "12.5%" in result.output

    def test_health(self):
        result = runner.invoke(app, ["health"])
        assert result.exit_code == 0
        assert "Configuration loaded" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert "1.0.0" in result.output


class TestCheckCommand:

    def test_complete_snapshot(self, tmp_path, sample_snapshot):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps(sample_snapshot))
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 0
        assert "Complete" in result.output

    def test_incomplete_snapshot(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"primaryGoal": "lose-weight", "allergies": []}))
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 1
        assert "missing: location, diet, timings, calories, cuisines" in result.output

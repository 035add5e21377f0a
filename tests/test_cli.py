"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from sprint_scheduler.cli import app

runner = CliRunner()


@pytest.fixture
def oversized_file(tmp_path, input_dict):
    """Input with a ticket larger than a sprint."""
    input_dict["tickets"].append({"key": "HUGE-1", "epicKey": "E-1", "devDays": 12})
    path = tmp_path / "oversized.json"
    path.write_text(json.dumps(input_dict), encoding="utf-8")
    return path


@pytest.fixture
def no_capacity_file(tmp_path, input_dict):
    """Input whose sprints have no capacity configuration."""
    input_dict["sprintCapacities"] = []
    path = tmp_path / "no-capacity.json"
    path.write_text(json.dumps(input_dict), encoding="utf-8")
    return path


class TestScheduleCommand:
    """Tests for the schedule command."""

    def test_prints_summary(self, input_file):
        """Test a run prints the schedule summary."""
        result = runner.invoke(app, ["schedule", str(input_file)])

        assert result.exit_code == 0
        assert "Schedule Results" in result.output
        assert "Scheduled tickets: 3" in result.output

    def test_json_output(self, input_file, tmp_path):
        """Test -o writes the result as JSON."""
        output = tmp_path / "schedule.json"
        result = runner.invoke(app, ["schedule", str(input_file), "-o", str(output)])

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["totalDevDays"] == 6

    def test_excel_output_gets_suffix(self, input_file, tmp_path):
        """Test Excel output without a suffix is written as .xlsx."""
        output = tmp_path / "schedule"
        result = runner.invoke(
            app, ["schedule", str(input_file), "-f", "excel", "-o", str(output)]
        )

        assert result.exit_code == 0
        assert (tmp_path / "schedule.xlsx").exists()

    def test_csv_output_directory(self, input_file, tmp_path):
        """Test CSV output goes to a directory."""
        output = tmp_path / "csv-out"
        result = runner.invoke(app, ["schedule", str(input_file), "-f", "csv", "-o", str(output)])

        assert result.exit_code == 0
        assert (output / "tickets.csv").exists()

    def test_oversized_ticket_exits_1(self, oversized_file):
        """Test engine errors are reported and exit with status 1."""
        result = runner.invoke(app, ["schedule", str(oversized_file)])

        assert result.exit_code == 1
        assert "HUGE-1" in result.output

    def test_overrides_file(self, input_file, tmp_path):
        """Test sprint date overrides are applied from a file."""
        overrides = tmp_path / "overrides.json"
        overrides.write_text(
            json.dumps([{"sprintId": 1, "startDate": "2024-01-10", "endDate": "2024-01-22"}]),
            encoding="utf-8",
        )
        output = tmp_path / "schedule.json"
        result = runner.invoke(
            app,
            ["schedule", str(input_file), "--overrides", str(overrides), "-o", str(output)],
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["projectStartDate"] == "2024-01-10"

    def test_max_developers_option(self, input_file, tmp_path):
        """Test --max-developers replaces the input's daily capacity."""
        output = tmp_path / "schedule.json"
        result = runner.invoke(
            app,
            ["schedule", str(input_file), "--max-developers", "4", "-o", str(output)],
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["dailyCapacities"][0]["totalCapacity"] == 4

    def test_verbose(self, input_file):
        """Test verbose mode runs with debug logging."""
        result = runner.invoke(app, ["schedule", str(input_file), "-v"])
        assert result.exit_code == 0


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_input(self, input_file):
        """Test a clean input validates with warnings only."""
        result = runner.invoke(app, ["validate", str(input_file)])

        assert result.exit_code == 0
        assert "Input is valid" in result.output
        assert "estimate is missing" in result.output

    def test_oversized_ticket(self, oversized_file):
        """Test oversized tickets fail validation."""
        result = runner.invoke(app, ["validate", str(oversized_file)])

        assert result.exit_code == 1
        assert "Input has issues" in result.output

    def test_no_capacity(self, no_capacity_file):
        """Test sprints without capacity fail validation."""
        result = runner.invoke(app, ["validate", str(no_capacity_file)])

        assert result.exit_code == 1
        assert "No valid sprints" in result.output

    def test_missing_file(self, tmp_path):
        """Test a missing file is reported."""
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "File not found" in result.output


class TestCapacityCommand:
    """Tests for the capacity command."""

    def test_total_capacity(self, input_file):
        """Test the capacity total honors per-day overrides."""
        result = runner.invoke(app, ["capacity", str(input_file)])

        assert result.exit_code == 0
        # 20 work days at 2 developers, one day reduced to 1
        assert "Total capacity: 39 dev days" in result.output


class TestSlotPlanCommand:
    """Tests for the slot-plan command."""

    def test_future_only_by_default(self, input_file):
        """Test tickets in the active sprint are not planned for write-back."""
        result = runner.invoke(app, ["slot-plan", str(input_file)])

        assert result.exit_code == 0
        assert "Slot plan (0 tickets)" in result.output

    def test_all_sprints_export(self, input_file, tmp_path):
        """Test --all-sprints includes every placed ticket."""
        output = tmp_path / "plan.json"
        result = runner.invoke(
            app, ["slot-plan", str(input_file), "--all-sprints", "-o", str(output)]
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert [u["ticketKey"] for u in data["updates"]] == ["T-1", "T-3", "T-2"]

"""Tests for the shared reading formatter and the assessment prompt."""

from src.agents.prompts import format_number, format_readings
from src.agents.prompts import assessment
from src.models.experiment import SensorReadings


class TestFormatting:
    def test_whole_numbers_drop_decimal(self) -> None:
        assert format_number(350.0) == "350"
        assert format_number(7.25) == "7.25"

    def test_readings_with_units(self) -> None:
        lines = format_readings(SensorReadings(ph=7.2, tds=350, turbidity=0))
        assert lines == [
            "pH: 7.2",
            "TDS (Total Dissolved Solids): 350 ppm",
            "Turbidity: 0 NTU",
        ]

    def test_absent_readings_not_measured(self) -> None:
        lines = format_readings(SensorReadings(tds=120))
        assert lines[0] == "pH: Not measured"
        assert lines[2] == "Turbidity: Not measured"


class TestAssessmentPrompt:
    def test_includes_readings(self) -> None:
        prompt = assessment.build_prompt(SensorReadings(ph=9.1))
        assert "pH: 9.1" in prompt
        assert "TDS (Total Dissolved Solids): Not measured" in prompt

"""Prompt template for the water-quality assessment.

Asks for a short plain-language summary and, only when quality is
suboptimal, remediation advice. The answer is a JSON object with
"summary" and "solution".
"""

from src.agents.prompts import format_readings
from src.models.experiment import SensorReadings

SYSTEM_PROMPT = (
    "You are a water quality expert. "
    "Provide clear, concise analysis in JSON format."
)


def build_prompt(readings: SensorReadings) -> str:
    """Build the assessment prompt from the submitted readings."""
    lines = [
        "You are a water quality expert. Analyze the following water quality "
        "test results and provide a comprehensive assessment:",
        "",
        *format_readings(readings),
        "",
        "Please provide:",
        "1. A summary of the results (2-3 sentences) - explain what these "
        "values mean and whether they indicate good or poor water quality",
        "2. If the water quality is not optimal, provide specific solutions "
        "and recommendations to improve it",
        "",
        'Format your response as JSON with two fields: "summary" and '
        '"solution". If the water quality is good, set "solution" to an '
        "empty string.",
    ]
    return "\n".join(lines)

"""Prompt template for matching a new experiment against the historical bank.

The bank is inlined as an enumerated listing, one sample per line, with
"N/A" for anything the sample did not record. The answer is free text.
"""

from src.agents.prompts import NOT_AVAILABLE, format_number, format_readings
from src.models.experiment import HistoricalSample, SensorReadings

SYSTEM_PROMPT = (
    "You are a water quality data analyst. "
    "Write clear, natural explanations in plain text."
)


def _value(value: object) -> str:
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def format_sample(index: int, sample: HistoricalSample) -> str:
    """Render one bank sample as a single listing line (1-based index)."""
    return (
        f"Experiment {index}: "
        f"pH={_value(sample.ph)}, "
        f"TDS={_value(sample.tds)} ppm, "
        f"Turbidity={_value(sample.turbidity)} NTU, "
        f"Longitude={_value(sample.longitude)}, "
        f"Latitude={_value(sample.latitude)}, "
        f"Date={_value(sample.date)}, "
        f"Time={_value(sample.time)}"
    )


def build_prompt(
    readings: SensorReadings,
    samples: list[HistoricalSample],
) -> str:
    """Build the similarity prompt for the submitted readings and samples."""
    lines = [
        "You are a water quality data analyst. I have water quality test "
        "results from a new experiment:",
        *format_readings(readings),
        "",
        "Here is a list of historical experiments from our database:",
    ]
    lines.extend(
        format_sample(idx, sample) for idx, sample in enumerate(samples, start=1)
    )
    lines.extend([
        "",
        "Please analyze these historical experiments and identify which one "
        "has the most similar pH, TDS, and turbidity values to the new "
        "experiment. Write a brief analysis (2-3 sentences) explaining which "
        "experiment is most similar, why it's similar, and translate the "
        "longitude and latitude coordinates into the country name where that "
        "experiment was conducted. Write naturally in plain text, as if "
        "explaining to a colleague.",
    ])
    return "\n".join(lines)

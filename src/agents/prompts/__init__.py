"""Prompt templates for the water-quality agents, plus the shared reading formatter."""

from src.models.experiment import SensorReadings

NOT_MEASURED = "Not measured"
NOT_AVAILABLE = "N/A"


def format_number(value: float) -> str:
    """Render 350.0 as "350" and 7.25 as "7.25"."""
    if value.is_integer():
        return str(int(value))
    return str(value)


def format_readings(readings: SensorReadings) -> list[str]:
    """One line per sensor with units; absent readings say "Not measured"."""
    ph = format_number(readings.ph) if readings.ph is not None else NOT_MEASURED
    tds = (
        f"{format_number(readings.tds)} ppm"
        if readings.tds is not None else NOT_MEASURED
    )
    turbidity = (
        f"{format_number(readings.turbidity)} NTU"
        if readings.turbidity is not None else NOT_MEASURED
    )
    return [
        f"pH: {ph}",
        f"TDS (Total Dissolved Solids): {tds}",
        f"Turbidity: {turbidity}",
    ]

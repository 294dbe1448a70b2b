"""Schedule conflict and capacity validation for day-camp schedules."""

from campcheck.validator import validate_schedule, validate_snapshot

__version__ = "0.1.0"

__all__ = ["__version__", "validate_schedule", "validate_snapshot"]
